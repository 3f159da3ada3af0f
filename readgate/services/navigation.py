"""Sequential page unlocking.

Pure functions over a session snapshot: either the ORM ``MaterialPageProgress``
or the ``ReadingSession`` schema. Both expose ``current_page``,
``total_pages`` and ``page(n)``.
"""
from enum import Enum


class PageStatus(str, Enum):
    COMPLETED = "completed"
    CAN_PROCEED = "can_proceed"
    CURRENT = "current"
    LOCKED = "locked"


def _is_completed(session, page_number: int) -> bool:
    page = session.page(page_number)
    return bool(page is not None and page.is_completed)


def in_range(session, page: int) -> bool:
    return 1 <= page <= session.total_pages


def can_enter(session, page: int) -> bool:
    """Return True if the student may move to ``page`` now.

    Page 1 and the current page are always enterable; any other page needs
    its predecessor completed. Backward moves pass because every page before
    the current one has been completed to get there.
    """
    if not in_range(session, page):
        return False
    if page == 1 or page == session.current_page:
        return True
    return _is_completed(session, page - 1)


def next_available_page(session) -> int:
    """Page a "Next" action would land on (the current page when locked)."""
    candidate = session.current_page + 1
    if can_enter(session, candidate):
        return candidate
    return session.current_page


def page_status(session, page: int) -> PageStatus:
    if _is_completed(session, page):
        return PageStatus.COMPLETED
    if page == session.current_page:
        return PageStatus.CURRENT
    if can_enter(session, page):
        return PageStatus.CAN_PROCEED
    return PageStatus.LOCKED
