from conftest import make_session
from readgate.services.navigation import PageStatus, can_enter, next_available_page, page_status


def test_first_page_always_enterable():
    session = make_session(total_pages=3)
    assert can_enter(session, 1) is True


def test_locked_page_without_completed_predecessor():
    session = make_session(total_pages=3)
    assert can_enter(session, 2) is False
    assert can_enter(session, 3) is False


def test_page_unlocks_after_predecessor_completed():
    session = make_session(total_pages=3, completed={1}, current_page=2)
    assert can_enter(session, 2) is True
    assert can_enter(session, 3) is False


def test_current_page_is_always_reenterable():
    session = make_session(total_pages=3, current_page=2)
    assert can_enter(session, 2) is True


def test_backward_navigation_allowed():
    session = make_session(total_pages=3, completed={1, 2}, current_page=3)
    assert can_enter(session, 1) is True
    assert can_enter(session, 2) is True


def test_out_of_range_pages_never_enterable():
    session = make_session(total_pages=3, completed={1, 2, 3}, current_page=3)
    assert can_enter(session, 0) is False
    assert can_enter(session, 4) is False


def test_next_available_page():
    assert next_available_page(make_session(total_pages=3)) == 1
    assert next_available_page(make_session(total_pages=3, completed={1}, current_page=1)) == 2
    # last page has nowhere to go
    assert next_available_page(make_session(total_pages=2, completed={1, 2}, current_page=2)) == 2


def test_page_status_labels():
    session = make_session(total_pages=4, completed={1}, current_page=2)
    assert page_status(session, 1) == PageStatus.COMPLETED
    assert page_status(session, 2) == PageStatus.CURRENT
    assert page_status(session, 3) == PageStatus.LOCKED

    session = make_session(total_pages=4, completed={1, 2}, current_page=2)
    assert page_status(session, 3) == PageStatus.CAN_PROCEED
