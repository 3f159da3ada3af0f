"""Page progress store.

Authoritative record of a student's reading session for one material. All
navigation and download decisions are made from what is stored here, and
every state transition re-reads the stored row before it is accepted.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import case, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from readgate.core.config import settings
from readgate.core.errors import (
    InvalidPageCountError,
    InvalidTimeError,
    MaximumExceededError,
    NotFoundError,
    OutOfRangeError,
    SequenceViolationError,
    ThresholdNotMetError,
)
from readgate.models import Material, MaterialPageProgress, PageProgress
from readgate.schemas import PageState, ReadingProgress, ReadingSession
from readgate.services import navigation
from readgate.services.download_gate import can_download

logger = logging.getLogger(__name__)


def _material_uuid(material_id) -> uuid.UUID:
    if isinstance(material_id, uuid.UUID):
        return material_id
    try:
        return uuid.UUID(str(material_id))
    except ValueError:
        raise NotFoundError(f"Unknown material id: {material_id}")


class PageProgressStore:
    def __init__(self, db: Session, student_id: uuid.UUID):
        self.db = db
        self.student_id = student_id

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def _query(self, material_id, for_update: bool = False):
        material_id = _material_uuid(material_id)
        query = self.db.query(MaterialPageProgress).options(
            selectinload(MaterialPageProgress.pages)
        ).filter(
            MaterialPageProgress.student_id == self.student_id,
            MaterialPageProgress.material_id == material_id,
        )
        if for_update:
            query = query.with_for_update()
        return query

    def _find(self, material_id) -> Optional[MaterialPageProgress]:
        return self._query(material_id).first()

    def initialize(self, material_id, total_pages: int) -> MaterialPageProgress:
        """Create the session, or return the existing one unchanged."""
        if total_pages is None or total_pages < 1:
            raise InvalidPageCountError(f"totalPages must be at least 1, got {total_pages}")
        material_id = _material_uuid(material_id)

        existing = self._find(material_id)
        if existing:
            if existing.total_pages != total_pages:
                logger.info(
                    "Ignoring totalPages=%s for existing session %s (has %s)",
                    total_pages, existing.id, existing.total_pages,
                )
            return existing

        material = self.db.query(Material).filter(Material.id == material_id).first()
        now = datetime.utcnow()
        session = MaterialPageProgress(
            student_id=self.student_id,
            material_id=material_id,
            course_id=material.course_id if material else None,
            total_pages=total_pages,
            completed_pages=0,
            current_page=1,
            session_start_time=now,
            last_activity=now,
        )
        for page_number in range(1, total_pages + 1):
            session.pages.append(PageProgress(
                page_number=page_number,
                time_spent=0,
                is_completed=False,
                can_proceed=page_number == 1,
            ))
        self.db.add(session)
        try:
            self.db.commit()
        except IntegrityError:
            # a concurrent initialize won the insert
            self.db.rollback()
            return self.get(material_id)
        logger.info("Initialized reading session %s (%s pages)", session.id, total_pages)
        return self.get(material_id)

    def get(self, material_id) -> MaterialPageProgress:
        session = self._find(material_id)
        if not session:
            raise NotFoundError("Reading session not found. Initialize the material first.")
        return session

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _check_range(self, session: MaterialPageProgress, page_number: int):
        if not navigation.in_range(session, page_number):
            raise OutOfRangeError(
                f"Page {page_number} is outside 1..{session.total_pages}"
            )

    def _check_enterable(self, session: MaterialPageProgress, page_number: int):
        self._check_range(session, page_number)
        if not navigation.can_enter(session, page_number):
            raise SequenceViolationError(
                f"Complete page {page_number - 1} before moving to page {page_number}"
            )

    def start_page(self, material_id, page_number: int) -> MaterialPageProgress:
        session = self._query(material_id, for_update=True).first()
        if not session:
            raise NotFoundError("Reading session not found. Initialize the material first.")
        try:
            self._check_enterable(session, page_number)
        except (OutOfRangeError, SequenceViolationError):
            self.db.rollback()
            raise

        now = datetime.utcnow()
        page = session.page(page_number)
        page.start_time = now
        session.current_page = page_number
        session.last_activity = now
        self.db.commit()
        return self.get(material_id)

    def commit_page_time(self, material_id, page_number: int, time_spent: int) -> MaterialPageProgress:
        """Merge a checkpoint as max(stored, incoming).

        The merge happens in a single UPDATE so a stale checkpoint arriving
        late can never lower the stored value.
        """
        if time_spent is None or time_spent < 0:
            raise InvalidTimeError(f"timeSpent must be a non-negative number of seconds, got {time_spent}")

        session = self.get(material_id)
        self._check_range(session, page_number)

        self.db.execute(
            update(PageProgress)
            .where(
                PageProgress.session_id == session.id,
                PageProgress.page_number == page_number,
            )
            .values(time_spent=case(
                (PageProgress.time_spent < time_spent, time_spent),
                else_=PageProgress.time_spent,
            ))
            .execution_options(synchronize_session=False)
        )
        session.last_activity = datetime.utcnow()
        self.db.commit()
        self.db.expire_all()
        return self.get(material_id)

    def complete_page(self, material_id, page_number: int) -> MaterialPageProgress:
        """Mark a page completed after re-validating the stored time."""
        session = self._query(material_id, for_update=True).first()
        if not session:
            raise NotFoundError("Reading session not found. Initialize the material first.")
        self._check_range(session, page_number)

        page = session.page(page_number)
        if page.is_completed:
            self.db.rollback()
            return self.get(material_id)

        if page_number > 1 and not session.page(page_number - 1).is_completed:
            self.db.rollback()
            raise SequenceViolationError(
                f"Complete page {page_number - 1} before completing page {page_number}"
            )

        min_time = settings.MIN_TIME_SECONDS
        max_time = settings.MAX_TIME_SECONDS
        if page.time_spent < min_time:
            remaining = min_time - page.time_spent
            self.db.rollback()
            raise ThresholdNotMetError(
                f"Spend at least {min_time // 60} minutes on page {page_number}. "
                f"Wait {remaining} more seconds.",
                remaining_seconds=remaining,
            )
        if page.time_spent > max_time:
            self.db.rollback()
            raise MaximumExceededError(
                f"Page {page_number} exceeded the {max_time // 60} minute limit and can no longer be completed"
            )

        now = datetime.utcnow()
        page.is_completed = True
        page.end_time = now
        next_page = session.page(page_number + 1)
        if next_page is not None:
            next_page.can_proceed = True
            session.current_page = page_number + 1
        session.completed_pages = sum(1 for p in session.pages if p.is_completed)
        session.last_activity = now
        self.db.commit()
        logger.info(
            "Student %s completed page %s of material %s (%s/%s)",
            self.student_id, page_number, material_id,
            session.completed_pages, session.total_pages,
        )
        return self.get(material_id)

    def current_page(self, material_id) -> int:
        return self.get(material_id).current_page

    def set_current_page(self, material_id, page_number: int) -> MaterialPageProgress:
        session = self._query(material_id, for_update=True).first()
        if not session:
            raise NotFoundError("Reading session not found. Initialize the material first.")
        try:
            self._check_enterable(session, page_number)
        except (OutOfRangeError, SequenceViolationError):
            self.db.rollback()
            raise
        session.current_page = page_number
        session.last_activity = datetime.utcnow()
        self.db.commit()
        return self.get(material_id)

    def page_progress(self, material_id, page_number: int) -> PageState:
        session = self.get(material_id)
        self._check_range(session, page_number)
        return to_page_state(session.page(page_number))

    def reading_progress(self, material_id) -> ReadingProgress:
        return to_reading_progress(self.get(material_id))


def to_page_state(page: PageProgress) -> PageState:
    return PageState(
        page_number=page.page_number,
        time_spent=page.time_spent or 0,
        is_completed=bool(page.is_completed),
        can_proceed=bool(page.can_proceed),
        min_time_required=settings.MIN_TIME_SECONDS,
        max_time_allowed=settings.MAX_TIME_SECONDS,
        start_time=page.start_time,
        end_time=page.end_time,
    )


def to_reading_session(session: MaterialPageProgress) -> ReadingSession:
    return ReadingSession(
        id=str(session.id),
        student_id=str(session.student_id),
        material_id=str(session.material_id),
        course_id=str(session.course_id) if session.course_id else None,
        pages=[to_page_state(p) for p in session.pages],
        total_pages=session.total_pages,
        completed_pages=session.completed_pages,
        can_download=can_download(session).can_download,
        current_page=session.current_page,
        session_start_time=session.session_start_time,
        last_activity=session.last_activity,
    )


def to_reading_progress(session: MaterialPageProgress) -> ReadingProgress:
    decision = can_download(session)
    return ReadingProgress(
        completed_pages=decision.completed_pages,
        total_pages=decision.total_pages,
        progress_percentage=round(decision.completed_pages / decision.total_pages * 100, 2),
        total_time_spent=sum(p.time_spent or 0 for p in session.pages),
        can_download=decision.can_download,
        current_page=session.current_page,
    )
