"""Per-page reading timer.

The timer is a plain state machine over explicit ``PageTimerState`` values.
It never talks to storage directly: commands go to a committer, which is
either ``StoreCommitter`` (in process) or ``MaterialProgressClient`` (over
HTTP). ``TimerTicker`` accrues time from an asyncio task and hands commits
to a worker thread.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Protocol

from readgate.core.config import settings
from readgate.core.errors import MaximumExceededError, NetworkError, OutOfRangeError, ThresholdNotMetError

logger = logging.getLogger(__name__)


class TimerStatus(str, Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"


class ThresholdState(str, Enum):
    BELOW_MINIMUM = "below_minimum"
    WITHIN_WINDOW = "within_window"
    APPROACHING_MAXIMUM = "approaching_maximum"
    EXCEEDED_MAXIMUM = "exceeded_maximum"


class Committer(Protocol):
    def start_page(self, material_id: str, page_number: int): ...

    def commit_page_time(self, material_id: str, page_number: int, time_spent: int): ...

    def complete_page(self, material_id: str, page_number: int): ...


@dataclass
class PageTimerState:
    page_number: int
    time_spent: int = 0
    status: TimerStatus = TimerStatus.NOT_STARTED
    start_time: Optional[datetime] = None
    last_committed: int = 0
    next_checkpoint: int = 0


def threshold_state(
    time_spent: int,
    min_time: Optional[int] = None,
    max_time: Optional[int] = None,
    warning_window: Optional[int] = None,
) -> ThresholdState:
    min_time = settings.MIN_TIME_SECONDS if min_time is None else min_time
    max_time = settings.MAX_TIME_SECONDS if max_time is None else max_time
    warning_window = settings.MAX_TIME_WARNING_SECONDS if warning_window is None else warning_window

    if time_spent > max_time:
        return ThresholdState.EXCEEDED_MAXIMUM
    if time_spent >= max_time - warning_window:
        return ThresholdState.APPROACHING_MAXIMUM
    if time_spent >= min_time:
        return ThresholdState.WITHIN_WINDOW
    return ThresholdState.BELOW_MINIMUM


class PageTimer:
    """Tracks active reading time for one material; one page accrues at a time."""

    def __init__(
        self,
        material_id: str,
        committer: Committer,
        checkpoint_interval: Optional[int] = None,
        min_time: Optional[int] = None,
        max_time: Optional[int] = None,
        total_pages: Optional[int] = None,
    ):
        self.material_id = material_id
        self.total_pages = total_pages
        self.committer = committer
        self.checkpoint_interval = checkpoint_interval or settings.CHECKPOINT_INTERVAL_SECONDS
        self.min_time = settings.MIN_TIME_SECONDS if min_time is None else min_time
        self.max_time = settings.MAX_TIME_SECONDS if max_time is None else max_time
        self.pages: Dict[int, PageTimerState] = {}
        self.active_page: Optional[int] = None

    @classmethod
    def resume(cls, session, committer: Committer, **kwargs) -> "PageTimer":
        """Build a timer from a stored session so accrued time carries over."""
        kwargs.setdefault("total_pages", session.total_pages)
        timer = cls(str(session.material_id), committer, **kwargs)
        for page in session.pages:
            state = timer.state(page.page_number)
            state.time_spent = page.time_spent or 0
            state.last_committed = state.time_spent
            state.next_checkpoint = timer._boundary_after(state.time_spent)
            if page.is_completed:
                state.status = TimerStatus.COMPLETED
            elif state.time_spent > 0:
                state.status = TimerStatus.PAUSED
        return timer

    def state(self, page_number: Optional[int] = None) -> PageTimerState:
        if page_number is None:
            page_number = self.active_page
        if page_number is None:
            raise OutOfRangeError("No page is active. Start a page first.")
        if page_number not in self.pages:
            self.pages[page_number] = PageTimerState(
                page_number=page_number,
                next_checkpoint=self.checkpoint_interval,
            )
        return self.pages[page_number]

    @property
    def time_spent(self) -> int:
        if self.active_page is None:
            return 0
        return self.state().time_spent

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def start(self, page_number: int) -> PageTimerState:
        if self.active_page is not None and self.active_page != page_number:
            self.pause()

        # raises SequenceViolationError / OutOfRangeError before any local change
        self.committer.start_page(self.material_id, page_number)

        state = self.state(page_number)
        self.active_page = page_number
        if state.status != TimerStatus.COMPLETED:
            state.status = TimerStatus.ACTIVE
            state.start_time = datetime.utcnow()
        return state

    def advance(self, seconds: int = 1) -> Optional[int]:
        """Accrue time locally.

        Returns the cumulative time to commit when a checkpoint boundary was
        crossed, else None. The boundary moves on whether or not the commit
        later succeeds; a failed checkpoint is superseded by the next one.
        """
        if self.active_page is None:
            return None
        state = self.state()
        if state.status != TimerStatus.ACTIVE:
            return None

        state.time_spent += seconds
        if state.time_spent < state.next_checkpoint:
            return None
        state.next_checkpoint = self._boundary_after(state.time_spent)
        return state.time_spent

    def tick(self, seconds: int = 1) -> int:
        """Advance the active page; commits at every checkpoint boundary."""
        due = self.advance(seconds)
        if due is not None:
            self.checkpoint(self.active_page, due)
        return self.time_spent

    def pause(self) -> Optional[PageTimerState]:
        """Stop accruing and commit immediately."""
        if self.active_page is None:
            return None
        state = self.state()
        if state.status == TimerStatus.ACTIVE:
            state.status = TimerStatus.PAUSED
            self.checkpoint(state.page_number, state.time_spent)
        return state

    def threshold_state(self, page_number: Optional[int] = None) -> ThresholdState:
        return threshold_state(self.state(page_number).time_spent, self.min_time, self.max_time)

    def remaining_seconds(self, page_number: Optional[int] = None) -> int:
        return max(0, self.min_time - self.state(page_number).time_spent)

    def request_completion(self) -> int:
        """Complete the active page; returns the page to move to next."""
        state = self.state()
        if state.status == TimerStatus.COMPLETED:
            return self._next_page(state.page_number)
        if state.time_spent < self.min_time:
            remaining = self.min_time - state.time_spent
            raise ThresholdNotMetError(
                f"Spend at least {self.min_time // 60} minutes on this page. Wait {remaining} more seconds.",
                remaining_seconds=remaining,
            )
        if state.time_spent > self.max_time:
            raise MaximumExceededError(
                f"This page exceeded the {self.max_time // 60} minute limit and can no longer be completed"
            )

        previous = state.status
        if state.status == TimerStatus.ACTIVE:
            state.status = TimerStatus.PAUSED
        try:
            # the store re-validates against the stored time, so it must be current
            self.committer.commit_page_time(self.material_id, state.page_number, state.time_spent)
            state.last_committed = max(state.last_committed, state.time_spent)
            self.committer.complete_page(self.material_id, state.page_number)
        except Exception:
            state.status = previous
            raise
        state.status = TimerStatus.COMPLETED
        return self._next_page(state.page_number)

    def _next_page(self, page_number: int) -> int:
        if self.total_pages is not None and page_number >= self.total_pages:
            return page_number
        return page_number + 1

    def _boundary_after(self, time_spent: int) -> int:
        return (time_spent // self.checkpoint_interval + 1) * self.checkpoint_interval

    def checkpoint(self, page_number: int, time_spent: int):
        """Commit cumulative time; transport failures are logged and dropped."""
        state = self.state(page_number)
        try:
            self.committer.commit_page_time(self.material_id, page_number, time_spent)
        except NetworkError as e:
            # the next checkpoint carries the larger cumulative value
            logger.warning("Checkpoint for page %s failed: %s", page_number, e)
            return
        state.last_committed = max(state.last_committed, time_spent)


class StoreCommitter:
    """Committer that writes straight into a ``PageProgressStore``."""

    def __init__(self, store):
        self.store = store

    def start_page(self, material_id, page_number):
        return self.store.start_page(material_id, page_number)

    def commit_page_time(self, material_id, page_number, time_spent):
        return self.store.commit_page_time(material_id, page_number, time_spent)

    def complete_page(self, material_id, page_number):
        return self.store.complete_page(material_id, page_number)


class TimerTicker:
    """Drives ``timer.advance()`` on a fixed schedule from an asyncio task.

    Time is accrued on the event loop; commits run in a worker thread so a
    slow progress API never stalls the loop. Stopping the ticker pauses the
    timer (which commits); in-flight commits are not cancelled.
    """

    def __init__(self, timer: PageTimer, interval: Optional[float] = None):
        self.timer = timer
        self.interval = interval or settings.TICK_SECONDS
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, page_number: int):
        await asyncio.to_thread(self.timer.start, page_number)
        if not self.running:
            self._task = asyncio.create_task(self._run())

    async def _run(self):
        while True:
            await asyncio.sleep(self.interval)
            page_number = self.timer.active_page
            due = self.timer.advance()
            if due is None:
                continue
            try:
                await asyncio.to_thread(self.timer.checkpoint, page_number, due)
            except Exception:
                logger.exception("Ticker for material %s stopped on page %s", self.timer.material_id, page_number)
                raise

    async def stop(self):
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                # already logged by _run; the pause below still has to commit
                logger.warning("Ticker ended with error: %s", e)
            finally:
                self._task = None
        await asyncio.to_thread(self.timer.pause)
