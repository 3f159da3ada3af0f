"""Request/response schemas for material reading sessions.

JSON uses camelCase keys; Python code uses the snake_case field names.
"""
from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Envelope(BaseModel, Generic[T]):
    """Every response body is wrapped as {"data": ...}."""
    data: T


class PageState(CamelModel):
    page_number: int
    time_spent: int = 0
    is_completed: bool = False
    can_proceed: bool = False
    min_time_required: int
    max_time_allowed: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class ReadingSession(CamelModel):
    id: Optional[str] = None
    student_id: str
    material_id: str
    course_id: Optional[str] = None
    pages: List[PageState]
    total_pages: int
    completed_pages: int = 0
    can_download: bool = False
    current_page: int = 1
    session_start_time: Optional[datetime] = None
    last_activity: Optional[datetime] = None

    def page(self, page_number: int) -> Optional[PageState]:
        for p in self.pages:
            if p.page_number == page_number:
                return p
        return None


class ReadingProgress(CamelModel):
    completed_pages: int
    total_pages: int
    progress_percentage: float
    total_time_spent: int
    can_download: bool
    current_page: int


class DownloadStatus(CamelModel):
    can_download: bool
    reason: str
    progress: ReadingProgress


class PageCountResponse(CamelModel):
    page_count: int
    file_type: str
    file_size: int


class InitializeRequest(CamelModel):
    total_pages: int


class TimeUpdateRequest(CamelModel):
    time_spent: int = Field(..., description="Cumulative seconds spent on the page")
