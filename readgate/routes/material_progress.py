"""Material reading progress routes."""
import uuid
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from readgate.db.sessions import get_db
from readgate.core.security import get_current_user
from readgate.models.user import User
from readgate.schemas import (
    DownloadStatus,
    Envelope,
    InitializeRequest,
    PageState,
    ReadingSession,
    TimeUpdateRequest,
)
from readgate.services.download_gate import can_download
from readgate.services.progress_store import (
    PageProgressStore,
    to_reading_progress,
    to_reading_session,
)


router = APIRouter(prefix="/material-progress", tags=["Material Progress"])


def get_store(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PageProgressStore:
    return PageProgressStore(db, current_user.id)


@router.post("/{material_id}/initialize", response_model=Envelope[ReadingSession])
def initialize_reading(material_id: uuid.UUID, body: InitializeRequest, store: PageProgressStore = Depends(get_store)):
    """
    Create the reading session for this material, or return the existing one.

    Re-initializing never resets progress.
    """
    session = store.initialize(material_id, body.total_pages)
    return {"data": to_reading_session(session)}


@router.post("/{material_id}/pages/{page_number}/start", response_model=Envelope[ReadingSession])
def start_page_reading(material_id: uuid.UUID, page_number: int, store: PageProgressStore = Depends(get_store)):
    session = store.start_page(material_id, page_number)
    return {"data": to_reading_session(session)}


@router.put("/{material_id}/pages/{page_number}/time", response_model=Envelope[ReadingSession])
def update_page_time(
    material_id: uuid.UUID,
    page_number: int,
    body: TimeUpdateRequest,
    store: PageProgressStore = Depends(get_store),
):
    """Checkpoint commit; the stored time only ever grows."""
    session = store.commit_page_time(material_id, page_number, body.time_spent)
    return {"data": to_reading_session(session)}


@router.post("/{material_id}/pages/{page_number}/complete", response_model=Envelope[ReadingSession])
def complete_page(material_id: uuid.UUID, page_number: int, store: PageProgressStore = Depends(get_store)):
    session = store.complete_page(material_id, page_number)
    return {"data": to_reading_session(session)}


@router.get("/{material_id}/progress", response_model=Envelope[ReadingSession])
def get_progress(material_id: uuid.UUID, store: PageProgressStore = Depends(get_store)):
    return {"data": to_reading_session(store.get(material_id))}


@router.get("/{material_id}/pages/{page_number}/progress", response_model=Envelope[PageState])
def get_page_progress(material_id: uuid.UUID, page_number: int, store: PageProgressStore = Depends(get_store)):
    return {"data": store.page_progress(material_id, page_number)}


@router.get("/{material_id}/can-download", response_model=Envelope[DownloadStatus])
def can_download_material(material_id: uuid.UUID, store: PageProgressStore = Depends(get_store)):
    session = store.get(material_id)
    decision = can_download(session)
    return {"data": DownloadStatus(
        can_download=decision.can_download,
        reason=decision.reason,
        progress=to_reading_progress(session),
    )}
