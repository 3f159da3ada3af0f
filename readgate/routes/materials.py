"""Material metadata routes."""
import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from readgate.db.sessions import get_db
from readgate.core.security import get_current_user
from readgate.models import Material
from readgate.schemas import Envelope, PageCountResponse
from readgate.utils.page_counter import PageCounter


router = APIRouter(prefix="/materials", tags=["Materials"])


@router.get("/{material_id}/page-count", response_model=Envelope[PageCountResponse])
def get_page_count(material_id: uuid.UUID, db: Session = Depends(get_db), current_user=Depends(get_current_user)):
    material = db.query(Material).filter(Material.id == material_id).first()
    if not material:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Material not found")

    return {"data": PageCountResponse(
        page_count=PageCounter.count_pages(material),
        file_type=material.file_type,
        file_size=material.file_size or 0,
    )}
