"""Material model."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Integer, BigInteger, Uuid
from readgate.db.base import Base


class Material(Base):
    """Course material (PDF, slide deck, ...) read page by page.

    Rows are owned by the course service; this API only reads them.
    """
    
    __tablename__ = "materials"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    course_id = Column(Uuid(as_uuid=True), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    file_path = Column(Text)
    file_type = Column(String(100), nullable=False, default="application/pdf")
    file_size = Column(BigInteger, nullable=False, default=0)
    page_count = Column(Integer)  # authoritative when set
    created_at = Column(DateTime, default=datetime.utcnow)
