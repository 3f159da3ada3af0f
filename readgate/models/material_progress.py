"""Material reading session models."""
import uuid
from datetime import datetime
from sqlalchemy import Column, Boolean, DateTime, Integer, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from readgate.db.base import Base


class MaterialPageProgress(Base):
    """One reading session per (student, material) pair."""

    __tablename__ = "material_page_progress"
    __table_args__ = (
        UniqueConstraint("student_id", "material_id", name="uq_material_page_progress_student_material"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    material_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    course_id = Column(Uuid(as_uuid=True))
    total_pages = Column(Integer, nullable=False)
    completed_pages = Column(Integer, nullable=False, default=0)
    current_page = Column(Integer, nullable=False, default=1)
    session_start_time = Column(DateTime, default=datetime.utcnow)
    last_activity = Column(DateTime, default=datetime.utcnow)

    # Relationships
    student = relationship("User", back_populates="reading_sessions")
    pages = relationship(
        "PageProgress",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="PageProgress.page_number",
    )

    def page(self, page_number: int):
        for p in self.pages:
            if p.page_number == page_number:
                return p
        return None


class PageProgress(Base):
    """Reading state of a single page inside a session."""

    __tablename__ = "page_progress"
    __table_args__ = (
        UniqueConstraint("session_id", "page_number", name="uq_page_progress_session_page"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(Uuid(as_uuid=True), ForeignKey("material_page_progress.id", ondelete="CASCADE"), nullable=False, index=True)
    page_number = Column(Integer, nullable=False)
    time_spent = Column(Integer, nullable=False, default=0)  # seconds
    is_completed = Column(Boolean, nullable=False, default=False)
    can_proceed = Column(Boolean, nullable=False, default=False)
    start_time = Column(DateTime)
    end_time = Column(DateTime)

    # Relationships
    session = relationship("MaterialPageProgress", back_populates="pages")
