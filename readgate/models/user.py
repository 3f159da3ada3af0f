"""User model."""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Uuid
from sqlalchemy.orm import relationship
from readgate.db.base import Base


class User(Base):
    """User model matching DDL schema."""
    
    __tablename__ = "users"
    
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    email = Column(String(150), unique=True, nullable=False, index=True)
    role = Column(String(20), nullable=False, default="STUDENT")  # STUDENT / LECTURER / ADMIN
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    reading_sessions = relationship("MaterialPageProgress", back_populates="student", cascade="all, delete-orphan")
