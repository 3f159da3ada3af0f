"""
ReadGate API - Test Configuration and Fixtures
"""
import os
import uuid

import pytest

# Set testing environment before the app reads its settings
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'

from fastapi.testclient import TestClient

from readgate.main import app
from readgate.db.base import Base
from readgate.db.sessions import SessionLocal, engine
from readgate.models import Material, User
from readgate.core.security import create_access_token
from readgate.schemas import PageState, ReadingSession
from readgate.services.progress_store import PageProgressStore


@pytest.fixture
def db():
    """Fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def student(db) -> User:
    user = User(name="Ada Student", email=f"{uuid.uuid4().hex[:8]}@example.edu", role="STUDENT")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def material(db) -> Material:
    m = Material(
        course_id=uuid.uuid4(),
        title="Week 1 reading",
        file_type="application/pdf",
        file_size=300 * 1024,
    )
    db.add(m)
    db.commit()
    db.refresh(m)
    return m


@pytest.fixture
def store(db, student) -> PageProgressStore:
    return PageProgressStore(db, student.id)


@pytest.fixture
def auth_headers(student) -> dict:
    token = create_access_token({'sub': str(student.id)})
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


def make_session(total_pages=3, completed=(), current_page=1, time_spent=None) -> ReadingSession:
    """Build a session snapshot without touching the database."""
    time_spent = time_spent or {}
    pages = [
        PageState(
            page_number=n,
            time_spent=time_spent.get(n, 0),
            is_completed=n in completed,
            can_proceed=n == 1 or (n - 1) in completed,
            min_time_required=360,
            max_time_allowed=720,
        )
        for n in range(1, total_pages + 1)
    ]
    return ReadingSession(
        student_id=str(uuid.uuid4()),
        material_id=str(uuid.uuid4()),
        pages=pages,
        total_pages=total_pages,
        completed_pages=len(completed),
        current_page=current_page,
    )
