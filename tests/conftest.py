"""
Pytest configuration and shared fixtures.
"""
import os
import sys

# Keep the module-level engine off disk during tests
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

# Add server root to import path (matches existing test style in this repo)
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.database import Base, get_db
from app.db.models import User, Idea, IdeaStatus, IdeaVisibility
from app.db.repositories import UserRepository
from app.auth.auth import create_access_token
from app.main import app


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    def _make_user(skills=(), industries=(), **fields):
        user = User(**fields)
        repo = UserRepository(db_session)
        user.skills = repo.get_or_create_skills(skills)
        user.industries = repo.get_or_create_industries(industries)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def make_idea(db_session):
    def _make_idea(author, title="An idea", skills=(),
                   status=IdeaStatus.PUBLISHED, visibility=IdeaVisibility.PUBLIC, **fields):
        idea = Idea(author_id=author.id, title=title, status=status, visibility=visibility, **fields)
        idea.skills = UserRepository(db_session).get_or_create_skills(skills)
        db_session.add(idea)
        db_session.commit()
        db_session.refresh(idea)
        return idea
    return _make_idea


@pytest.fixture
def auth_headers():
    def _auth_headers(user) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
