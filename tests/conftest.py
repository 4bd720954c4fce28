import itertools
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from config import Settings
from core.security import create_access_token
from database import Base
from main import create_app
from models import User, Video

TEST_SECRET_KEY = "test-secret-key"


@pytest.fixture(scope="function")
def app():
    """A fresh application backed by an in-memory database."""
    test_settings = Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY=TEST_SECRET_KEY,
        LOG_LEVEL="WARNING",
        _env_file=None,
    )
    application = create_app(test_settings)
    yield application
    Base.metadata.drop_all(bind=application.state.engine)
    application.state.engine.dispose()


@pytest.fixture(scope="function")
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture(scope="function")
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


# Model factories
@pytest.fixture
def create_user(db):
    """Factory to create a test user."""
    counter = itertools.count(1)

    def _create_user(**kwargs):
        n = next(counter)
        user_data = {
            "username": f"user{n}",
            "email": f"user{n}@example.com",
        }
        user_data.update(kwargs)

        user = User(**user_data)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _create_user


@pytest.fixture
def create_video(db, create_user):
    """
    Factory to create a test video.

    Videos get increasing ``created_at`` values unless one is given, so the
    order of creation is the recency order.
    """
    counter = itertools.count(1)
    base_time = datetime(2024, 1, 1, 12, 0, 0)

    def _create_video(owner=None, **kwargs):
        n = next(counter)
        if owner is None:
            owner = create_user()

        video_data = {
            "title": f"Test video {n}",
            "description": "A video used in tests",
            "url": f"https://cdn.example.com/videos/{n}.mp4",
            "thumbnail": f"https://cdn.example.com/thumbs/{n}.jpg",
            "created_at": base_time + timedelta(minutes=n),
            **kwargs
        }

        video = Video(user_id=owner.id, **video_data)
        db.add(video)
        db.commit()
        db.refresh(video)
        return video
    return _create_video


# Authentication helpers
@pytest.fixture
def auth_headers(app):
    """Return Authorization headers carrying a real token for ``user``."""
    def _auth_headers(user):
        token = create_access_token(
            user.id,
            app.state.settings.SECRET_KEY,
            app.state.settings.ALGORITHM,
            expires_delta=timedelta(minutes=5),
        )
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
