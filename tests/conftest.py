"""
Shared pytest fixtures for the video share test suite.

Provides reusable fixtures for:
- An in-memory SQLite SqlVideoStore
- Seeded users and videos
- FastAPI test clients wired to the test store
"""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from server import create_app
from services.auth import FixedPrincipalResolver
from services.video_service import VideoService
from store.sql_store import SqlVideoStore


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest.fixture
def store():
    """Fresh in-memory SQLite store with tables created."""
    sql_store = SqlVideoStore.from_url("sqlite://")
    sql_store.initialize()
    yield sql_store
    sql_store.close()


@pytest.fixture
def owner(store):
    """A user owning test videos."""
    return store.create_user("john_doe", "https://picsum.photos/150/150?random=1")


@pytest.fixture
def viewers(store):
    """Five users that interact with test videos."""
    return [store.create_user(f"viewer_{i}") for i in range(5)]


@pytest.fixture
def base_time():
    return datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def make_video(store, owner, base_time):
    """Factory creating a video ``minutes`` after base_time."""

    def _make(title: str, minutes: int = 0, meta_items=None):
        video, _ = store.create_video_with_meta_items(
            user_id=owner.id,
            title=title,
            video_url=f"https://cdn.example.com/{title.replace(' ', '_')}.mp4",
            meta_items=meta_items,
            created_at=base_time + timedelta(minutes=minutes),
        )
        return video

    return _make


@pytest.fixture
def five_videos(make_video):
    """Videos 'Video 1'..'Video 5', each one minute newer than the last."""
    return [make_video(f"Video {i}", minutes=i) for i in range(1, 6)]


# =============================================================================
# Service / API Fixtures
# =============================================================================

@pytest.fixture
def service(store):
    return VideoService(store)


@pytest.fixture
def app(store, owner):
    """Application wired to the test store, authenticating as ``owner``."""
    resolver = FixedPrincipalResolver(store, username=owner.username)
    return create_app(store=store, principal_resolver=resolver)


@pytest.fixture
def client(app):
    """Synchronous test client for simple endpoint tests."""
    with TestClient(app) as test_client:
        yield test_client
