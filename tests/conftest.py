"""Pytest configuration and fixtures."""

import os
from collections.abc import Callable, Generator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_BROKER_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_RESULT_BACKEND"] = "redis://localhost:6379/1"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SCHEDULE_TIMEZONE"] = "Asia/Kolkata"

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from pipeline_dashboard.db.models import Base, ChannelModel, TrendingTopicModel  # noqa: E402
from pipeline_dashboard.domain.enums import Stage, VideoType  # noqa: E402
from pipeline_dashboard.domain.stages import LIFECYCLE  # noqa: E402


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """In-memory SQLite database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def publisher_adapter():
    """Get a stub publisher adapter."""
    from pipeline_dashboard.adapters.publisher.stub import StubPublisherAdapter

    return StubPublisherAdapter()


@pytest.fixture
def handoff() -> MagicMock:
    """Stands in for the Celery handoff to the production backend."""
    return MagicMock()


@pytest.fixture
def dispatcher(session: Session, publisher_adapter, handoff: MagicMock):
    from pipeline_dashboard.services.dispatcher import AutomationDispatcher

    return AutomationDispatcher(session, publisher=publisher_adapter, handoff=handoff)


@pytest.fixture
def client(
    session_factory: sessionmaker, publisher_adapter, monkeypatch: pytest.MonkeyPatch
) -> Generator[TestClient, None, None]:
    """Test client whose routes use the in-memory database and stub publisher."""
    from pipeline_dashboard.adapters.publisher import get_publisher
    from pipeline_dashboard.config import settings
    from pipeline_dashboard.db.session import get_session
    from pipeline_dashboard.main import app

    def override_session() -> Generator[Session, None, None]:
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    monkeypatch.setattr(settings, "production_handoff_enabled", False)
    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_publisher] = lambda: publisher_adapter

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="session")
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from pipeline_dashboard.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def make_job(session: Session) -> Callable[..., Any]:
    """Create a committed content job."""
    from pipeline_dashboard.services.jobs import create_job

    def _make(
        title: str = "Test video",
        video_type: VideoType = VideoType.LONG_FORM,
        **kwargs: Any,
    ):
        job = create_job(session, video_type=video_type, title=title, **kwargs)
        session.commit()
        return job

    return _make


@pytest.fixture
def advance(session: Session) -> Callable[..., Any]:
    """Walk a job one stage at a time up to ``target``."""
    from pipeline_dashboard.services.jobs import apply_progress, get_job

    def _advance(job_id, target: Stage, now: datetime | None = None, progress: int | None = None):
        job = get_job(session, job_id)
        start = LIFECYCLE.index(Stage(job.stage)) + 1
        stop = LIFECYCLE.index(target)
        for stage in LIFECYCLE[start:stop]:
            apply_progress(session, job_id, stage, progress=100, now=now)
        job = apply_progress(session, job_id, target, progress=progress, now=now)
        session.commit()
        return job

    return _advance


@pytest.fixture
def make_channel(session: Session) -> Callable[..., ChannelModel]:
    def _make(name: str = "Main channel", **kwargs: Any) -> ChannelModel:
        channel = ChannelModel(name=name, **kwargs)
        session.add(channel)
        session.commit()
        return channel

    return _make


@pytest.fixture
def make_topic(session: Session) -> Callable[..., TrendingTopicModel]:
    def _make(
        title: str, priority: str = "high", search_volume: int = 1000, **kwargs: Any
    ) -> TrendingTopicModel:
        topic = TrendingTopicModel(
            title=title, priority=priority, search_volume=search_volume, **kwargs
        )
        session.add(topic)
        session.commit()
        return topic

    return _make


@pytest.fixture
def now() -> datetime:
    """A fixed instant: 2024-06-01 10:00 UTC (15:30 in Asia/Kolkata)."""
    return datetime(2024, 6, 1, 10, 0, tzinfo=UTC)
