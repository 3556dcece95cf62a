"""Health endpoint against a throwaway SQLite database."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.adapters.persistence.database import Base, get_session
from app.adapters.persistence.models import RotationCursorModel
from app.main import app


def _session_override(url: str, with_schema: bool = True, cursor: bool = False):
    async def _get_session():
        engine = create_async_engine(url)
        try:
            if with_schema:
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            async with async_sessionmaker(engine)() as session:
                if cursor:
                    session.add(
                        RotationCursorModel(
                            rr_key="sales-rotation", last_representative_id="A", sequence=3, version=3
                        )
                    )
                    await session.commit()
                yield session
        finally:
            await engine.dispose()

    return _get_session


@pytest.fixture
def health_client():
    def _make(**kwargs):
        app.dependency_overrides[get_session] = _session_override(**kwargs)
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


def test_health_before_first_assignment(tmp_path, health_client):
    body = health_client(url=f"sqlite+aiosqlite:///{tmp_path / 'h.db'}").get("/api/health").json()

    assert body["status"] == "ok"
    assert body["rotation"]["initialised"] is False


def test_health_reports_rotation_cursor(tmp_path, health_client):
    client = health_client(url=f"sqlite+aiosqlite:///{tmp_path / 'h.db'}", cursor=True)
    body = client.get("/api/health").json()

    assert body["rotation"]["initialised"] is True
    assert body["rotation"]["last_representative_id"] == "A"
    assert body["rotation"]["sequence"] == 3


def test_health_degraded_without_schema(tmp_path, health_client):
    client = health_client(url=f"sqlite+aiosqlite:///{tmp_path / 'h.db'}", with_schema=False)
    body = client.get("/api/health").json()

    assert body["status"] == "degraded"
    assert body["rotation"] is None
