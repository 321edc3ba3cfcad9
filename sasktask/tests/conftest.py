import uuid
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import JSON, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from sasktask.common.enums import BookingStatus, DisputeReason, TaskStatus
from sasktask.config import settings
from sasktask.db.base import Base
from sasktask.db.models import *  # noqa: F401,F403 - ensure all models loaded


# Make JSONB render as JSON for SQLite
@event.listens_for(Base.metadata, "before_create")
def _remap_jsonb(target, connection, **kw):
    if connection.dialect.name == "sqlite":
        for table in target.tables.values():
            for column in table.columns:
                if isinstance(column.type, JSONB):
                    column.type = JSON()


# File-backed SQLite so the evidence collector's concurrent sessions all see
# committed test data.
@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False, poolclass=NullPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
async def client(session_factory):
    from sasktask.api.deps import get_db, get_session_factory
    from sasktask.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def ai_not_configured(monkeypatch):
    """Keep every test off the network unless it opts in with a real-looking key."""
    monkeypatch.setattr(settings, "AI_API_KEY", "mock_ai_key")


@pytest.fixture
def add_rows(session_factory):
    """Insert ORM rows in their own committed transaction and return them."""

    async def _add(*rows):
        async with session_factory() as session:
            session.add_all(rows)
            await session.commit()
        return rows[0] if len(rows) == 1 else rows

    return _add


@pytest.fixture
async def task_giver(add_rows):
    from sasktask.db.models.user import Profile

    return await add_rows(
        Profile(
            id=uuid.uuid4(),
            full_name="Test Giver",
            city="Saskatoon",
            rating=4.6,
            trust_score=80,
            reputation_score=70,
        )
    )


@pytest.fixture
async def task_doer(add_rows):
    from sasktask.db.models.user import Profile

    return await add_rows(
        Profile(
            id=uuid.uuid4(),
            full_name="Test Doer",
            city="Saskatoon",
            rating=4.1,
            completed_tasks=3,
            trust_score=65,
            reputation_score=55,
        )
    )


@pytest.fixture
async def task(add_rows, task_giver):
    from sasktask.db.models.task import Task

    return await add_rows(
        Task(
            id=uuid.uuid4(),
            task_giver_id=task_giver.id,
            title="Clean garage",
            description="Sweep and organize shelves",
            category="Cleaning",
            pay_amount=Decimal("120.00"),
            estimated_duration=3,
            location="Saskatoon, SK",
            status=TaskStatus.COMPLETED.value,
        )
    )


@pytest.fixture
async def booking(add_rows, task, task_doer):
    from sasktask.db.models.task import Booking

    return await add_rows(
        Booking(
            id=uuid.uuid4(),
            task_id=task.id,
            task_doer_id=task_doer.id,
            status=BookingStatus.DISPUTED.value,
            deposit_paid=True,
        )
    )


@pytest.fixture
async def dispute(add_rows, booking, task, task_giver, task_doer):
    from sasktask.db.models.dispute import Dispute

    return await add_rows(
        Dispute(
            id=uuid.uuid4(),
            booking_id=booking.id,
            task_id=task.id,
            raised_by=task_giver.id,
            against_user=task_doer.id,
            dispute_reason=DisputeReason.INCOMPLETE_WORK.value,
            dispute_details="Shelves were never organized",
        )
    )
