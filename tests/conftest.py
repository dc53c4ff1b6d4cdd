"""
Pytest configuration and shared fixtures.

Analytics tests build SprintRecord snapshots in memory; service and API
tests run against a temporary SQLite database per test.
"""

import asyncio
from datetime import date, timedelta
from typing import List, Optional, Sequence

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from velocity_tracker.analytics import SprintRecord
from velocity_tracker.models.base import Base
from velocity_tracker.models import sprint  # noqa: F401  registers the sprints table

FIRST_START = date(2024, 1, 1)


def make_sprints(
    completed: Sequence[float],
    planned: Optional[Sequence[float]] = None,
    availability: Optional[Sequence[float]] = None,
) -> List[SprintRecord]:
    """Build chronological records, two weeks apart, oldest first."""
    records = []
    for index, points in enumerate(completed):
        start = FIRST_START + timedelta(days=14 * index)
        records.append(SprintRecord(
            id=index + 1,
            name=f"Sprint {index + 1}",
            start_date=start,
            end_date=start + timedelta(days=13),
            planned_points=planned[index] if planned is not None else points,
            completed_points=points,
            team_availability=availability[index] if availability is not None else 100,
        ))
    return records


@pytest.fixture
def sample_sprints() -> List[SprintRecord]:
    """Three sprints with completion ratios 87.5, 100 and ~74.3."""
    return make_sprints(
        completed=[28, 30, 26],
        planned=[32, 30, 35],
        availability=[90, 100, 85],
    )


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

async def _create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _sqlite_engine(tmp_path):
    # NullPool keeps every connection local to the event loop that opened it
    return create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'velocity.db'}",
        poolclass=NullPool,
    )


@pytest.fixture
async def db_session(tmp_path):
    """Session on a throwaway SQLite file, for async service tests."""
    engine = _sqlite_engine(tmp_path)
    await _create_tables(engine)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def sync_engine_with_tables(tmp_path):
    """Engine with tables created up front, for synchronous API tests."""
    engine = _sqlite_engine(tmp_path)
    asyncio.run(_create_tables(engine))
    yield engine
    asyncio.run(engine.dispose())
