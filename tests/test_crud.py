"""
Tests for CRUD operations.

This module contains tests for the node_status queries on a throwaway
SQLite database.
"""

import pytest
from datetime import datetime, timedelta
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from horizon_api.database import Base
from horizon_api.crud.telemetry import SessionReadingSource, node_status as node_status_crud
from horizon_api.models.node_status import NodeStatus
from horizon_api.schemas.telemetry import ReadingCreate
from horizon_api.utils.reporting import compile_station_report
from horizon_api.utils.time_window import TimeWindow, resolve_window

import horizon_api.models  # noqa: F401


# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_crud.db"

# Create async engine for testing
engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)
TestingSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

LATEST = datetime(2025, 2, 3, 12, 0, 0)


@pytest.fixture
async def db():
    """Create test database."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def seeded(db):
    """Readings for two nodes and three base stations."""
    rows = []
    for hours in range(0, 48, 6):
        rows.append({
            "node_name": "Kameme FM",
            "base_station_name": "Kameme Nairobi",
            "time": LATEST - timedelta(hours=hours),
            "forward_power": 100.0,
            "reflected_power": 1.0,
            "voltage": 230.0,
        })
    rows.append({
        "node_name": "Kameme FM",
        "base_station_name": "Kameme Mombasa",
        "time": LATEST - timedelta(hours=1),
        "voltage": 220.0,
    })
    rows.append({
        "node_name": "Kameme FM",
        "base_station_name": None,
        "time": LATEST - timedelta(hours=2),
    })
    rows.append({
        "node_name": "Emoo FM",
        "base_station_name": "Emoo Kisumu",
        "time": LATEST - timedelta(days=10),
    })
    await node_status_crud.create_many(db, objs_in=rows)
    return db


async def test_create_reading(db):
    """Test creating a reading from a schema."""
    reading_in = ReadingCreate(
        node_name="Genset02",
        base_station_name="Genset Site A",
        time=LATEST,
        voltage=231.5,
        digital1_alarm=False,
    )
    reading = await node_status_crud.create(db, obj_in=reading_in)

    assert reading.id is not None
    assert reading.node_name == "Genset02"
    assert reading.voltage == 231.5
    assert reading.forward_power is None

    result = await db.execute(select(NodeStatus).where(NodeStatus.id == reading.id))
    assert result.scalars().one().base_station_name == "Genset Site A"


async def test_create_many_returns_count(db):
    """Test bulk insertion."""
    rows = [
        {"node_name": "Genset02", "time": LATEST - timedelta(minutes=m), "voltage": 230.0}
        for m in range(5)
    ]
    assert await node_status_crud.create_many(db, objs_in=rows) == 5

    result = await db.execute(select(func.count(NodeStatus.id)))
    assert result.scalar() == 5


async def test_latest_timestamp(seeded):
    """Test latest reading time per node."""
    assert await node_status_crud.get_latest_timestamp(seeded, node_name="Kameme FM") == LATEST
    assert await node_status_crud.get_latest_timestamp(seeded, node_name="Emoo FM") == LATEST - timedelta(days=10)
    assert await node_status_crud.get_latest_timestamp(seeded, node_name="Nobody FM") is None


async def test_readings_in_window_newest_first(seeded):
    """Test window filtering and ordering."""
    window = resolve_window("24h", latest_timestamp=LATEST)
    readings = await node_status_crud.get_readings_in_window(
        seeded, node_name="Kameme FM", window=window
    )
    times = [r.time for r in readings]
    assert times == sorted(times, reverse=True)
    # 0, 6, 12, 18, 24 hours (inclusive lower bound) plus the two extra rows
    assert len(readings) == 7
    assert all(window.contains(t) for t in times)


async def test_readings_in_window_base_station_filter(seeded):
    """Test filtering by base station."""
    window = resolve_window("24h", latest_timestamp=LATEST)
    readings = await node_status_crud.get_readings_in_window(
        seeded, node_name="Kameme FM", window=window, base_station="Kameme Mombasa"
    )
    assert len(readings) == 1
    assert readings[0].voltage == 220.0


async def test_readings_in_window_pagination(seeded):
    """Test skip/limit."""
    window = TimeWindow(start=LATEST - timedelta(days=3), end=LATEST, period="custom")
    first_page = await node_status_crud.get_readings_in_window(
        seeded, node_name="Kameme FM", window=window, base_station="Kameme Nairobi", limit=3
    )
    second_page = await node_status_crud.get_readings_in_window(
        seeded, node_name="Kameme FM", window=window, base_station="Kameme Nairobi", skip=3, limit=3
    )
    assert [r.time for r in first_page] == [LATEST - timedelta(hours=h) for h in (0, 6, 12)]
    assert [r.time for r in second_page] == [LATEST - timedelta(hours=h) for h in (18, 24, 30)]


async def test_base_stations_sorted_and_distinct(seeded):
    """Test the base station listing."""
    stations = await node_status_crud.get_base_stations(seeded, node_name="Kameme FM")
    assert stations == ["Kameme Mombasa", "Kameme Nairobi"]


async def test_node_names(seeded):
    """Test node listing, with and without the tracked-node filter."""
    assert await node_status_crud.get_node_names(seeded) == ["Emoo FM", "Kameme FM"]
    assert await node_status_crud.get_node_names(seeded, tracked_nodes=["Emoo FM", "Genset02"]) == ["Emoo FM"]


async def test_date_range(seeded):
    """Test first/last reading time."""
    min_time, max_time = await node_status_crud.get_date_range(seeded)
    assert min_time == LATEST - timedelta(days=10)
    assert max_time == LATEST

    min_time, max_time = await node_status_crud.get_date_range(seeded, node_name="Kameme FM")
    assert min_time == LATEST - timedelta(hours=42)

    min_time, max_time = await node_status_crud.get_date_range(seeded, tracked_nodes=["Emoo FM"])
    assert min_time == max_time == LATEST - timedelta(days=10)


async def test_date_range_empty(db):
    """Test date range without readings."""
    assert await node_status_crud.get_date_range(db) == (None, None)


async def test_session_reading_source_is_chronological(seeded):
    """Test the reading source used by the report pipeline."""
    source = SessionReadingSource(seeded)
    latest = await source.latest_timestamp("Kameme FM")
    window = resolve_window("7d", latest_timestamp=latest)
    readings = await source.fetch_readings("Kameme FM", "Kameme Nairobi", window)
    times = [r.time for r in readings]
    assert times == sorted(times)
    assert len(readings) == 8


async def test_session_reading_source_limit_keeps_newest(seeded):
    """Test the per-report row cap."""
    source = SessionReadingSource(seeded, limit=2)
    window = resolve_window("7d", latest_timestamp=LATEST)
    readings = await source.fetch_readings("Kameme FM", None, window)
    assert [r.time for r in readings] == [LATEST - timedelta(hours=1), LATEST]
    assert source.truncated is True


async def test_session_reading_source_limit_not_reached(seeded):
    """Test that a window exactly at the cap is not flagged."""
    source = SessionReadingSource(seeded, limit=8)
    window = resolve_window("7d", latest_timestamp=LATEST)
    readings = await source.fetch_readings("Kameme FM", "Kameme Nairobi", window)
    assert len(readings) == 8
    assert source.truncated is False


async def test_capped_report_covers_latest_readings(db):
    """Test that a capped report summarizes the newest part of the window."""
    rows = [
        {
            "node_name": "Kameme FM",
            "base_station_name": "Kameme Nairobi",
            "time": LATEST - timedelta(hours=19 - i),
            "voltage": 230.0 if i < 10 else 460.0,
        }
        for i in range(20)
    ]
    await node_status_crud.create_many(db, objs_in=rows)

    result = await compile_station_report(SessionReadingSource(db, limit=10), "Kameme FM", "24h")

    assert result.reading_count == 10
    assert result.truncated is True
    assert result.summaries["voltage"].max == 460.0
    assert result.summaries["voltage"].min == 460.0
    assert result.summaries["voltage"].max_timestamp == LATEST - timedelta(hours=9)


async def test_uncapped_report_is_not_truncated(seeded):
    """Test the truncation flag on a report within the cap."""
    result = await compile_station_report(SessionReadingSource(seeded, limit=100), "Kameme FM", "24h")
    assert result.reading_count == 7
    assert result.truncated is False
