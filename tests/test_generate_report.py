"""
Tests for the report generation script.
"""

from datetime import datetime, timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

from horizon_api.crud.telemetry import node_status as node_status_crud
from horizon_api.database import Base
from horizon_api.utils.narration import NarrationFormat
from scripts.generate_report import build_parser, generate_report, main

import horizon_api.models  # noqa: F401


TEST_DATABASE_URL = "sqlite+aiosqlite:///./test_report.db"

engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestingSessionLocal = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

LATEST = datetime(2025, 2, 3, 12, 0, 0)


@pytest.fixture
async def seeded():
    """Kameme FM readings over the last hour."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        await node_status_crud.create_many(session, objs_in=[
            {
                "node_name": "Kameme FM",
                "base_station_name": "Kameme Nairobi",
                "time": LATEST - timedelta(minutes=m),
                "forward_power": 100.0,
                "reflected_power": 0.5,
                "voltage": 230.0,
            }
            for m in range(0, 60, 10)
        ])

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


class TestParser:
    """Test command line handling."""

    def test_defaults(self):
        args = build_parser().parse_args(["Kameme FM"])
        assert args.node_name == "Kameme FM"
        assert args.period == "24h"
        assert args.base_station is None
        assert args.format == NarrationFormat.TEXT

    def test_custom_period_options(self):
        args = build_parser().parse_args([
            "Emoo FM", "--period", "custom", "--start", "2025-01-01", "--end", "2025-01-31",
            "--base-station", "Emoo Kisumu", "--format", "html",
        ])
        assert args.period == "custom"
        assert args.start == "2025-01-01"
        assert args.end == "2025-01-31"
        assert args.base_station == "Emoo Kisumu"
        assert args.format == NarrationFormat.HTML

    def test_unknown_period_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["Kameme FM", "--period", "2h"])

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["Kameme FM", "--format", "pdf"])

    def test_invalid_custom_range_exits(self, capsys):
        # Custom ranges are checked before the database is touched
        with pytest.raises(SystemExit) as exc_info:
            main(["Kameme FM", "--period", "custom", "--start", "2025-02-03", "--end", "2025-02-01"])
        assert exc_info.value.code == 2
        assert "Error" in capsys.readouterr().out


class TestGenerateReport:
    """Test report output against a seeded database."""

    async def test_text_report(self, seeded):
        narration = await generate_report(
            "Kameme FM", "1h", session_factory=TestingSessionLocal
        )
        assert narration.startswith("RF System Analysis for Kameme FM\n")
        assert "Overall Assessment" in narration

    async def test_base_station_markdown_report(self, seeded):
        narration = await generate_report(
            "Kameme FM",
            "24h",
            base_station="Kameme Nairobi",
            fmt=NarrationFormat.MARKDOWN,
            session_factory=TestingSessionLocal,
        )
        assert narration.startswith("## RF System Analysis for Kameme Nairobi")

    async def test_unknown_node(self, seeded):
        narration = await generate_report("Nobody FM", "7d", session_factory=TestingSessionLocal)
        assert narration == "No data available for Nobody FM in the selected time period."
