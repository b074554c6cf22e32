"""
Print the narrated report for a node over a period.

Runs the same pipeline as GET /api/analysis/{node_name}/{period} against the
configured database and prints the narration.

Usage:
    python scripts/generate_report.py "Kameme FM"
    python scripts/generate_report.py "Kameme FM" --period 7d --base-station "Kameme Nairobi"
    python scripts/generate_report.py "Emoo FM" --period custom --start 2025-01-01 --end 2025-01-31 --format text
"""

import asyncio
import sys
import argparse
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from horizon_api.config import settings
from horizon_api.core.exceptions import TelemetryError
from horizon_api.crud.telemetry import SessionReadingSource
from horizon_api.database import async_session
from horizon_api.utils.logging_config import setup_logging, get_logger
from horizon_api.utils.narration import NarrationFormat
from horizon_api.utils.reporting import compile_station_report
from horizon_api.utils.time_window import VALID_PERIODS

# Setup logging
setup_logging()
logger = get_logger(__name__)


async def generate_report(
    node_name: str,
    period: str,
    base_station: str = None,
    start: str = None,
    end: str = None,
    fmt: NarrationFormat = NarrationFormat.TEXT,
    session_factory=async_session,
) -> str:
    """Compile the report for one node and return the rendered narration."""
    async with session_factory() as session:
        source = SessionReadingSource(session, limit=settings.MAX_READINGS_PER_REQUEST)
        result = await compile_station_report(
            source,
            node_name,
            period,
            base_station=base_station,
            start_date=start,
            end_date=end,
        )

    if result.window is not None:
        logger.info(
            f"Window {result.window.start.isoformat()} .. {result.window.end.isoformat()}, "
            f"{result.reading_count} readings"
        )
    if result.truncated:
        print(f"Note: report covers the newest {result.reading_count} readings only\n")
    return result.narration(fmt)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate a narrated station report from stored telemetry"
    )
    parser.add_argument('node_name', type=str, help='Network node name')
    parser.add_argument(
        '--period',
        type=str,
        default=settings.DEFAULT_PERIOD,
        choices=VALID_PERIODS,
        help=f'Report period (default: {settings.DEFAULT_PERIOD})'
    )
    parser.add_argument('--base-station', type=str, default=None, help='Restrict to one base station')
    parser.add_argument('--start', type=str, default=None, help='Start date for --period custom (YYYY-MM-DD)')
    parser.add_argument('--end', type=str, default=None, help='End date for --period custom (YYYY-MM-DD)')
    parser.add_argument(
        '--format',
        type=NarrationFormat,
        default=NarrationFormat.TEXT,
        choices=list(NarrationFormat),
        help='Output format (default: text)'
    )
    return parser


def main(argv=None):
    """Parse arguments and print the report."""
    args = build_parser().parse_args(argv)

    try:
        narration = asyncio.run(generate_report(
            args.node_name,
            args.period,
            base_station=args.base_station,
            start=args.start,
            end=args.end,
            fmt=args.format,
        ))
    except TelemetryError as e:
        print(f"\n❌ Error: {e}")
        sys.exit(2)

    print(narration)


if __name__ == "__main__":
    main()
