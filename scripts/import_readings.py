"""
Import telemetry readings from a legacy node_status_table export.

Reads a CSV or Excel export of the SCADA node status table and inserts the
rows into the node_status table. Legacy columns are mapped as follows:

    NodeName             -> node_name
    NodeBaseStationName  -> base_station_name
    time / Timestamp     -> time
    StatusCommentsStr    -> status_comments
    Forward Power        -> forward_power
    Reflected Power      -> reflected_power
    Temperature          -> temperature
    Analog1Value         -> voltage
    Analog2Value         -> current
    Analog3Value         -> power
    Digital1/2 Value/Alarm -> digital1/2_value/alarm

Rows without a node name or a parseable time are skipped.

Usage:
    python scripts/import_readings.py exports/node_status.csv
    python scripts/import_readings.py exports/node_status.xlsx --sheet node_status_table
    python scripts/import_readings.py exports/node_status.csv --dry-run
    python scripts/import_readings.py exports/node_status.csv --reset
"""

import asyncio
import sys
import argparse
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from horizon_api.crud.telemetry import node_status as node_status_crud
from horizon_api.database import async_session, create_tables, drop_tables
from horizon_api.utils.logging_config import setup_logging, get_logger

# Setup logging
setup_logging()
logger = get_logger(__name__)

# Legacy column name -> node_status field
COLUMN_MAPPING = {
    'NodeName': 'node_name',
    'NodeBaseStationName': 'base_station_name',
    'time': 'time',
    'Timestamp': 'time',
    'StatusCommentsStr': 'status_comments',
    'Forward Power': 'forward_power',
    'Reflected Power': 'reflected_power',
    'Temperature': 'temperature',
    'Analog1Value': 'voltage',
    'Analog2Value': 'current',
    'Analog3Value': 'power',
    'Digital1Value': 'digital1_value',
    'Digital1Alarm': 'digital1_alarm',
    'Digital2Value': 'digital2_value',
    'Digital2Alarm': 'digital2_alarm',
}

FLOAT_FIELDS = ('forward_power', 'reflected_power', 'temperature', 'voltage', 'current', 'power')
BOOL_FIELDS = ('digital1_value', 'digital1_alarm', 'digital2_value', 'digital2_alarm')
TEXT_FIELDS = ('base_station_name', 'status_comments')

BATCH_SIZE = 500


def load_frame(path: Path, sheet: Optional[str] = None) -> pd.DataFrame:
    """Read a CSV or Excel export into a DataFrame."""
    if path.suffix.lower() in ('.xlsx', '.xls'):
        return pd.read_excel(path, sheet_name=sheet or 0)
    return pd.read_csv(path)


def _float_or_none(value: Any) -> Optional[float]:
    if pd.isna(value) or value == '':
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _bool_or_none(value: Any) -> Optional[bool]:
    if pd.isna(value) or value == '':
        return None
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def _text_or_none(value: Any) -> Optional[str]:
    if pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def frame_to_readings(df: pd.DataFrame) -> Tuple[List[Dict[str, Any]], int]:
    """
    Convert an export DataFrame into node_status rows.

    Args:
        df: DataFrame with legacy (or already snake_case) column names

    Returns:
        Tuple of (list of row dicts, number of skipped rows)
    """
    frame = df.rename(columns={k: v for k, v in COLUMN_MAPPING.items() if k in df.columns})
    frame = frame.loc[:, ~frame.columns.duplicated()].copy()

    if 'node_name' not in frame.columns or 'time' not in frame.columns:
        raise ValueError("Export must contain node name and time columns")

    frame['time'] = pd.to_datetime(frame['time'], errors='coerce')

    readings = []
    skipped = 0
    for _, row in frame.iterrows():
        node_name = _text_or_none(row['node_name'])
        if node_name is None or pd.isna(row['time']):
            skipped += 1
            continue

        reading = {'node_name': node_name, 'time': row['time'].to_pydatetime()}
        for field in TEXT_FIELDS:
            if field in frame.columns:
                reading[field] = _text_or_none(row[field])
        for field in FLOAT_FIELDS:
            if field in frame.columns:
                reading[field] = _float_or_none(row[field])
        for field in BOOL_FIELDS:
            if field in frame.columns:
                reading[field] = _bool_or_none(row[field])
        readings.append(reading)

    return readings, skipped


async def import_readings(
    readings: List[Dict[str, Any]], batch_size: int = BATCH_SIZE, reset: bool = False
) -> int:
    """
    Insert readings in batches, one transaction per batch.

    With reset, existing tables are dropped first so the import replaces
    everything stored.
    """
    if reset:
        logger.warning("Dropping existing tables before import")
        await drop_tables()
    await create_tables()

    imported = 0
    async with async_session() as session:
        for start in range(0, len(readings), batch_size):
            batch = readings[start:start + batch_size]
            imported += await node_status_crud.create_many(session, objs_in=batch)
            logger.info(f"Imported {imported}/{len(readings)} readings")
    return imported


def main():
    """Parse arguments and run the import."""
    parser = argparse.ArgumentParser(
        description="Import a node_status_table export into the Horizon Telemetry database"
    )
    parser.add_argument('file', type=Path, help='CSV or Excel export')
    parser.add_argument('--sheet', type=str, default=None, help='Excel sheet name (default: first sheet)')
    parser.add_argument('--batch-size', type=int, default=BATCH_SIZE, help='Rows per transaction')
    parser.add_argument('--dry-run', action='store_true', help='Parse the file without writing to the database')
    parser.add_argument('--reset', action='store_true', help='Drop all stored readings before importing')
    args = parser.parse_args()

    if not args.file.exists():
        print(f"\n❌ Error: File not found: {args.file}")
        sys.exit(1)

    print("\n" + "=" * 60)
    print("TELEMETRY IMPORT")
    print("=" * 60)
    print(f"File: {args.file}")

    df = load_frame(args.file, args.sheet)
    print(f"Rows in file: {len(df)}")

    readings, skipped = frame_to_readings(df)
    print(f"Rows to import: {len(readings)}")
    print(f"Rows skipped (no node or time): {skipped}")

    if args.dry_run:
        print("\nDry run: nothing written")
        return

    imported = asyncio.run(import_readings(readings, batch_size=args.batch_size, reset=args.reset))
    print(f"\n✓ Readings imported: {imported}")


if __name__ == "__main__":
    main()
