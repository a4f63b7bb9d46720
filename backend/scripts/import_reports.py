#!/usr/bin/env python3
"""
CSV import script for DEFROST reports.

Batch-inserts reports with asyncpg. Existing report ids are skipped, since
stored reports are never modified.
"""

import asyncio
import csv
import math
import os
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

import asyncpg
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "").replace("+asyncpg", "").replace("postgresql://", "postgres://")

BATCH_SIZE = 1000
REPORT_INTERVAL = 10000

CATEGORIES = {"CHECKPOINT", "PATROL", "RAID"}
# Width of reports.id
ID_MAX_LENGTH = 36


def log(msg):
    """Print with flush for immediate output."""
    print(msg, flush=True)


def parse_datetime(value: str | None) -> datetime | None:
    """Parse datetime string from CSV (returns timezone-aware UTC)."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_float(value: str | None) -> float | None:
    """Parse a finite float from CSV."""
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def transform_row(row: dict) -> tuple | None:
    """Transform a CSV row into an insert record, or None if it is unusable."""
    category = (row.get("category") or "").strip().upper()
    if category not in CATEGORIES:
        return None

    location_label = (row.get("location_label") or "").strip()
    narrative = (row.get("narrative") or "").strip()
    if not location_label or not narrative:
        return None

    lat = parse_float(row.get("latitude"))
    lng = parse_float(row.get("longitude"))
    if lat is None or lng is None or not -90 <= lat <= 90 or not -180 <= lng <= 180:
        return None

    report_id = (row.get("id") or "").strip() or str(uuid.uuid4())
    if len(report_id) > ID_MAX_LENGTH:
        return None

    return (
        report_id,
        parse_datetime(row.get("created_at")) or datetime.now(timezone.utc),
        category,
        location_label,
        lat,
        lng,
        narrative,
        row.get("media_ref") or None,
    )


INSERT_SQL = """
    INSERT INTO reports (
        id, created_at, category, location_label,
        latitude, longitude, narrative, media_ref
    ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
    ON CONFLICT (id) DO NOTHING
"""


async def import_csv(csv_path: str):
    """Import CSV into the reports table using batch inserts."""
    log("Connecting to database...")
    conn = await asyncpg.connect(DATABASE_URL)

    try:
        initial_count = await conn.fetchval("SELECT COUNT(*) FROM reports")
        log(f"Current reports in DB: {initial_count:,}")

        processed = 0
        skipped = 0
        batch = []

        log(f"Reading CSV: {csv_path}")
        with open(csv_path, "r", encoding="utf-8") as f:
            for row in csv.DictReader(f):
                record = transform_row(row)
                if record is None:
                    skipped += 1
                    continue

                batch.append(record)
                if len(batch) >= BATCH_SIZE:
                    await conn.executemany(INSERT_SQL, batch)
                    processed += len(batch)
                    batch = []

                    if processed % REPORT_INTERVAL == 0:
                        log(f"Progress: {processed:,} rows")

            # Final batch
            if batch:
                await conn.executemany(INSERT_SQL, batch)
                processed += len(batch)

        final_count = await conn.fetchval("SELECT COUNT(*) FROM reports")
        log("\nImport complete!")
        log(f"  Processed: {processed:,}")
        log(f"  Skipped (invalid): {skipped:,}")
        log(f"  New reports: {final_count - initial_count:,}")
    finally:
        await conn.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        log("Usage: import_reports.py <reports.csv>")
        sys.exit(1)

    csv_path = sys.argv[1]
    if not Path(csv_path).exists():
        log(f"Error: CSV file not found: {csv_path}")
        sys.exit(1)

    asyncio.run(import_csv(csv_path))
