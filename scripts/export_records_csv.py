#!/usr/bin/env python3
"""
Database to CSV Export Script

Exports terminalrecords from DB_URL to data/csvs/terminalrecords.csv
"""

import csv
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).parent.parent))

from config.database import fetch_terminal_records, get_engine
from config.settings import Settings


def export_records_to_csv(connection, output_dir):
    """
    Export all terminal records to CSV.

    Returns:
        int: Number of rows written
    """
    rows = fetch_terminal_records(connection)

    if not rows:
        print("⚠️  Table 'terminalrecords' is empty")
        return 0

    csv_path = Path(output_dir) / "terminalrecords.csv"

    with open(csv_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(["terminal", "wait_len", "timestamp"])
        for terminal, wait_len, timestamp in rows:
            writer.writerow([terminal, wait_len, timestamp.isoformat()])

    print(f"✅ Exported {len(rows)} rows to {csv_path}")
    return len(rows)


def main():
    """Export terminalrecords to CSV."""
    print("📊 Database to CSV Export Tool")
    print("=" * 40)

    settings = Settings.from_env()
    if not settings.db_url:
        print("❌ DB_URL is not set")
        return 1

    output_dir = Path(settings.data_dir) / "csvs"
    output_dir.mkdir(parents=True, exist_ok=True)
    print(f"📁 Output directory: {output_dir}")

    engine = get_engine(settings.db_url)
    try:
        with engine.connect() as connection:
            export_records_to_csv(connection, output_dir)
        return 0
    except Exception as e:
        print(f"❌ Error during export: {e}")
        return 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
