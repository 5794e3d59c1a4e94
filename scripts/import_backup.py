#!/usr/bin/env python3
"""
Import a JSON backup (receipts, coupons, settings, claims) into the database.

Usage:
    python scripts/import_backup.py price-tracker-backup.json
    python scripts/import_backup.py backup.json --clear
"""

import argparse
import json
import sys
from pathlib import Path

# Add parent to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from backend.core.db import DB_PATH, init_db, import_data, clear_all_data, get_stats


def main():
    parser = argparse.ArgumentParser(description="Import a price tracker backup into the database")
    parser.add_argument("backup", help="Backup JSON file")
    parser.add_argument("--clear", action="store_true", help="Delete existing data first")
    args = parser.parse_args()

    backup_path = Path(args.backup)
    if not backup_path.exists():
        print(f"ERROR: Backup file not found: {backup_path}")
        sys.exit(1)

    with open(backup_path, "r") as f:
        data = json.load(f)

    print("=" * 60)
    print(f"Importing {backup_path.name} into {DB_PATH}")
    print("=" * 60)

    init_db()
    if args.clear:
        clear_all_data()
        print("  Existing data cleared")

    try:
        counts = import_data(data)
    except ValueError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    for name, count in counts.items():
        print(f"  {name:<10} {count}")

    stats = get_stats()
    print("\n" + "=" * 60)
    print(f"COMPLETE: {stats['receipts']} receipts, {stats['coupons']} coupons, {stats['claims']} claims stored")
    print("=" * 60)


if __name__ == "__main__":
    main()
