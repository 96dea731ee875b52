#!/usr/bin/env python3
"""
Find and delete activity records whose SUDS type no longer exists.

Deleting a SUDS type leaves its records in place (they are invisible to every
view); this script removes them on demand.

Usage:
    python scripts/purge_orphan_records.py          # Dry run (shows what would be deleted)
    python scripts/purge_orphan_records.py --yes    # Actually delete orphaned records
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Load environment variables first
from dotenv import load_dotenv
load_dotenv()

from suds_hub.models.domain import ACTIVITY_RECORDS, SUDS_TYPES
from suds_hub.store.factory import get_store


def find_orphans(store):
    asset_ids = {d["id"] for d in store.query(SUDS_TYPES)}
    return store.query(ACTIVITY_RECORDS, lambda d: d.get("sudsTypeId") not in asset_ids)


def purge(store, orphans) -> int:
    batch = store.batch()
    for record in orphans:
        batch.delete(ACTIVITY_RECORDS, record["id"])
    batch.commit()
    return len(orphans)


def main():
    auto_confirm = '--yes' in sys.argv or '-y' in sys.argv
    print("=" * 80)
    print("PURGE ORPHANED ACTIVITY RECORDS")
    print("=" * 80)

    store = get_store()
    orphans = find_orphans(store)
    print(f"Found {len(orphans)} orphaned activity records")
    if not orphans:
        print("\n[OK] No orphaned records found. Nothing to clean up.")
        return 0

    for record in orphans:
        print(f"  [ORPHANED] {record['id']}: {record.get('category')} / {record.get('activityName')} (SUDS type {record.get('sudsTypeId')} not found)")

    if not auto_confirm:
        print("\nThis is a DRY RUN. No records will be deleted.")
        print("To actually delete, run: python scripts/purge_orphan_records.py --yes")
        return 0

    deleted = purge(store, orphans)
    print(f"\n[DELETED] {deleted} activity records")
    return 0


if __name__ == "__main__":
    sys.exit(main())
