"""
Seed script for the Lightning Triage reports collection.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to Firestore: python scripts/seed_db.py --apply
  - Custom file: python scripts/seed_db.py --file my_reports.json --apply

Behavior:
  - Loads raw report records (document id -> fields) from a JSON file.
  - Shows how each record will be normalized.
  - With --apply, writes each record to the configured reports collection.

Records are written raw on purpose: string coordinates, "..." image
placeholders and assorted timestamp keys are exactly what the normalizer
has to cope with.

NOTE: Ensure FIREBASE_CREDENTIALS_PATH (or Application Default Credentials)
is configured in `.env` before using --apply.
"""

import argparse
import json
import os
from typing import Any, Dict

from app.config.firebase import get_db
from app.core.settings import settings
from app.services.report_normalizer import normalize_report

DEFAULT_SEED_PATH = os.path.join(os.path.dirname(__file__), "sample_reports.json")


def load_seed(path: str) -> Dict[str, Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_to_db(db: Any, collection: str, records: Dict[str, Dict[str, Any]], apply: bool = False):
    for doc_id, data in records.items():
        report = normalize_report(doc_id, data)
        print(f"Preparing: {collection}/{doc_id} -> {report.address} ({report.latitude}, {report.longitude}) [{report.timestamp_string}]")
        if not apply:
            continue
        try:
            db.collection(collection).document(doc_id).set(data)
            print(f"Wrote: {collection}/{doc_id}")
        except Exception as e:
            print(f"Failed to write {collection}/{doc_id}: {e}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to Firestore instead of dry-run")
    parser.add_argument("--file", default=DEFAULT_SEED_PATH, help="JSON file of raw report records")
    parser.add_argument("--collection", default=settings.REPORTS_COLLECTION, help="Target collection")
    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"Seed file not found: {args.file}")
        return

    records = load_seed(args.file)
    db = get_db() if args.apply else None

    write_to_db(db, args.collection, records, apply=args.apply)

    if args.apply:
        print("Seeding completed.")
    else:
        print("Dry run complete. Re-run with --apply to write to Firestore.")


if __name__ == "__main__":
    main()
