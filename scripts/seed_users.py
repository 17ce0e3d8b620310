"""Seed the document store with demo users (enough to exercise pagination).

This module serves as a CLI wrapper around app.core.seed.
"""
from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.core.seed import DEMO_USER_COUNT, seed_demo_users
from app.core.store import MongoDocumentStore, StoreError


def main(argv: list[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Seed demo SCIM users into MongoDB")
    parser.add_argument("--connection", default=os.environ.get("MONGODB_CONNECTION", "mongodb://localhost:27017"))
    parser.add_argument("--database", default=os.environ.get("DATABASE", "scim"))
    parser.add_argument("--collection", default=os.environ.get("COLLECTION", "users"))
    parser.add_argument("--count", type=int, default=DEMO_USER_COUNT)
    parser.add_argument("--timeout", type=float, default=float(os.environ.get("STORE_TIMEOUT_SECONDS", "5")))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="[%(name)s] %(message)s")

    try:
        store = MongoDocumentStore.connect(args.connection, args.database, args.collection, args.timeout)
    except StoreError as exc:
        print(f"[seed] Cannot reach MongoDB: {exc}", file=sys.stderr)
        return 1

    try:
        inserted = seed_demo_users(store, args.count)
    except StoreError as exc:
        print(f"[seed] Seeding failed: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"[seed] Inserted {inserted} of {args.count} users into {args.database}.{args.collection}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
