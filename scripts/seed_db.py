"""
Seed script for the Ward Watch store.

Usage:
  - Seed the configured store: python scripts/seed_db.py
  - Seed the in-memory DB (smoke test of the routine): python scripts/seed_db.py --force-mock

Behavior:
  - Runs the same idempotent bootstrap the API runs on startup: default wards
    when the wards collection is empty, the admin account when no admin exists.
  - Running it again against a populated store creates nothing.

NOTE: When seeding real Firestore, ensure FIREBASE_CREDENTIALS_PATH is set and
USE_MOCK_DB=false in .env.
"""

import argparse
import asyncio

from wardwatch.config.firebase import get_db
from wardwatch.core.settings import settings
from wardwatch.services.bootstrap import initialize_default_data


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--force-mock", action="store_true", help="Use the in-memory DB even if Firebase is configured")
    args = parser.parse_args()

    if args.force_mock:
        print("Forcing mock DB usage for this run.")
        # Works because get_db() reads the flag lazily on first use
        settings.USE_MOCK_DB = True

    created = asyncio.run(initialize_default_data(get_db()))
    print(f"Wards created: {created['wards']}")
    print(f"Admins created: {created['admins']}")
    if not any(created.values()):
        print("Store already initialized, nothing to do.")


if __name__ == "__main__":
    main()
