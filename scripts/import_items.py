"""
Import the scraped item catalog (JSON {"items": [...]}) into the database.
Run this script from the project root: python scripts/import_items.py [path/to/items.json]
"""
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'chest-api'))

from chest_api.core.config import settings
from chest_api.core.db import SessionLocal, init_db
from chest_api.core.errors import LedgerError
from chest_api.services.importer import import_items_file


def main():
    path = sys.argv[1] if len(sys.argv) > 1 else settings.ITEMS_IMPORT_PATH

    if settings.CREATE_TABLES:
        init_db()

    print(f"Reading {path}...")
    db = SessionLocal()
    try:
        result = import_items_file(db, path)
    except LedgerError as e:
        print(f"Import failed: {e.detail}")
        sys.exit(1)
    finally:
        db.close()

    print(f"Inserted: {result.inserted}")
    print(f"Updated:  {result.updated}")
    print(f"Skipped:  {result.skipped}")
    print("Done!")


if __name__ == '__main__':
    main()
