"""Pharmacy management CLI.

Provides commands to create and drop the database schema, reload the catalog
from a JSON export and run the controlled-substance classification.

Usage:
    python src/manage.py setup-db                  # Create all tables
    python src/manage.py drop-db                   # Drop all tables
    python src/manage.py reload-catalog PATH       # Replace the catalog from a JSON file
    python src/manage.py flag-controlled           # Mark controlled substances
"""

import argparse
import sys


def _init_domain():
    from pharmacy.domain import pharmacy

    print("Initializing pharmacy domain...")
    pharmacy.init()
    return pharmacy


def setup_database():
    """Create the database schema for the pharmacy domain."""
    from pharmacy.utils.db import setup_db

    pharmacy = _init_domain()
    print("Creating pharmacy database schema...")
    setup_db(pharmacy)
    print("Done.")


def drop_database():
    """Drop the database schema for the pharmacy domain."""
    from pharmacy.utils.db import drop_db

    pharmacy = _init_domain()
    print("Dropping pharmacy database schema...")
    drop_db(pharmacy)
    print("Done.")


def reload_catalog_from_file(path):
    """Replace the whole catalog with the records in ``path``."""
    from pharmacy.catalog.reload import load_catalog_file, reload_catalog
    from pharmacy.store import get_store

    pharmacy = _init_domain()
    records = load_catalog_file(path)
    with pharmacy.domain_context():
        report = reload_catalog(get_store(), None, records)
    print(f"  loaded={report.loaded} skipped={report.skipped} removed={report.removed}")
    print("Done.")
    return report


def flag_controlled():
    """Mark every product naming a controlled active ingredient."""
    from pharmacy.catalog.controlled import flag_controlled_substances
    from pharmacy.store import get_store

    pharmacy = _init_domain()
    with pharmacy.domain_context():
        flagged = flag_controlled_substances(get_store())
    print(f"  {flagged} product(s) newly flagged as controlled.")
    print("Done.")
    return flagged


def main():
    parser = argparse.ArgumentParser(description="Pharmacy management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    reload_parser = subparsers.add_parser("reload-catalog", help="Replace the catalog from a JSON file")
    reload_parser.add_argument("path", help="JSON array of product records")

    subparsers.add_parser("flag-controlled", help="Mark controlled-substance products")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "reload-catalog":
        reload_catalog_from_file(args.path)
    elif args.command == "flag-controlled":
        flag_controlled()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
