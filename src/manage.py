"""TaniMart database management CLI.

Creates and drops the database schema when the tanimart domain is
configured with a SQL provider. With the default in-memory provider both
commands are no-ops.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_database():
    """Create database schema for the tanimart domain."""
    from tanimart.domain import tanimart
    from tanimart.utils.db import setup_db

    print("Initializing tanimart domain...")
    tanimart.init()
    print("Creating tanimart database schema...")
    setup_db(tanimart)
    print("Done.")


def drop_database():
    """Drop database schema for the tanimart domain."""
    from tanimart.domain import tanimart
    from tanimart.utils.db import drop_db

    print("Initializing tanimart domain...")
    tanimart.init()
    print("Dropping tanimart database schema...")
    drop_db(tanimart)
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="TaniMart database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
