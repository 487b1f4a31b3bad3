#!/usr/bin/env python3
"""
Migration script for IdeaHub
Creates database tables if they don't exist.
"""
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add the server directory to the path so we can import our modules
server_dir = Path(__file__).parent
sys.path.insert(0, str(server_dir))

load_dotenv()

from sqlalchemy import inspect

from app.db.database import engine, Base, check_connection
from app.db import models  # noqa: F401  registers tables on Base.metadata


def main():
    print("IdeaHub database migration")
    print("==========================")

    if not check_connection():
        print("Cannot reach the database. Check DATABASE_URL.")
        sys.exit(1)

    before = set(inspect(engine).get_table_names())
    Base.metadata.create_all(bind=engine)
    after = set(inspect(engine).get_table_names())

    created = sorted(after - before)
    if created:
        for table in created:
            print(f"  created table: {table}")
    else:
        print("  schema already up to date")
    print("Migration complete.")


if __name__ == "__main__":
    main()
