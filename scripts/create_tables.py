#!/usr/bin/env python3
"""Create (or recreate with --drop) the database schema from the SQLAlchemy models."""

import asyncio
import sys

from healthlog.database.connection import db_manager


async def create_tables(drop: bool) -> bool:
    print("Creating database tables...")

    try:
        await db_manager.initialize()
        await db_manager.create_tables(drop=drop)
        healthy = await db_manager.health_check()
        print(f"Database tables created successfully! (healthy: {healthy})")
        return True

    except Exception as e:
        print(f"Failed to create tables: {e}")
        import traceback

        traceback.print_exc()
        return False
    finally:
        await db_manager.close()


if __name__ == "__main__":
    success = asyncio.run(create_tables(drop="--drop" in sys.argv[1:]))
    sys.exit(0 if success else 1)
