#!/usr/bin/env python3
"""
Database Reset Script
Drop and recreate the purchasing schema

Notes:
- Works for both PostgreSQL and SQLite (DATABASE_URL)
- This script only resets the schema, it does not seed data
- To seed data, run `python -m script.seed_data`
"""

import asyncio

from src.platform.database.orm_db_setting import Database


async def main() -> None:
    print('🔄 Starting database reset...')
    print('=' * 50)

    database = Database()
    print(f'Database URL: {database.database_url}')

    try:
        print('🗑️ Dropping tables...')
        await database.drop_tables()
        print('🏗️ Creating tables...')
        await database.create_tables()
    except Exception as e:
        print(f'❌ Reset failed: {e}')
        raise SystemExit(1) from e
    finally:
        await database.dispose()

    print('=' * 50)
    print('✅ Database reset completed!')
    print('💡 To seed data, run: python -m script.seed_data')


if __name__ == '__main__':
    asyncio.run(main())
