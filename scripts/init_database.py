#!/usr/bin/env python3
"""
Create every table from healthlog/database/schema.sql.

Statements use CREATE TABLE IF NOT EXISTS, so re-running is harmless.
"""
import asyncio
import os
import sys

from sqlalchemy import text

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from healthlog.database import connection

SCHEMA_PATH = os.path.join(ROOT_DIR, "healthlog", "database", "schema.sql")


def load_statements(path: str = SCHEMA_PATH) -> list:
    """Split the schema file into statements, dropping comment lines"""
    with open(path, encoding="utf-8") as f:
        lines = [line for line in f if not line.lstrip().startswith("--")]
    return [stmt.strip() for stmt in "".join(lines).split(";") if stmt.strip()]


async def apply_schema() -> int:
    if not connection.init_database():
        print("Error: database is not configured (set DATABASE_URL or DB_HOST/DB_DATABASE)")
        return 1

    statements = load_statements()
    try:
        async with connection.engine.begin() as conn:
            for statement in statements:
                await conn.execute(text(statement))
    finally:
        await connection.engine.dispose()

    print(f"Applied {len(statements)} statements from {SCHEMA_PATH}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(apply_schema()))
