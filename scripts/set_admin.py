#!/usr/bin/env python3
"""
Grant admin privileges to an existing user.

Usage:
    python scripts/set_admin.py <username>
    python scripts/set_admin.py <username> --revoke
"""
import argparse
import asyncio
import os
import sys

from sqlalchemy import text

ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from healthlog.database import connection
from healthlog.database.queries import fetch_one
from healthlog.services.user_service import UserService


async def set_admin(username: str, is_admin: bool = True) -> int:
    """Returns the process exit status"""
    if not connection.init_database():
        print("Error: database is not configured (set DATABASE_URL or DB_HOST/DB_DATABASE)")
        return 1

    session_maker = connection.get_session()
    try:
        async with session_maker() as session:
            user = await fetch_one(
                session,
                text("SELECT id, is_admin FROM users WHERE username = :username").bindparams(username=username)
            )
            if not user:
                print(f"Error: user '{username}' not found")
                return 1

            await UserService.set_admin(session, user["id"], is_admin)
    finally:
        await connection.engine.dispose()

    action = "granted to" if is_admin else "revoked from"
    print(f"Admin privileges {action} '{username}' (id={user['id']})")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Grant or revoke admin privileges")
    parser.add_argument("username", help="username of the account to change")
    parser.add_argument("--revoke", action="store_true", help="remove the admin flag instead")
    args = parser.parse_args()

    sys.exit(asyncio.run(set_admin(args.username, not args.revoke)))


if __name__ == "__main__":
    main()
