#!/usr/bin/env python3
"""Create the first administrator account if none exists."""
from __future__ import annotations

import argparse
import asyncio
import getpass
import sys

from accounts.core.config import get_settings
from accounts.core.errors import AccountsError
from accounts.db.session import Database
from accounts.core.log import configure_logging
from accounts.services.bootstrap import ensure_admin
from accounts.services.users import SqlUserRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the initial admin user")
    parser.add_argument("--username", default="admin", help="Login name for the admin (default: admin)")
    parser.add_argument("--email", default="admin@example.com", help="Email address for the admin")
    parser.add_argument(
        "--database-url",
        dest="database_url",
        default=None,
        help="SQLAlchemy async URL (defaults to ACCOUNTS_DATABASE_URL)",
    )
    return parser.parse_args(argv)


def prompt_for_password() -> str:
    for _ in range(3):
        password = getpass.getpass("Password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            print("Passwords do not match. Try again.", file=sys.stderr)
            continue
        if not password:
            print("Password cannot be empty.", file=sys.stderr)
            continue
        return password
    raise SystemExit("Failed to set password after three attempts.")


async def _run(database_url: str, username: str, password: str, email: str | None) -> int:
    database = Database(database_url)
    try:
        await database.create_all()
        user = await ensure_admin(SqlUserRepository(database), username, password, email)
    finally:
        await database.dispose()

    if user is None:
        print("There is already an admin. Nothing to do.")
    else:
        print(f"Created admin #{user.id}: {user.username}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    password = prompt_for_password()

    try:
        return asyncio.run(_run(args.database_url or settings.database_url, args.username, password, args.email))
    except AccountsError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
