#!/usr/bin/env python3
"""
Database management script.
Creates, drops and resets the schema, and bootstraps admin accounts.
"""

import argparse
import asyncio
import getpass
import logging
import sys

from classifieds_api.config import settings
from classifieds_api.database import (
    AsyncSessionLocal,
    create_tables,
    drop_tables,
    close_db_connection,
    test_database_connection
)
from classifieds_api.models.user import UserRole
from classifieds_api.repositories.user import UserRepository
from classifieds_api.utils.exceptions import DuplicateKeyError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class MigrationManager:
    """Manages the database schema and initial accounts."""

    async def create(self) -> None:
        """Create every table that does not exist yet."""
        if not await test_database_connection():
            raise RuntimeError("Database is not reachable")
        await create_tables()

    async def drop(self) -> None:
        """Drop every table. Refused in production."""
        logger.warning("Dropping all tables - all data will be lost!")
        await drop_tables()

    async def reset(self) -> None:
        """Drop and recreate every table."""
        await self.drop()
        await self.create()
        logger.info("Database reset completed")

    async def create_admin(self, name: str, email: str, password: str) -> None:
        """
        Create an admin account.

        Args:
            name: Display name
            email: Login email
            password: Plain text password, hashed before storage
        """
        async with AsyncSessionLocal() as session:
            repo = UserRepository(session)
            try:
                admin = await repo.create_user({
                    "name": name,
                    "email": email,
                    "password": password,
                    "role": UserRole.ADMIN,
                })
            except DuplicateKeyError:
                logger.info(f"User {email} already exists, skipping")
                return

        logger.info(f"Admin user created: {admin.email} (ID: {admin.id})")


async def _run(coro) -> None:
    try:
        await coro
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description=f"Database management for {settings.app_name}")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("create", help="Create all tables")

    drop_parser = subparsers.add_parser("drop", help="Drop all tables (not in production)")
    drop_parser.add_argument("--confirm", action="store_true", help="Confirm dropping tables")

    reset_parser = subparsers.add_parser("reset", help="Drop and recreate all tables (not in production)")
    reset_parser.add_argument("--confirm", action="store_true", help="Confirm database reset")

    admin_parser = subparsers.add_parser("create-admin", help="Create an admin account")
    admin_parser.add_argument("--email", required=True, help="Admin email")
    admin_parser.add_argument("--name", default="Administrator", help="Admin display name")
    admin_parser.add_argument("--password", help="Admin password (prompted when omitted)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    manager = MigrationManager()

    try:
        if args.command == "create":
            asyncio.run(_run(manager.create()))

        elif args.command in ("drop", "reset"):
            if not args.confirm:
                print(f"Database {args.command} requires --confirm flag")
                return
            action = manager.drop() if args.command == "drop" else manager.reset()
            asyncio.run(_run(action))

        elif args.command == "create-admin":
            password = args.password or getpass.getpass("Admin password: ")
            if len(password) < 6:
                print("Password must be at least 6 characters")
                sys.exit(1)
            asyncio.run(_run(manager.create_admin(args.name, args.email, password)))

    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
