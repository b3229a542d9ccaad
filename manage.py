#!/usr/bin/env python3
"""
Database management script.
Creates the schema, resets development databases and manages privileged accounts.
"""

import asyncio
import argparse
import getpass
import logging
import sys

from estate_api.config import get_settings
from estate_api.database import engine, Base, AsyncSessionLocal, create_tables, close_db_connection
from estate_api.models.user import UserRole
from estate_api.repositories.user import UserRepository

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class DatabaseManager:
    """Schema and account management commands."""

    def __init__(self):
        self.settings = get_settings()

    async def init_db(self) -> None:
        """Create any missing tables."""
        await create_tables()

    async def reset_db(self) -> None:
        """Drop and recreate every table."""
        if not (self.settings.is_development or self.settings.is_testing):
            raise RuntimeError("Database reset is only allowed in development or test mode")

        logger.warning("Resetting database - all data will be lost!")
        import estate_api.models  # noqa: F401

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            logger.info("All tables dropped")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("All tables created")

    async def create_admin(self, email: str, password: str, full_name: str) -> None:
        """Create an administrator account, or promote an existing one."""
        async with AsyncSessionLocal() as session:
            repo = UserRepository(session)
            existing = await repo.get_by_email(email)

            if existing is not None:
                if existing.role == UserRole.ADMIN:
                    logger.info(f"Admin user already exists: {email}")
                    return
                await repo.update_user_role(existing.id, UserRole.ADMIN)
                logger.info(f"Existing user promoted to admin: {email}")
                return

            user = await repo.create_user({
                "email": email,
                "password": password,
                "full_name": full_name,
                "role": UserRole.ADMIN,
            })
            logger.info(f"Admin user created: {user.email} (ID: {user.id})")

    async def set_role(self, email: str, role: UserRole) -> None:
        async with AsyncSessionLocal() as session:
            repo = UserRepository(session)
            user = await repo.get_by_email(email)
            if user is None:
                raise LookupError(f"No user with email {email}")
            await repo.update_user_role(user.id, role)
            logger.info(f"Role of {email} set to {role.value}")

    async def set_active(self, email: str, is_active: bool) -> None:
        async with AsyncSessionLocal() as session:
            repo = UserRepository(session)
            user = await repo.get_by_email(email)
            if user is None:
                raise LookupError(f"No user with email {email}")
            await repo.update_user_status(user.id, is_active)
            logger.info(f"User {email} {'activated' if is_active else 'deactivated'}")


async def run(args) -> None:
    manager = DatabaseManager()
    try:
        if args.command == "init-db":
            await manager.init_db()
        elif args.command == "reset-db":
            await manager.reset_db()
        elif args.command == "create-admin":
            password = args.password or getpass.getpass("Admin password: ")
            await manager.create_admin(args.email, password, args.name)
        elif args.command == "set-role":
            await manager.set_role(args.email, UserRole(args.role))
        elif args.command == "activate":
            await manager.set_active(args.email, True)
        elif args.command == "deactivate":
            await manager.set_active(args.email, False)
    finally:
        await close_db_connection()


def main():
    """Main CLI interface for database management."""
    parser = argparse.ArgumentParser(description="Real Estate Listing API database management")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Create database tables")
    subparsers.add_parser("reset-db", help="Drop and recreate all tables (development only)")

    admin_parser = subparsers.add_parser("create-admin", help="Create an administrator account")
    admin_parser.add_argument("--email", required=True, help="Admin email")
    admin_parser.add_argument("--password", help="Admin password (prompted if omitted)")
    admin_parser.add_argument("--name", default="System Administrator", help="Full name")

    role_parser = subparsers.add_parser("set-role", help="Change a user's role")
    role_parser.add_argument("--email", required=True, help="User email")
    role_parser.add_argument("--role", required=True, choices=[role.value for role in UserRole])

    for command, help_text in (("activate", "Re-enable an account"), ("deactivate", "Disable an account")):
        status_parser = subparsers.add_parser(command, help=help_text)
        status_parser.add_argument("--email", required=True, help="User email")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    try:
        asyncio.run(run(args))
    except Exception as e:
        logger.error(f"Command failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
