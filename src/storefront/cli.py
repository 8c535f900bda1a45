"""
Command-line interface for Storefront administration.

Commands:
    serve             Run the API with uvicorn
    init-db           Create all tables
    drop-db           Drop all tables (requires --yes)
    set-access-level  Grant an access level to a user
    config            Show the validated configuration (secrets masked)
"""

import argparse
import json
import sys
from typing import List, Optional

from storefront.database.models import AccessLevel
from storefront.utils.config import get_settings
from storefront.utils.exceptions import StorefrontError
from storefront.utils.logger import get_logger, setup_logging

cli_logger = get_logger(__name__)


class StorefrontCLI:
    """Command handlers; each returns a process exit code."""

    def cmd_serve(self, args) -> int:
        import uvicorn

        settings = get_settings()
        uvicorn.run(
            "storefront.api.main:app",
            host=args.host or settings.server_host,
            port=args.port or settings.server_port,
            reload=args.reload,
        )
        return 0

    def cmd_init_db(self, args) -> int:
        from storefront.database.connection import init_db

        init_db()
        print("Database tables created")
        return 0

    def cmd_drop_db(self, args) -> int:
        if not args.yes:
            print("Refusing to drop tables without --yes")
            return 1

        from storefront.database.connection import drop_db

        drop_db()
        print("Database tables dropped")
        return 0

    def cmd_set_access_level(self, args) -> int:
        from storefront.database.connection import get_db_context
        from storefront.services.user_service import UserService

        with get_db_context() as db:
            UserService(db).set_access_level(args.email, args.level)

        print(f"{args.email} is now {args.level}")
        return 0

    def cmd_config(self, args) -> int:
        settings = get_settings()
        print(json.dumps(settings.masked(), indent=2, default=str))
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="storefront",
        description="Storefront API administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address (default: SERVER_HOST)")
    serve_parser.add_argument("--port", type=int, help="Port (default: SERVER_PORT)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("init-db", help="Create database tables")

    drop_parser = subparsers.add_parser("drop-db", help="Drop database tables")
    drop_parser.add_argument("--yes", action="store_true", help="Confirm dropping all tables")

    level_parser = subparsers.add_parser("set-access-level", help="Grant an access level to a user")
    level_parser.add_argument("email", help="User email")
    level_parser.add_argument("level", choices=[level.value for level in AccessLevel])

    subparsers.add_parser("config", help="Show validated configuration")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cli = StorefrontCLI()
    handler = getattr(cli, f"cmd_{args.command.replace('-', '_')}")

    try:
        setup_logging()
        if args.verbose:
            cli_logger.setLevel("DEBUG")
        return handler(args)
    except StorefrontError as e:
        cli_logger.error(f"CLI operation failed: {e}")
        print(f"Error: {e.message}")
        return 1


def cli_entry_point():
    """Entry point for console script."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli_entry_point()
