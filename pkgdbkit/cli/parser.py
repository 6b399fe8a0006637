"""
pkgdbkit CLI argument parser.

This module implements the command-line interface for pkgdbkit using argparse.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from pkgdbkit.db.locator import GlobalPackageDB, SpecificPackageDB, UserPackageDB

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("pkgdbkit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _add_db_arguments(parser: argparse.ArgumentParser):
    """
    Add the database selection flags.

    All three flags append to the same ``dbs`` list, so the order given on
    the command line is kept and forms the database stack.
    """
    group = parser.add_argument_group("package databases")
    group.add_argument(
        "--global",
        dest="dbs",
        action="append_const",
        const=GlobalPackageDB(),
        help="Use the global package database",
    )
    group.add_argument(
        "--user",
        dest="dbs",
        action="append_const",
        const=UserPackageDB(),
        help="Use the per-user package database (default)",
    )
    group.add_argument(
        "--package-db",
        dest="dbs",
        action="append",
        type=SpecificPackageDB,
        metavar="PATH",
        help="Use the package database at PATH (may be repeated)",
    )


class CLI:
    """pkgdbkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="pkgdb",
            description="pkgdbkit - installed package registry",
            epilog='Use "pkgdb COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"pkgdbkit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ~/.pkgdbkit/config.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_list_command(subparsers)
        self._add_init_command(subparsers)
        self._add_register_command(subparsers)
        self._add_unregister_command(subparsers)
        self._add_lookup_command(subparsers)

        return parser

    def _add_list_command(self, subparsers):
        """Add 'list' subcommand."""
        parser = subparsers.add_parser(
            "list",
            help="List registered packages",
            description="List the ids of all packages registered in a database",
        )
        parser.add_argument(
            "--long",
            "-l",
            action="store_true",
            help="Also show package name and version",
        )
        _add_db_arguments(parser)

    def _add_init_command(self, subparsers):
        """Add 'init' subcommand."""
        parser = subparsers.add_parser(
            "init",
            help="Create an empty package database",
            description="Create the package database if it does not exist yet",
        )
        _add_db_arguments(parser)

    def _add_register_command(self, subparsers):
        """Add 'register' subcommand."""
        parser = subparsers.add_parser(
            "register",
            help="Register a package",
            description=(
                "Register the package described by a JSON record file. "
                "A package with the same id is replaced."
            ),
        )
        parser.add_argument(
            "file",
            metavar="FILE",
            help='JSON package record ("-" reads standard input)',
        )
        _add_db_arguments(parser)

    def _add_unregister_command(self, subparsers):
        """Add 'unregister' subcommand."""
        parser = subparsers.add_parser(
            "unregister",
            help="Unregister packages",
            description=(
                "Unregister packages by NAME (every version) or NAME-VERSION. "
                "With --id, SELECTOR is the id of a single build. "
                "With --version, SELECTOR is a bare NAME."
            ),
        )
        parser.add_argument("selector", metavar="SELECTOR", help="Package selector")
        parser.add_argument(
            "--id",
            dest="by_id",
            action="store_true",
            help="Treat SELECTOR as a package id",
        )
        parser.add_argument(
            "--version",
            dest="version",
            metavar="VERSION",
            help="Remove only this exact version of NAME",
        )
        _add_db_arguments(parser)

    def _add_lookup_command(self, subparsers):
        """Add 'lookup' subcommand."""
        parser = subparsers.add_parser(
            "lookup",
            help="Look up packages by id",
            description=(
                "Look up package ids across the database stack. "
                "Fails if any id is not registered."
            ),
        )
        parser.add_argument("ids", nargs="+", metavar="ID", help="Package id")
        _add_db_arguments(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except Exception as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.WARNING
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        from pkgdbkit.cli.commands import packages

        command_map = {
            "list": packages.run_list,
            "init": packages.run_init,
            "register": packages.run_register,
            "unregister": packages.run_unregister,
            "lookup": packages.run_lookup,
        }

        handler = command_map.get(args.command)
        if not handler:
            logger.error(f"Unknown command: {args.command}")
            return 1

        return handler(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
