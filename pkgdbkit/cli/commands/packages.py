"""
Package database commands.

This module implements the CLI commands that operate on package databases:
- list: Show registered packages
- init: Create an empty database
- register: Register (or replace) a package record
- unregister: Remove packages by name, name-version or id
- lookup: Resolve package ids across a database stack
"""

import logging

from pkgdbkit.core.exceptions import PkgDBKitError
from pkgdbkit.db.base import MaybeInitDB
from pkgdbkit.packages.selectors import (
    PackageIdSelector,
    PackageSelector,
    parse_selector,
)
from pkgdbkit.registry.operations import (
    get_installed_packages,
    list_packages,
    read_packages_info,
    register,
    unregister,
)
from pkgdbkit.cli.utils import (
    db_stack,
    format_package,
    load_record_file,
    load_registry_context,
    print_error,
    safe_print,
    top_db,
)

logger = logging.getLogger(__name__)


def run_list(args) -> int:
    """
    List packages in the selected database.

    Args:
        args: Parsed command-line arguments with:
            - long: Also show name and version
            - dbs: Database stack

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        context = load_registry_context(args.config)
        packages = list_packages(context.db_type, top_db(args), context.locator)
    except PkgDBKitError as e:
        print_error(str(e))
        return 1

    for package in packages:
        safe_print(format_package(package, long=args.long))
    return 0


def run_init(args) -> int:
    """Create the selected database if it does not exist."""
    try:
        context = load_registry_context(args.config)
        ref = top_db(args)
        db = context.locator.locate(context.db_type, ref)
        if db is None:
            print_error(f"No {ref} package database is available")
            return 1
        get_installed_packages(
            context.db_type, ref, MaybeInitDB.INIT, context.locator
        )
    except PkgDBKitError as e:
        print_error(str(e))
        return 1

    safe_print(f"Package database ready at {db.location}")
    return 0


def run_register(args) -> int:
    """
    Register the package record read from ``args.file``.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        context = load_registry_context(args.config)
        package = load_record_file(args.file)
        register(
            context.db_type,
            top_db(args),
            package,
            locator=context.locator,
            lock_timeout=context.lock_timeout,
        )
    except OSError as e:
        print_error(f"Cannot read package record {args.file}", str(e))
        return 1
    except PkgDBKitError as e:
        print_error(str(e))
        return 1

    safe_print(f"Registered {package.id}")
    return 0


def run_unregister(args) -> int:
    """
    Unregister packages matching ``args.selector``.

    Finding nothing to remove is not an error. With ``--version`` the
    selector is the bare package name and the version is taken verbatim, so
    versions such as ``1.0rc1`` can be targeted.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    version = getattr(args, "version", None)
    if args.by_id and version is not None:
        print_error("--id and --version cannot be used together")
        return 1

    try:
        context = load_registry_context(args.config)
        if args.by_id:
            selector = PackageIdSelector(args.selector)
        elif version is not None:
            selector = PackageSelector.exact(args.selector, version)
        else:
            selector = parse_selector(args.selector)
        result = unregister(
            context.db_type,
            top_db(args),
            selector,
            locator=context.locator,
            lock_timeout=context.lock_timeout,
        )
    except PkgDBKitError as e:
        print_error(str(e))
        return 1

    if result.nothing_removed:
        safe_print("No packages removed")
    else:
        safe_print("Packages removed:")
        for package in result.removed:
            safe_print(f"  {package.id}")
    return 0


def run_lookup(args) -> int:
    """
    Look up every id in ``args.ids`` across the database stack.

    Returns:
        Exit code (0 when all ids were found, 1 otherwise)
    """
    try:
        context = load_registry_context(args.config)
        packages = read_packages_info(
            context.db_type,
            db_stack(args),
            args.ids,
            locator=context.locator,
        )
    except PkgDBKitError as e:
        print_error(str(e))
        return 1

    for package in packages:
        safe_print(format_package(package, long=True))
    return 0
