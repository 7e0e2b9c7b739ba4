"""
Horizon CLI — Export design-document trees as snapshots and regeneration scripts.

Commands:
- horizon export   — Export every module, navigation and security document
- horizon check    — Report script identifier collisions without exporting

Usage:
    horizon export <tree_id> [branch]
    horizon export <tree_id> --from-file tree.yaml
    horizon check <tree_id> [branch]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Tuple

from horizon.engine.config import HorizonConfig, load_config
from horizon.engine.errors import HorizonConfigError, HorizonWorkingCopyError
from horizon.engine.logging import init_logging, log, log_export_event, log_system_event
from horizon.platform.client import PlatformClient, derived_app_name, needs_default_branch
from horizon.platform.local import LocalWorkingCopy
from horizon.platform.models import Tree

logger = logging.getLogger("horizon.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="horizon",
        description="Horizon — design-document tree exporter",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # horizon export
    export_parser = subparsers.add_parser("export", help="Export a tree to the output directory")
    _add_tree_arguments(export_parser)
    export_parser.add_argument("--output", help="Output directory (default: export.output_dir, 'Output')")

    # horizon check
    check_parser = subparsers.add_parser("check", help="Check a tree for identifier collisions")
    _add_tree_arguments(check_parser)

    args = parser.parse_args(argv)

    if args.command == "export":
        return cmd_export(args)
    elif args.command == "check":
        return cmd_check(args)
    else:
        parser.print_help()
        return 0


def _add_tree_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("tree_id", help="Tree (app) identifier on the platform")
    parser.add_argument("branch", nargs="?", default=None, help="Branch name (default: repository default)")
    parser.add_argument(
        "--config", default="horizon.yaml", help="Path to horizon.yaml (default: horizon.yaml)"
    )
    parser.add_argument("--from-file", help="Read the tree from a local YAML/JSON export instead")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Console log level (default: logging.level)",
    )


def _bootstrap(args: argparse.Namespace) -> Optional[HorizonConfig]:
    """Load config and set up console + structured logging."""
    try:
        config = load_config(args.config)
    except HorizonConfigError as e:
        print(f"[ERROR] {e.message}")
        return None

    logging.basicConfig(
        level=args.log_level or config.logging.level,
        format="%(message)s",
        stream=sys.stdout,
    )
    if config.logging.structured:
        init_logging(config.logging.directory)
        log(log_system_event("config_loaded", details={"config": args.config}))
    return config


# ---------------------------------------------------------------------------
# horizon export
# ---------------------------------------------------------------------------

def cmd_export(args: argparse.Namespace) -> int:
    """Export a tree. Only working-copy failures are handled; anything else propagates."""
    config = _bootstrap(args)
    if config is None:
        return 1
    return asyncio.run(_export(args, config))


async def _export(args: argparse.Namespace, config: HorizonConfig) -> int:
    from horizon.engine.exporter import TreeExporter

    if args.from_file:
        branch = _local_branch(args.branch, config)
        working_copy = LocalWorkingCopy(args.from_file)
        try:
            tree = await working_copy.open_model()
        except HorizonWorkingCopyError as e:
            _report_working_copy_failure(args.tree_id, branch, e)
            return 1
        exporter = TreeExporter.from_config(working_copy, config, output_dir=args.output)
        return await _run_exporter(exporter, tree, args.tree_id, branch)

    async with _platform_client(config) as client:
        branch = await client.resolve_branch(
            args.tree_id, args.branch, config.export.default_branches, config.export.branch_aliases
        )
        try:
            working_copy = await client.create_temporary_working_copy(args.tree_id, branch)
        except HorizonWorkingCopyError as e:
            _report_working_copy_failure(args.tree_id, branch, e)
            return 1

        async with working_copy:
            print(f"Opening {args.tree_id}, {derived_app_name(args.tree_id)}")
            tree = await working_copy.open_model()
            exporter = TreeExporter.from_config(working_copy, config, output_dir=args.output)
            return await _run_exporter(exporter, tree, args.tree_id, branch)


async def _run_exporter(exporter, tree: Tree, tree_id: str, branch: str) -> int:
    log(log_export_event("export_started", tree_id, branch))
    summary = await exporter.run(tree)
    log(log_export_event("export_completed", tree_id, branch, details=summary.to_dict()))
    print(
        f"[OK] Exported {summary.modules} module(s), {summary.documents} document(s), "
        f"{summary.folders} folder(s) → {len(summary.files)} file(s) in {exporter.writer.output_dir}"
    )
    return 0


# ---------------------------------------------------------------------------
# horizon check
# ---------------------------------------------------------------------------

def cmd_check(args: argparse.Namespace) -> int:
    """Report identifier collisions found in the tree index. Nothing is written."""
    config = _bootstrap(args)
    if config is None:
        return 1
    return asyncio.run(_check(args, config))


async def _check(args: argparse.Namespace, config: HorizonConfig) -> int:
    from horizon.engine.walker import find_collisions

    loaded = await _open_tree_for_check(args, config)
    if loaded is None:
        return 1
    tree, branch = loaded

    found = 0
    for module in tree.modules:
        collisions = find_collisions(module, config.export.capabilities)
        for collision in collisions:
            print(f"[ERROR] {collision.describe()}")
        if not collisions:
            print(f"[OK] {module.name}")
        found += len(collisions)

    log(log_export_event("check_completed", args.tree_id, branch, details={"collisions": found}))
    print(f"\n{'No collisions found.' if found == 0 else f'{found} collision(s) found.'}")
    return 1 if found else 0


async def _open_tree_for_check(
    args: argparse.Namespace, config: HorizonConfig
) -> Optional[Tuple[Tree, str]]:
    if args.from_file:
        branch = _local_branch(args.branch, config)
        try:
            return await LocalWorkingCopy(args.from_file).open_model(), branch
        except HorizonWorkingCopyError as e:
            _report_working_copy_failure(args.tree_id, branch, e)
            return None

    async with _platform_client(config) as client:
        branch = await client.resolve_branch(
            args.tree_id, args.branch, config.export.default_branches, config.export.branch_aliases
        )
        try:
            working_copy = await client.create_temporary_working_copy(args.tree_id, branch)
        except HorizonWorkingCopyError as e:
            _report_working_copy_failure(args.tree_id, branch, e)
            return None
        async with working_copy:
            return await working_copy.open_model(), branch


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _platform_client(config: HorizonConfig) -> PlatformClient:
    return PlatformClient(
        config.platform.base_url,
        token=config.platform.token,
        timeout=config.platform.timeout,
    )


def _local_branch(branch: Optional[str], config: HorizonConfig) -> str:
    """Label for local exports; they have no versioning system to ask."""
    if needs_default_branch(branch, config.export.branch_aliases):
        return config.export.default_branches.get("git", "main")
    return branch


def _report_working_copy_failure(tree_id: str, branch: str, error: HorizonWorkingCopyError) -> None:
    app_name = derived_app_name(tree_id)
    message = (
        f"Failed to create new working copy for app {tree_id}, {app_name}, "
        f"branch {branch}: {error.message}"
    )
    logger.error(message)
    log(log_export_event(
        "working_copy_failed", tree_id, branch, level="ERROR", details=error.to_dict()
    ))
    print(f"[ERROR] {message}")


if __name__ == "__main__":
    sys.exit(main())
