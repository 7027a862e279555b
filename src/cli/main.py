"""Save upgrade CLI entry points.
This module exposes commands to inspect, plan, and upgrade save archives.
It maps argparse commands onto the chain runner and step registry.
"""

from __future__ import annotations

import argparse
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Sequence

from core.config import SaveUpgradeConfig
from core.errors import SaveUpgradeError
from core.types import SaveInformation
from store.save_archive import load_save_info
from upgrade.chain_runner import plan_upgrade_chain, upgrade_save
from upgrade.step_registry import UpgradeStepRegistry, default_registry


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="save-upgrade", description="Save archive upgrader")
    parser.add_argument("--saves-dir", help="Override SAVE_UPGRADE_SAVES_DIR for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_info_command(subparsers)
    _add_plan_command(subparsers)
    _add_upgrade_command(subparsers)
    _add_steps_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the save-upgrade CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    registry = default_registry()
    try:
        config = _build_config(args.saves_dir)
        if args.command == "info":
            return _run_info_command(config, args)
        if args.command == "plan":
            return _run_plan_command(config, registry, args)
        if args.command == "upgrade":
            return _run_upgrade_command(config, registry, args)
        if args.command == "steps":
            return _run_steps_command(registry)
    except SaveUpgradeError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(saves_dir: str | None) -> SaveUpgradeConfig:
    """Build config with optional saves-dir override."""
    config = SaveUpgradeConfig.from_env()
    if saves_dir:
        config = replace(config, saves_dir=Path(saves_dir).expanduser().resolve())
    return config


def _run_info_command(config: SaveUpgradeConfig, args: argparse.Namespace) -> int:
    """Handle info command."""
    save_info = load_save_info(config.resolve_save_path(args.save))
    for item in fields(SaveInformation):
        value = getattr(save_info, item.name)
        if item.name == "extra":
            for payload_name, extra_value in value.items():
                print(f"extra.{payload_name}={extra_value}")
        elif value is not None:
            print(f"{item.name}={value}")
    return 0


def _run_plan_command(
    config: SaveUpgradeConfig,
    registry: UpgradeStepRegistry,
    args: argparse.Namespace,
) -> int:
    """Handle plan command."""
    save_info = load_save_info(config.resolve_save_path(args.save))
    links = plan_upgrade_chain(save_info, registry)
    if not links:
        print(f"up_to_date={save_info.version}")
        return 0
    for link in links:
        print(f"{link.from_version} -> {link.to_version}\t{link.step_name}")
    return 0


def _run_upgrade_command(
    config: SaveUpgradeConfig,
    registry: UpgradeStepRegistry,
    args: argparse.Namespace,
) -> int:
    """Handle upgrade command."""
    result = upgrade_save(
        config.resolve_save_path(args.save),
        registry,
        config.current_version,
        backup=config.make_backups and not args.no_backup,
    )
    print(f"start_version={result.start_version}")
    print(f"final_version={result.final_version}")
    print(f"steps_applied={len(result.links)}")
    print(f"backup_path={result.backup_path or '-'}")
    return 0


def _run_steps_command(registry: UpgradeStepRegistry) -> int:
    """Handle steps command."""
    for source_version, step in registry.items():
        source_info = SaveInformation(version=source_version, unique_id="")
        target_version = step.version_after_upgrade(source_info) or "-"
        print(f"{source_version} -> {target_version}\t{type(step).__name__}")
    return 0


def _add_info_command(subparsers: Any) -> None:
    """Register info subcommand."""
    parser = subparsers.add_parser("info", help="Print save metadata")
    parser.add_argument("save", help="Save archive path or name inside the saves dir")


def _add_plan_command(subparsers: Any) -> None:
    """Register plan subcommand."""
    parser = subparsers.add_parser("plan", help="List the steps an upgrade would apply")
    parser.add_argument("save", help="Save archive path or name inside the saves dir")


def _add_upgrade_command(subparsers: Any) -> None:
    """Register upgrade subcommand."""
    parser = subparsers.add_parser("upgrade", help="Upgrade a save archive in place")
    parser.add_argument("save", help="Save archive path or name inside the saves dir")
    parser.add_argument(
        "--no-backup",
        action="store_true",
        help="Skip copying the save before upgrading",
    )


def _add_steps_command(subparsers: Any) -> None:
    """Register steps subcommand."""
    subparsers.add_parser("steps", help="List registered upgrade steps")
