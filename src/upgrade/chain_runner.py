"""Upgrade chain runner.

This module walks a save archive from its recorded version through the
registered steps until no further step applies. It plans the whole chain
before touching the archive and can keep a backup of the original.
"""

from __future__ import annotations

import shutil
from dataclasses import replace
from pathlib import Path

from core.constants import BACKUP_NAME_MARKER
from core.errors import SaveChainError, SaveStoreError, VersionParseError
from core.logging_config import get_logger
from core.types import SaveInformation, UpgradeChainLink, UpgradeChainResult
from core.versioning import VersionOrdering, compare_versions
from store.save_archive import load_save_info
from upgrade.step_registry import UpgradeStepRegistry

_LOGGER = get_logger(__name__)


def is_save_upgradeable(
    save_info: SaveInformation,
    registry: UpgradeStepRegistry,
    current_version: str,
) -> bool:
    """Return whether a save is older than current and has a registered step."""
    ordering = compare_versions(save_info.version, current_version)
    return ordering is VersionOrdering.LESS and save_info.version in registry


def plan_upgrade_chain(
    save_info: SaveInformation,
    registry: UpgradeStepRegistry,
) -> tuple[UpgradeChainLink, ...]:
    """Resolve the steps that would upgrade a save, without any I/O.

    Args:
        save_info: Metadata of the save; not modified.
        registry: Step registry to walk.

    Returns:
        Ordered chain links, empty when no step is registered.

    Raises:
        SaveChainError: If a registered step refuses the version it is
            registered under.
    """
    links: list[UpgradeChainLink] = []
    version = save_info.version
    while True:
        step = registry.lookup(version)
        if step is None:
            return tuple(links)
        next_version = step.version_after_upgrade(replace(save_info, version=version))
        if next_version is None:
            raise SaveChainError(
                f"Step {type(step).__name__} registered for version '{version}' "
                "cannot upgrade it. Fix the registry entry."
            )
        links.append(
            UpgradeChainLink(
                from_version=version,
                to_version=next_version,
                step_name=type(step).__name__,
            )
        )
        version = next_version


def upgrade_save(
    save_path: Path,
    registry: UpgradeStepRegistry,
    current_version: str,
    backup: bool = True,
) -> UpgradeChainResult:
    """Upgrade a save archive in place to the newest reachable version.

    Args:
        save_path: Archive to upgrade.
        registry: Step registry.
        current_version: Version considered up to date.
        backup: Copy the archive before the first step runs.

    Returns:
        Result describing the applied steps.

    Raises:
        VersionParseError: If the save version cannot be compared.
        SaveChainError: If the save is older than current but the chain
            cannot reach the current version.
    """
    save_info = load_save_info(save_path)
    start_version = save_info.version
    if compare_versions(start_version, current_version) is VersionOrdering.INCOMPARABLE:
        raise VersionParseError(
            f"Save {save_path} has version '{start_version}' "
            f"which cannot be compared to '{current_version}'."
        )
    links = plan_upgrade_chain(save_info, registry)
    final_version = links[-1].to_version if links else start_version
    if compare_versions(final_version, current_version) is VersionOrdering.LESS:
        raise SaveChainError(
            f"No upgrade path from version '{start_version}' to '{current_version}': "
            f"the chain stops at '{final_version}'."
        )
    if not links:
        return UpgradeChainResult(
            save_path=str(save_path),
            start_version=start_version,
            final_version=start_version,
            links=(),
        )
    backup_path = create_backup(save_path) if backup else None
    for link in links:
        step = registry.lookup(link.from_version)
        if step is None:
            raise SaveChainError(f"Upgrade step for version '{link.from_version}' disappeared.")
        produced_version = step.perform_upgrade(save_info, save_path, save_path)
        if produced_version != link.to_version:
            raise SaveChainError(
                f"Step {link.step_name} produced version '{produced_version}', "
                f"expected '{link.to_version}'."
            )
    _LOGGER.info(
        "save_upgraded",
        save_path=str(save_path),
        start_version=start_version,
        final_version=final_version,
        step_count=len(links),
    )
    return UpgradeChainResult(
        save_path=str(save_path),
        start_version=start_version,
        final_version=final_version,
        links=links,
        backup_path=str(backup_path) if backup_path else None,
    )


def create_backup(save_path: Path) -> Path:
    """Copy a save archive next to itself under an unused backup name.

    Raises:
        SaveStoreError: If the copy fails.
    """
    backup_path = backup_path_for(save_path)
    try:
        shutil.copy2(save_path, backup_path)
    except OSError as error:
        raise SaveStoreError(f"Failed to back up {save_path} to {backup_path}: {error}.") from error
    _LOGGER.info("save_backup_created", save_path=str(save_path), backup_path=str(backup_path))
    return backup_path


def backup_path_for(save_path: Path) -> Path:
    """Return ``<stem>.backup<suffix>``, numbered when that name is taken."""
    candidate = save_path.with_name(f"{save_path.stem}{BACKUP_NAME_MARKER}{save_path.suffix}")
    counter = 1
    while candidate.exists():
        candidate = save_path.with_name(
            f"{save_path.stem}{BACKUP_NAME_MARKER}{counter}{save_path.suffix}"
        )
        counter += 1
    return candidate
