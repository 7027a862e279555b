"""Public SDK surface for the save upgrader.

This module provides a stable import path for tools embedding the upgrader.
It re-exports the registry, step base classes, and chain runner.
"""

from __future__ import annotations

from core.config import SaveUpgradeConfig
from core.types import SaveBundle, SaveInformation, UpgradeChainLink, UpgradeChainResult
from core.versioning import VersionIdentifier, VersionOrdering, compare_versions, parse_version
from store.save_archive import load_save_bundle, load_save_info, write_save_bundle
from upgrade.chain_runner import is_save_upgradeable, plan_upgrade_chain, upgrade_save
from upgrade.step_registry import UpgradeStepRegistry, default_registry
from upgrade.tree_walker import DocumentField, walk_document
from upgrade.upgrade_step import JsonUpgradeStep, RecursiveFieldUpgradeStep, UpgradeStep
from upgrade.upgrade_steps import UpgradeJustVersionNumber, UpgradeStep054To055

__all__ = [
    "DocumentField",
    "JsonUpgradeStep",
    "RecursiveFieldUpgradeStep",
    "SaveBundle",
    "SaveInformation",
    "SaveUpgradeConfig",
    "UpgradeChainLink",
    "UpgradeChainResult",
    "UpgradeJustVersionNumber",
    "UpgradeStep",
    "UpgradeStep054To055",
    "UpgradeStepRegistry",
    "VersionIdentifier",
    "VersionOrdering",
    "compare_versions",
    "default_registry",
    "is_save_upgradeable",
    "load_save_bundle",
    "load_save_info",
    "parse_version",
    "plan_upgrade_chain",
    "upgrade_save",
    "walk_document",
    "write_save_bundle",
]
