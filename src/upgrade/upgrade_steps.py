"""Concrete save schema transitions.

Each class fixes one historical schema change. Steps are registered by
the version they upgrade from in ``upgrade.step_registry``.
"""

from __future__ import annotations

from typing import Any

from core.logging_config import get_logger
from upgrade.tree_walker import DocumentField
from upgrade.upgrade_step import JsonUpgradeStep, RecursiveFieldUpgradeStep

_LOGGER = get_logger(__name__)


class UpgradeJustVersionNumber(JsonUpgradeStep):
    """Bump the save version without touching the document.

    Used when a schema revision changes nothing structurally, for example
    when a release candidate becomes the release.
    """

    def __init__(self, version_to_set: str) -> None:
        self._version_after = version_to_set

    @property
    def version_after(self) -> str:
        return self._version_after

    def upgrade_document(self, document: dict[str, Any]) -> None:
        # Version and id are written by the shared metadata sync.
        return None


class UpgradeStep054To055(RecursiveFieldUpgradeStep):
    """Rename the despawn radius field and the calcium carbonate membrane."""

    @property
    def version_after(self) -> str:
        return "0.5.5.0-alpha"

    def on_enter_mapping(self, mapping: dict[str, Any], path: str) -> None:
        if "DespawnRadiusSqr" not in mapping:
            return
        field = DocumentField(mapping, "DespawnRadiusSqr", path)
        field.rename("DespawnRadiusSquared")
        _LOGGER.info("save_field_renamed", path=field.path, old_name="DespawnRadiusSqr")

    def on_visit_field(self, field: DocumentField) -> None:
        if "membrane" not in field.key.lower():
            return
        if isinstance(field.value, str) and field.value == "calcium_carbonate":
            field.value = "calciumCarbonate"
            _LOGGER.info("save_value_updated", path=field.path, new_value="calciumCarbonate")
