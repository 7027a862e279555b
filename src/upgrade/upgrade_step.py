"""Upgrade step contract and shared JSON step behavior.

A step upgrades a save from the version it is registered under to one
fixed target version. ``JsonUpgradeStep`` owns the load, metadata sync
and persist cycle so concrete steps only edit the document tree.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import fields, replace
from pathlib import Path
from typing import Any
from uuid import uuid4

from core.constants import SAVE_INFO_BLOCK_NAME
from core.errors import MalformedDocumentError, VersionParseError, VersionPreconditionError
from core.logging_config import get_logger
from core.types import SaveBundle, SaveInformation
from core.versioning import VersionOrdering, compare_versions
from store.save_archive import load_save_bundle, save_info_to_payload, write_save_bundle
from upgrade.tree_walker import DocumentField, walk_document

_LOGGER = get_logger(__name__)


class UpgradeStep(ABC):
    """One irreversible save schema transition."""

    @abstractmethod
    def perform_upgrade(
        self, save_info: SaveInformation, input_path: Path, output_path: Path
    ) -> str:
        """Upgrade the save at ``input_path`` and write it to ``output_path``.

        Args:
            save_info: Metadata of the input save; updated in place once the
                output is written.
            input_path: Archive to read.
            output_path: Archive to write, may equal ``input_path``.

        Returns:
            Version of the written save.
        """

    @abstractmethod
    def version_after_upgrade(self, save_info: SaveInformation) -> str | None:
        """Return the version ``perform_upgrade`` would produce, or None if it cannot apply."""


class JsonUpgradeStep(UpgradeStep):
    """Step that edits the parsed save document and resyncs its metadata."""

    @property
    @abstractmethod
    def version_after(self) -> str:
        """Version this step produces."""

    def perform_upgrade(
        self, save_info: SaveInformation, input_path: Path, output_path: Path
    ) -> str:
        """Run the load, edit, metadata sync and persist cycle.

        Metadata edits are made on a copy and applied to ``save_info`` only
        after the output archive is in place.

        Raises:
            VersionParseError: If either version cannot be compared.
            VersionPreconditionError: If the save is not older than the target.
            MalformedDocumentError: If the document has no metadata block.
        """
        self._check_can_upgrade(save_info)
        bundle = load_save_bundle(input_path)
        if bundle.info.version != save_info.version:
            # The passed save_info was validated before the chain started.
            _LOGGER.warning(
                "save_version_mismatch",
                save_path=str(input_path),
                loaded_version=bundle.info.version,
                expected_version=save_info.version,
            )
        info_block = bundle.document.get(SAVE_INFO_BLOCK_NAME)
        if not isinstance(info_block, dict):
            raise MalformedDocumentError(
                f"Save document in {input_path} has no '{SAVE_INFO_BLOCK_NAME}' object. "
                "The save cannot be upgraded."
            )
        previous_version = save_info.version
        self.upgrade_document(bundle.document)
        upgraded_info = _with_loaded_fallbacks(save_info, bundle.info)
        self.upgrade_save_info(upgraded_info)
        info_block.update(save_info_to_payload(upgraded_info))
        write_save_bundle(
            SaveBundle(info=upgraded_info, document=bundle.document, screenshot=bundle.screenshot),
            output_path,
        )
        for item in fields(save_info):
            setattr(save_info, item.name, getattr(upgraded_info, item.name))
        _LOGGER.info(
            "save_upgrade_step_applied",
            step=type(self).__name__,
            from_version=previous_version,
            to_version=self.version_after,
            output_path=str(output_path),
        )
        return self.version_after

    def version_after_upgrade(self, save_info: SaveInformation) -> str | None:
        if compare_versions(self.version_after, save_info.version) is VersionOrdering.GREATER:
            return self.version_after
        return None

    def upgrade_save_info(self, save_info: SaveInformation) -> None:
        """Set the new version and a new id, since the content now differs."""
        save_info.version = self.version_after
        save_info.unique_id = str(uuid4())

    @abstractmethod
    def upgrade_document(self, document: dict[str, Any]) -> None:
        """Edit the save document in place."""

    def _check_can_upgrade(self, save_info: SaveInformation) -> None:
        ordering = compare_versions(self.version_after, save_info.version)
        if ordering is VersionOrdering.INCOMPARABLE:
            raise VersionParseError(
                f"Could not compare save version '{save_info.version}' "
                f"to upgrade target '{self.version_after}'."
            )
        if ordering is not VersionOrdering.GREATER:
            raise VersionPreconditionError(
                f"{type(self).__name__} cannot upgrade a save at version "
                f"'{save_info.version}': expected a version older than '{self.version_after}'."
            )


class RecursiveFieldUpgradeStep(JsonUpgradeStep):
    """Step that inspects every field of the document through the tree walker."""

    def upgrade_document(self, document: dict[str, Any]) -> None:
        walk_document(document, self.on_visit_field, self.on_enter_mapping)

    def on_enter_mapping(self, mapping: dict[str, Any], path: str) -> None:
        """Edit a mapping before its fields are visited. No-op by default."""

    @abstractmethod
    def on_visit_field(self, field: DocumentField) -> None:
        """Inspect and possibly update one field."""


def _with_loaded_fallbacks(
    save_info: SaveInformation, loaded_info: SaveInformation
) -> SaveInformation:
    """Copy ``save_info``, filling fields it leaves unset from the loaded record."""
    missing = {
        item.name: getattr(loaded_info, item.name)
        for item in fields(save_info)
        if item.name != "extra" and getattr(save_info, item.name) is None
    }
    extra = copy.deepcopy(loaded_info.extra)
    extra.update(copy.deepcopy(save_info.extra))
    return replace(save_info, extra=extra, **missing)
