"""Shared typed models.

This module defines the data models passed between the save store,
upgrade steps, and the chain runner to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

PAYLOAD_NAME = "payload_name"


def _stored_as(name: str, **kwargs: Any) -> Any:
    """Declare a field together with the key it uses inside save payloads."""
    return field(metadata={PAYLOAD_NAME: name}, **kwargs)


@dataclass
class SaveInformation:
    """Save-level metadata record.

    Upgrade steps replace ``version`` and ``unique_id`` once the upgraded
    save is written. Optional fields keep their JSON values as loaded and
    are None when the payload lacks them. Payload keys without a field
    are kept in ``extra`` so a rewrite carries them through unchanged.

    Attributes:
        version: Schema version the save was written with.
        unique_id: Save identifier, regenerated whenever content changes.
        platform: Platform the save was created on.
        creator: Name of the user that made the save.
        created_at: ISO-8601 creation timestamp.
        description: Free-form description shown in save lists.
        save_type: One of manual, auto, or quick.
        extra: Payload entries with no matching field, by payload name.
    """

    version: str = _stored_as("ThriveVersion")
    unique_id: str = _stored_as("ID")
    platform: Any = _stored_as("Platform", default=None)
    creator: Any = _stored_as("Creator", default=None)
    created_at: Any = _stored_as("CreatedAt", default=None)
    description: Any = _stored_as("Description", default=None)
    save_type: Any = _stored_as("Type", default=None)
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SaveBundle:
    """Everything stored in one save archive.

    Attributes:
        info: Metadata record from the info entry.
        document: Parsed save document root.
        screenshot: Raw screenshot bytes, if the archive has one.
    """

    info: SaveInformation
    document: dict[str, Any]
    screenshot: bytes | None = None


@dataclass(frozen=True)
class UpgradeChainLink:
    """One planned or applied step of an upgrade chain.

    Attributes:
        from_version: Version the step is registered under.
        to_version: Version the step produces.
        step_name: Class name of the step.
    """

    from_version: str
    to_version: str
    step_name: str


@dataclass(frozen=True)
class UpgradeChainResult:
    """Outcome of upgrading one save archive.

    Attributes:
        save_path: Upgraded archive path.
        start_version: Version recorded before upgrading.
        final_version: Version recorded after the last step.
        links: Steps applied in order.
        backup_path: Copy of the original archive, if one was made.
    """

    save_path: str
    start_version: str
    final_version: str
    links: tuple[UpgradeChainLink, ...]
    backup_path: str | None = None
