"""Save archive persistence helpers.

A save archive is a gzip-compressed tar holding the metadata record
(``info.json``), the save document (``save.json``) and an optional
screenshot. Writes are staged next to the target and moved into place.
"""

from __future__ import annotations

import io
import json
import os
import tarfile
import tempfile
from dataclasses import Field, fields
from pathlib import Path
from typing import Any

from core.constants import (
    SAVE_DOCUMENT_ENTRY_NAME,
    SAVE_INFO_ENTRY_NAME,
    SAVE_SCREENSHOT_ENTRY_NAME,
)
from core.errors import MalformedDocumentError, SaveStoreError
from core.types import PAYLOAD_NAME, SaveBundle, SaveInformation

_REQUIRED_FIELDS = ("version", "unique_id")


def load_save_bundle(save_path: Path) -> SaveBundle:
    """Load metadata, document and screenshot from a save archive.

    Args:
        save_path: Archive path.

    Returns:
        Loaded save bundle.

    Raises:
        SaveStoreError: If the archive or a required entry is unreadable.
        MalformedDocumentError: If the document or metadata payload is invalid.
    """
    entries = _read_entries(
        save_path,
        (SAVE_INFO_ENTRY_NAME, SAVE_DOCUMENT_ENTRY_NAME, SAVE_SCREENSHOT_ENTRY_NAME),
    )
    info = save_info_from_payload(
        _decode_json_entry(save_path, entries, SAVE_INFO_ENTRY_NAME), save_path
    )
    document = _decode_json_entry(save_path, entries, SAVE_DOCUMENT_ENTRY_NAME)
    return SaveBundle(
        info=info,
        document=document,
        screenshot=entries.get(SAVE_SCREENSHOT_ENTRY_NAME),
    )


def load_save_info(save_path: Path) -> SaveInformation:
    """Load only the metadata record from a save archive."""
    entries = _read_entries(save_path, (SAVE_INFO_ENTRY_NAME,))
    payload = _decode_json_entry(save_path, entries, SAVE_INFO_ENTRY_NAME)
    return save_info_from_payload(payload, save_path)


def write_save_bundle(bundle: SaveBundle, save_path: Path) -> None:
    """Write a save bundle to an archive atomically.

    Args:
        bundle: Bundle to persist.
        save_path: Destination archive path; replaced if it exists.

    Raises:
        SaveStoreError: If the archive cannot be written.
    """
    members = [
        (SAVE_INFO_ENTRY_NAME, _encode_json(save_info_to_payload(bundle.info))),
        (SAVE_DOCUMENT_ENTRY_NAME, _encode_json(bundle.document)),
    ]
    if bundle.screenshot is not None:
        members.append((SAVE_SCREENSHOT_ENTRY_NAME, bundle.screenshot))
    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        descriptor, temp_name = tempfile.mkstemp(
            dir=save_path.parent, prefix=".tmp_", suffix=save_path.suffix
        )
    except OSError as error:
        raise SaveStoreError(f"Failed to stage save archive for {save_path}: {error}.") from error
    try:
        with os.fdopen(descriptor, "wb") as handle:
            with tarfile.open(fileobj=handle, mode="w:gz") as archive:
                for entry_name, data in members:
                    _add_entry(archive, entry_name, data)
        os.replace(temp_name, save_path)
    except (OSError, tarfile.TarError) as error:
        raise SaveStoreError(f"Failed to write save archive {save_path}: {error}.") from error
    finally:
        if os.path.exists(temp_name):
            os.remove(temp_name)


def save_info_to_payload(info: SaveInformation) -> dict[str, Any]:
    """Map metadata fields to their payload names.

    Optional fields that are None are left out. Entries kept in ``extra``
    are written back as they were loaded unless a field now sets the key.
    """
    payload: dict[str, Any] = {}
    for item in _payload_fields():
        value = getattr(info, item.name)
        if value is not None or item.name in _REQUIRED_FIELDS:
            payload[item.metadata[PAYLOAD_NAME]] = value
    for payload_name, value in info.extra.items():
        payload.setdefault(payload_name, value)
    return payload


def save_info_from_payload(payload: dict[str, Any], save_path: Path) -> SaveInformation:
    """Deserialize a metadata record from its payload.

    Values keep their JSON types. Keys with no matching field, and explicit
    nulls, are kept in ``extra``.

    Raises:
        MalformedDocumentError: If a required field is missing or the version
            is not a string.
    """
    values: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    field_names = {item.metadata[PAYLOAD_NAME]: item.name for item in _payload_fields()}
    for payload_name, value in payload.items():
        field_name = field_names.get(payload_name)
        if field_name is None or value is None:
            extra[payload_name] = value
        else:
            values[field_name] = value
    for required_name in _REQUIRED_FIELDS:
        if required_name not in values:
            raise MalformedDocumentError(
                f"Invalid save metadata in {save_path}: missing required field "
                f"'{_payload_name_of(required_name)}'."
            )
    if not isinstance(values["version"], str):
        raise MalformedDocumentError(
            f"Invalid save metadata in {save_path}: "
            f"'{_payload_name_of('version')}' must be a string."
        )
    return SaveInformation(**values, extra=extra)


def _payload_fields() -> tuple[Field, ...]:
    return tuple(item for item in fields(SaveInformation) if PAYLOAD_NAME in item.metadata)


def _payload_name_of(field_name: str) -> str:
    for item in _payload_fields():
        if item.name == field_name:
            return str(item.metadata[PAYLOAD_NAME])
    return field_name


def _read_entries(save_path: Path, entry_names: tuple[str, ...]) -> dict[str, bytes]:
    """Read the named entries that exist in an archive."""
    if not save_path.is_file():
        raise SaveStoreError(f"Save archive not found at {save_path}.")
    entries: dict[str, bytes] = {}
    try:
        with tarfile.open(save_path, mode="r:gz") as archive:
            for member in archive.getmembers():
                if member.name not in entry_names or not member.isfile():
                    continue
                extracted = archive.extractfile(member)
                if extracted is not None:
                    entries[member.name] = extracted.read()
    except (OSError, tarfile.TarError) as error:
        raise SaveStoreError(f"Failed to read save archive {save_path}: {error}.") from error
    return entries


def _decode_json_entry(
    save_path: Path, entries: dict[str, bytes], entry_name: str
) -> dict[str, Any]:
    """Parse one required JSON object entry."""
    if entry_name not in entries:
        raise SaveStoreError(
            f"Save archive {save_path} has no '{entry_name}' entry. "
            "The file is not a complete save."
        )
    try:
        payload = json.loads(entries[entry_name].decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise MalformedDocumentError(
            f"Failed to parse '{entry_name}' in {save_path}: {error}."
        ) from error
    if not isinstance(payload, dict):
        raise MalformedDocumentError(
            f"Failed to parse '{entry_name}' in {save_path}: expected JSON object at top level."
        )
    return payload


def _encode_json(payload: object) -> bytes:
    return json.dumps(payload, indent=2).encode("utf-8")


def _add_entry(archive: tarfile.TarFile, entry_name: str, data: bytes) -> None:
    info = tarfile.TarInfo(name=entry_name)
    info.size = len(data)
    archive.addfile(info, io.BytesIO(data))
