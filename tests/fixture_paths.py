"""Shared fixture helpers for tests."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

from core.types import SaveBundle, SaveInformation
from store.save_archive import save_info_to_payload, write_save_bundle

SCREENSHOT_BYTES = b"\x89PNG\r\n\x1a\nfake-screenshot"


def fixture_path(relative_path: str) -> Path:
    """Resolve a fixture path relative to tests/fixtures.

    Args:
        relative_path: Path under fixtures root.

    Returns:
        Absolute fixture path.
    """
    tests_root = Path(__file__).resolve().parent
    return tests_root / "fixtures" / relative_path


def load_legacy_document() -> dict[str, Any]:
    """Return a fresh copy of the legacy save document fixture."""
    payload = json.loads(fixture_path("saves/legacy_world.json").read_text(encoding="utf-8"))
    return copy.deepcopy(payload)


def make_save_info(version: str, unique_id: str = "save-0001") -> SaveInformation:
    return SaveInformation(
        version=version,
        unique_id=unique_id,
        platform="linux",
        creator="tester",
        created_at="2020-06-01T12:00:00+00:00",
        description="fixture save",
        save_type="manual",
    )


def write_save(
    save_path: Path,
    version: str,
    document: dict[str, Any] | None = None,
    screenshot: bytes | None = SCREENSHOT_BYTES,
) -> SaveInformation:
    """Write a save archive whose info and metadata block agree on ``version``.

    Returns:
        The metadata record written to the archive.
    """
    info = make_save_info(version)
    body = load_legacy_document() if document is None else document
    if isinstance(body.get("Info"), dict):
        body["Info"] = save_info_to_payload(info)
    write_save_bundle(SaveBundle(info=info, document=body, screenshot=screenshot), save_path)
    return make_save_info(version)
