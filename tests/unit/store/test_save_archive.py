"""Unit tests for save archive persistence."""

from __future__ import annotations

import io
import json
import tarfile

import pytest

from core.errors import MalformedDocumentError, SaveStoreError
from core.types import SaveBundle, SaveInformation
from store.save_archive import (
    load_save_bundle,
    load_save_info,
    save_info_to_payload,
    write_save_bundle,
)
from tests.fixture_paths import SCREENSHOT_BYTES, load_legacy_document, make_save_info


def _write_raw_archive(save_path, entries: dict[str, bytes]) -> None:
    with tarfile.open(save_path, mode="w:gz") as archive:
        for name, data in entries.items():
            info = tarfile.TarInfo(name=name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))


def _read_raw_info(save_path) -> dict:
    with tarfile.open(save_path, mode="r:gz") as archive:
        handle = archive.extractfile("info.json")
        return json.loads(handle.read().decode("utf-8"))


def test_bundle_roundtrip_keeps_document_and_screenshot(tmp_path) -> None:
    """Archive should roundtrip info, document order, and screenshot bytes."""
    save_path = tmp_path / "save.thrivesave"
    document = load_legacy_document()
    bundle = SaveBundle(
        info=make_save_info("0.5.4.0"), document=document, screenshot=SCREENSHOT_BYTES
    )

    write_save_bundle(bundle, save_path)
    loaded = load_save_bundle(save_path)

    assert (
        loaded.info == bundle.info
        and loaded.document == document
        and list(loaded.document) == list(document)
        and loaded.screenshot == SCREENSHOT_BYTES
    )


def test_bundle_without_screenshot(tmp_path) -> None:
    """Screenshots are optional."""
    save_path = tmp_path / "save.thrivesave"
    write_save_bundle(
        SaveBundle(info=make_save_info("1.0"), document={"Info": {}}, screenshot=None),
        save_path,
    )

    assert load_save_bundle(save_path).screenshot is None


def test_write_replaces_existing_archive_without_leftovers(tmp_path) -> None:
    """Writing over an archive should leave no staging files behind."""
    save_path = tmp_path / "save.thrivesave"
    for version in ("1.0", "2.0"):
        write_save_bundle(
            SaveBundle(info=make_save_info(version), document={"Info": {}}), save_path
        )

    assert load_save_info(save_path).version == "2.0" and [
        item.name for item in tmp_path.iterdir()
    ] == ["save.thrivesave"]


def test_save_info_payload_uses_stored_names() -> None:
    """Metadata should serialize under the document's field names."""
    payload = save_info_to_payload(make_save_info("0.5.4.0", unique_id="abc"))

    assert payload["ThriveVersion"] == "0.5.4.0" and payload["ID"] == "abc" and set(payload) == {
        "ThriveVersion",
        "ID",
        "Platform",
        "Creator",
        "CreatedAt",
        "Description",
        "Type",
    }


def test_load_missing_archive_raises_store_error(tmp_path) -> None:
    """Missing archives should fail with a store error."""
    with pytest.raises(SaveStoreError):
        load_save_bundle(tmp_path / "missing.thrivesave")

    assert True


def test_load_corrupt_archive_raises_store_error(tmp_path) -> None:
    """Files that are not gzip tar archives should fail with a store error."""
    save_path = tmp_path / "save.thrivesave"
    save_path.write_bytes(b"definitely not a tarball")

    with pytest.raises(SaveStoreError):
        load_save_info(save_path)

    assert True


def test_load_archive_without_document_entry(tmp_path) -> None:
    """Archives missing save.json are incomplete saves."""
    save_path = tmp_path / "save.thrivesave"
    info = json.dumps({"ThriveVersion": "1.0", "ID": "x"}).encode("utf-8")
    _write_raw_archive(save_path, {"info.json": info})

    with pytest.raises(SaveStoreError):
        load_save_bundle(save_path)

    assert load_save_info(save_path).version == "1.0"


def test_load_non_object_document_raises_malformed_error(tmp_path) -> None:
    """A save document must be a JSON object."""
    save_path = tmp_path / "save.thrivesave"
    info = json.dumps({"ThriveVersion": "1.0", "ID": "x"}).encode("utf-8")
    _write_raw_archive(save_path, {"info.json": info, "save.json": b"[1, 2]"})

    with pytest.raises(MalformedDocumentError):
        load_save_bundle(save_path)

    assert True


def test_load_info_without_version_raises_malformed_error(tmp_path) -> None:
    """Metadata must record the save version."""
    save_path = tmp_path / "save.thrivesave"
    _write_raw_archive(save_path, {"info.json": json.dumps({"ID": "x"}).encode("utf-8")})

    with pytest.raises(MalformedDocumentError):
        load_save_info(save_path)

    assert True


def test_load_info_with_non_string_version_raises_malformed_error(tmp_path) -> None:
    """The save version must be a string to be compared."""
    save_path = tmp_path / "save.thrivesave"
    info = json.dumps({"ThriveVersion": 55, "ID": "x"}).encode("utf-8")
    _write_raw_archive(save_path, {"info.json": info})

    with pytest.raises(MalformedDocumentError):
        load_save_info(save_path)

    assert True


def test_metadata_keeps_json_types_and_unknown_keys_on_rewrite(tmp_path) -> None:
    """Loading and rewriting metadata should reproduce the original payload."""
    source_path = tmp_path / "source.thrivesave"
    target_path = tmp_path / "target.thrivesave"
    payload = {
        "ThriveVersion": "0.5.4.0-rc1",
        "ID": "x",
        "Type": 0,
        "Name": "pond",
        "Creator": None,
    }
    _write_raw_archive(
        source_path,
        {"info.json": json.dumps(payload).encode("utf-8"), "save.json": b'{"Info": {}}'},
    )

    info = load_save_info(source_path)
    write_save_bundle(SaveBundle(info=info, document={"Info": {}}), target_path)

    assert (
        info.save_type == 0
        and info.platform is None
        and info.extra == {"Name": "pond", "Creator": None}
        and _read_raw_info(target_path) == payload
    )


def test_payload_prefers_set_field_over_loaded_null() -> None:
    """A field set after loading should replace an explicit null kept in extra."""
    info = SaveInformation(version="1.0", unique_id="x", creator="tester", extra={"Creator": None})

    payload = save_info_to_payload(info)

    assert payload == {"ThriveVersion": "1.0", "ID": "x", "Creator": "tester"}


def test_failed_write_keeps_existing_archive_and_no_staging_files(tmp_path, monkeypatch) -> None:
    """A write that fails midway should leave the previous archive in place."""
    save_path = tmp_path / "save.thrivesave"
    write_save_bundle(SaveBundle(info=make_save_info("1.0"), document={"Info": {}}), save_path)
    original_bytes = save_path.read_bytes()

    def fail_entry(archive, entry_name: str, data: bytes) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("store.save_archive._add_entry", fail_entry)
    with pytest.raises(SaveStoreError):
        write_save_bundle(
            SaveBundle(info=make_save_info("2.0"), document={"Info": {}}), save_path
        )

    assert save_path.read_bytes() == original_bytes and [
        item.name for item in tmp_path.iterdir()
    ] == ["save.thrivesave"]
