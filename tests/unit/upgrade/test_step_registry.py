"""Unit tests for the version keyed upgrade step registry."""

from __future__ import annotations

import pytest

from tests.fixture_paths import make_save_info
from upgrade.step_registry import UpgradeStepRegistry, default_registry
from upgrade.upgrade_steps import UpgradeJustVersionNumber, UpgradeStep054To055


def test_lookup_returns_none_for_unregistered_version() -> None:
    """Unknown versions should resolve to no step rather than an error."""
    registry = default_registry()

    assert registry.lookup("0.4.0.0") is None and registry.lookup("") is None


def test_lookup_returns_same_registered_instance() -> None:
    """Repeated lookups should return the exact registered step."""
    step = UpgradeJustVersionNumber("1.1")
    registry = UpgradeStepRegistry([("1.0", step)])

    assert registry.lookup("1.0") is step and registry.lookup("1.0") is registry.lookup("1.0")


def test_registry_rejects_duplicate_source_versions() -> None:
    """Two steps for one source version is a programming error."""
    entries = [("1.0", UpgradeJustVersionNumber("1.1")), ("1.0", UpgradeJustVersionNumber("1.2"))]

    with pytest.raises(ValueError):
        UpgradeStepRegistry(entries)

    assert True


def test_default_registry_is_built_once() -> None:
    """Default registry should be process-wide shared state."""
    assert default_registry() is default_registry()


def test_default_registry_known_transitions() -> None:
    """Default registry should hold the historical transitions in order."""
    registry = default_registry()

    assert registry.supported_versions() == (
        "0.5.4.0-rc1",
        "0.5.4.0",
        "0.5.5.0-alpha",
        "0.5.5.0-rc1",
    ) and isinstance(registry.lookup("0.5.4.0"), UpgradeStep054To055)


def test_default_registry_steps_move_strictly_forward() -> None:
    """Every registered step should produce a version newer than its key."""
    registry = default_registry()

    targets = {
        source: step.version_after_upgrade(make_save_info(source))
        for source, step in registry.items()
    }

    assert targets == {
        "0.5.4.0-rc1": "0.5.4.0",
        "0.5.4.0": "0.5.5.0-alpha",
        "0.5.5.0-alpha": "0.5.5.0-rc1",
        "0.5.5.0-rc1": "0.5.5.0",
    }


def test_registry_membership_and_size() -> None:
    """Registry should support membership checks and len."""
    registry = UpgradeStepRegistry([("1.0", UpgradeJustVersionNumber("1.1"))])

    assert "1.0" in registry and "1.1" not in registry and len(registry) == 1
