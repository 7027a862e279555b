"""Version keyed registry of save upgrade steps.

The registry is built once and never mutated. Chain alignment between a
step's target and the next registered source version is not checked.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from functools import lru_cache
from types import MappingProxyType

from upgrade.upgrade_step import UpgradeStep
from upgrade.upgrade_steps import UpgradeJustVersionNumber, UpgradeStep054To055


class UpgradeStepRegistry:
    """Read-only mapping from source version to the step that upgrades it."""

    def __init__(self, entries: Iterable[tuple[str, UpgradeStep]]) -> None:
        """Build the registry.

        Args:
            entries: ``(source_version, step)`` pairs.

        Raises:
            ValueError: If two entries share a source version.
        """
        steps: dict[str, UpgradeStep] = {}
        for source_version, step in entries:
            if source_version in steps:
                raise ValueError(f"Upgrade step for version '{source_version}' already registered")
            steps[source_version] = step
        self._steps = MappingProxyType(steps)

    def lookup(self, version: str) -> UpgradeStep | None:
        """Return the step registered for ``version``, or None."""
        return self._steps.get(version)

    def supported_versions(self) -> tuple[str, ...]:
        """Return registered source versions in registration order."""
        return tuple(self._steps)

    def items(self) -> Iterator[tuple[str, UpgradeStep]]:
        """Iterate over ``(source_version, step)`` pairs in registration order."""
        return iter(self._steps.items())

    def __contains__(self, version: object) -> bool:
        return version in self._steps

    def __len__(self) -> int:
        return len(self._steps)


@lru_cache(maxsize=1)
def default_registry() -> UpgradeStepRegistry:
    """Return the process-wide registry of known save transitions."""
    # TODO: register version ranges per step so a skipped release cannot strand saves.
    return UpgradeStepRegistry(
        (
            ("0.5.4.0-rc1", UpgradeJustVersionNumber("0.5.4.0")),
            ("0.5.4.0", UpgradeStep054To055()),
            ("0.5.5.0-alpha", UpgradeJustVersionNumber("0.5.5.0-rc1")),
            ("0.5.5.0-rc1", UpgradeJustVersionNumber("0.5.5.0")),
        )
    )
