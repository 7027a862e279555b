"""Save version parsing and ordering.

Versions are dotted non-negative integers with an optional pre-release
tag after the first ``-`` (``0.5.4.0-rc1``). A release sorts above every
pre-release with the same numbers. Pre-release tags compare as plain
strings, so ``rc10`` sorts before ``rc2``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import zip_longest

from core.constants import PRERELEASE_SEPARATOR, VERSION_COMPONENT_SEPARATOR
from core.errors import VersionParseError


class VersionOrdering(Enum):
    """Result of comparing two version strings."""

    LESS = -1
    EQUAL = 0
    GREATER = 1
    INCOMPARABLE = None

    @property
    def sign(self) -> int:
        """Return -1, 0 or 1 for comparable results.

        Raises:
            VersionParseError: For ``INCOMPARABLE``.
        """
        if self is VersionOrdering.INCOMPARABLE:
            raise VersionParseError("Incomparable versions have no ordering sign.")
        return int(self.value)


@dataclass(frozen=True)
class VersionIdentifier:
    """Parsed version.

    Attributes:
        components: Numeric components, most significant first.
        prerelease: Pre-release tag, or None for a release.
    """

    components: tuple[int, ...]
    prerelease: str | None = None

    def __str__(self) -> str:
        numbers = VERSION_COMPONENT_SEPARATOR.join(str(part) for part in self.components)
        if self.prerelease is None:
            return numbers
        return f"{numbers}{PRERELEASE_SEPARATOR}{self.prerelease}"


def parse_version(text: str) -> VersionIdentifier:
    """Parse a version string.

    Args:
        text: Version such as ``0.5.5.0`` or ``0.5.5.0-alpha``.

    Returns:
        Parsed version identifier.

    Raises:
        VersionParseError: If the string has no valid numeric part or an
            empty pre-release tag.
    """
    if not isinstance(text, str):
        raise VersionParseError(f"Invalid version {text!r}: expected a string.")
    numbers, separator, prerelease = text.strip().partition(PRERELEASE_SEPARATOR)
    if separator and not prerelease:
        raise VersionParseError(f"Invalid version '{text}': empty pre-release tag.")
    raw_components = numbers.split(VERSION_COMPONENT_SEPARATOR)
    if not all(part.isdigit() and part.isascii() for part in raw_components):
        raise VersionParseError(
            f"Invalid version '{text}': expected dot separated non-negative integers."
        )
    return VersionIdentifier(
        components=tuple(int(part) for part in raw_components),
        prerelease=prerelease or None,
    )


def compare_versions(first: str, second: str) -> VersionOrdering:
    """Compare two version strings.

    Returns:
        Ordering of ``first`` relative to ``second``, or ``INCOMPARABLE``
        when either string does not parse.
    """
    try:
        first_version = parse_version(first)
        second_version = parse_version(second)
    except VersionParseError:
        return VersionOrdering.INCOMPARABLE
    return compare_identifiers(first_version, second_version)


def compare_identifiers(first: VersionIdentifier, second: VersionIdentifier) -> VersionOrdering:
    """Compare two parsed versions, zero padding the shorter one."""
    for left, right in zip_longest(first.components, second.components, fillvalue=0):
        if left != right:
            return VersionOrdering.LESS if left < right else VersionOrdering.GREATER
    if first.prerelease == second.prerelease:
        return VersionOrdering.EQUAL
    if first.prerelease is None:
        return VersionOrdering.GREATER
    if second.prerelease is None:
        return VersionOrdering.LESS
    return VersionOrdering.LESS if first.prerelease < second.prerelease else VersionOrdering.GREATER
