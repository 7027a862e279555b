"""Save upgrader exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure condition raises a specific error type for debuggability.
"""

from __future__ import annotations


class SaveUpgradeError(Exception):
    """Base exception for all save upgrade failures."""


class SaveConfigError(SaveUpgradeError):
    """Raised for invalid runtime configuration."""


class VersionParseError(SaveUpgradeError):
    """Raised when a version string cannot be split into comparable parts."""


class VersionPreconditionError(SaveUpgradeError):
    """Raised when a step is applied to a save that is not older than its target."""


class InvalidDocumentShapeError(SaveUpgradeError):
    """Raised when a document node is not the expected mapping or array."""


class MalformedDocumentError(SaveUpgradeError):
    """Raised when a loaded save lacks required structure or metadata."""


class SaveStoreError(SaveUpgradeError):
    """Raised for save archive read and write failures."""


class SaveChainError(SaveUpgradeError):
    """Raised when an upgrade chain cannot reach the current version."""
