"""Runtime configuration model for the save upgrader.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import CURRENT_SAVE_VERSION, DEFAULT_SAVES_DIR
from core.errors import SaveConfigError, VersionParseError
from core.versioning import parse_version

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


@dataclass(frozen=True)
class SaveUpgradeConfig:
    """Validated runtime configuration.

    Attributes:
        saves_dir: Directory that relative save names resolve against.
        current_version: Version the chain runner treats as up to date.
        make_backups: Whether saves are copied before being upgraded.
    """

    saves_dir: Path
    current_version: str
    make_backups: bool

    @classmethod
    def from_env(cls) -> "SaveUpgradeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SaveConfigError: If environment values are invalid.
        """
        saves_dir_value = os.getenv("SAVE_UPGRADE_SAVES_DIR", str(DEFAULT_SAVES_DIR))
        current_version = os.getenv("SAVE_UPGRADE_CURRENT_VERSION", CURRENT_SAVE_VERSION)
        backups_value = os.getenv("SAVE_UPGRADE_BACKUPS", "1")
        return cls(
            saves_dir=Path(saves_dir_value).expanduser().resolve(),
            current_version=_parse_current_version(current_version),
            make_backups=_parse_flag("SAVE_UPGRADE_BACKUPS", backups_value),
        )

    def resolve_save_path(self, save_name: str) -> Path:
        """Resolve a save argument to an archive path.

        Existing paths are used as given. Anything else is looked up in
        ``saves_dir``.
        """
        candidate = Path(save_name).expanduser()
        if candidate.is_absolute() or candidate.exists():
            return candidate.resolve()
        return self.saves_dir / candidate


def _parse_current_version(raw_value: str) -> str:
    """Validate the configured current save version.

    Raises:
        SaveConfigError: If the value is not a parseable version.
    """
    try:
        parse_version(raw_value)
    except VersionParseError as error:
        raise SaveConfigError(
            "Invalid SAVE_UPGRADE_CURRENT_VERSION value: "
            f"{error} Set it to a dotted version such as '{CURRENT_SAVE_VERSION}'."
        ) from error
    return raw_value


def _parse_flag(variable_name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Raises:
        SaveConfigError: If value is not a recognized boolean spelling.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SaveConfigError(
        f"Invalid {variable_name} value: expected one of "
        f"{', '.join(_TRUE_VALUES + _FALSE_VALUES)}, got '{raw_value}'."
    )
