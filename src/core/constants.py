"""Core constants used across save upgrader modules.

This module centralizes archive entry names and runtime defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_SAVES_DIR = Path("saves")
CURRENT_SAVE_VERSION = "0.5.5.0"
SAVE_FILE_EXTENSION = ".thrivesave"
SAVE_INFO_ENTRY_NAME = "info.json"
SAVE_DOCUMENT_ENTRY_NAME = "save.json"
SAVE_SCREENSHOT_ENTRY_NAME = "screenshot.png"
SAVE_INFO_BLOCK_NAME = "Info"
BACKUP_NAME_MARKER = ".backup"
PRERELEASE_SEPARATOR = "-"
VERSION_COMPONENT_SEPARATOR = "."
