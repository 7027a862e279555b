"""Recursive walker over JSON save documents.

Visitors receive a ``DocumentField`` for every field of every mapping,
including mappings nested in other mappings and mappings held in lists.
Lists nested directly inside lists are not entered.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from core.errors import InvalidDocumentShapeError

FieldVisitor = Callable[["DocumentField"], None]
MappingVisitor = Callable[[dict[str, Any], str], None]


class DocumentField:
    """Handle to one key of a mapping, valid while that key exists."""

    def __init__(self, parent: dict[str, Any], key: str, parent_path: str) -> None:
        self.parent = parent
        self.key = key
        self._parent_path = parent_path

    @property
    def path(self) -> str:
        """Dotted path of the field from the document root."""
        if not self._parent_path:
            return self.key
        return f"{self._parent_path}.{self.key}"

    @property
    def value(self) -> Any:
        return self.parent[self.key]

    @value.setter
    def value(self, new_value: Any) -> None:
        self.parent[self.key] = new_value

    def rename(self, new_key: str) -> None:
        """Rename the field in place, keeping its value and position."""
        rename_key(self.parent, self.key, new_key)
        self.key = new_key


def rename_key(mapping: dict[str, Any], old_key: str, new_key: str) -> None:
    """Rename one mapping key without changing field order.

    Raises:
        InvalidDocumentShapeError: If ``old_key`` is missing or ``new_key``
            already names another field.
    """
    if old_key not in mapping:
        raise InvalidDocumentShapeError(f"Cannot rename '{old_key}': field does not exist.")
    if new_key == old_key:
        return
    if new_key in mapping:
        raise InvalidDocumentShapeError(
            f"Cannot rename '{old_key}' to '{new_key}': target field already exists."
        )
    items = [(new_key if key == old_key else key, value) for key, value in mapping.items()]
    mapping.clear()
    mapping.update(items)


def walk_document(
    mapping: dict[str, Any],
    visit: FieldVisitor,
    enter_mapping: MappingVisitor | None = None,
    path: str = "",
) -> None:
    """Visit every field reachable from a mapping, pre-order.

    ``visit`` runs on a field before the walker descends into its value,
    and the descent uses whatever value the field holds afterwards. Keys
    are snapshotted per mapping: keys removed by a visitor are skipped and
    keys added by a visitor are not visited in the same pass.

    Args:
        mapping: Root mapping to walk.
        visit: Callback for each field.
        enter_mapping: Optional callback run once on each mapping before
            its fields are visited.
        path: Path of ``mapping`` used to build field paths.

    Raises:
        InvalidDocumentShapeError: If ``mapping`` is not a dict.
    """
    if not isinstance(mapping, dict):
        raise InvalidDocumentShapeError(
            f"Expected a JSON object at '{path or '<root>'}', got {type(mapping).__name__}."
        )
    if enter_mapping is not None:
        enter_mapping(mapping, path)
    for key in list(mapping.keys()):
        if key not in mapping:
            continue
        field = DocumentField(mapping, key, path)
        visit(field)
        if field.key not in mapping:
            continue
        _descend(field.value, field.path, visit, enter_mapping)


def _descend(
    value: Any,
    path: str,
    visit: FieldVisitor,
    enter_mapping: MappingVisitor | None,
) -> None:
    if isinstance(value, list):
        for index, item in enumerate(value):
            if isinstance(item, dict):
                walk_document(item, visit, enter_mapping, f"{path}[{index}]")
    elif isinstance(value, dict):
        walk_document(value, visit, enter_mapping, path)
