"""Local exchange history.

Records what a committed mapping changed in the design model: which elements
were created and which were updated, with the before/after values of updated
value properties.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.values import literal_to_text
from ..models.design import Class, DesignElement, Property

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    NONE = "none"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class HistoryEntry:
    """One recorded change."""
    element_id: str
    element_name: str
    change_kind: ChangeKind
    message: str
    author: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element_id": self.element_id,
            "element_name": self.element_name,
            "change_kind": self.change_kind.value,
            "message": self.message,
            "author": self.author,
            "timestamp": self.timestamp.isoformat(),
        }


class LocalExchangeHistoryService:
    """Collects history entries for committed mapping changes."""

    def __init__(self, author: Optional[str] = None):
        self.author = author or os.getenv("USER", "unknown")
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def append(self, element: DesignElement, change_kind: ChangeKind,
               message: Optional[str] = None) -> HistoryEntry:
        entry = HistoryEntry(
            element_id=element.id,
            element_name=element.name,
            change_kind=change_kind,
            message=message or f"{type(element).__name__} {element.name} ({change_kind.value})",
            author=self.author,
        )
        self._entries.append(entry)
        logger.debug(f"History: {entry.message}")
        return entry

    def append_update(self, updated: DesignElement, original: Optional[DesignElement]) -> HistoryEntry:
        """Record an update, listing value properties whose value changed."""
        changes = _value_changes(updated, original)

        if not changes:
            return self.append(updated, ChangeKind.UPDATE)

        message = f"{type(updated).__name__} {updated.name} updated: " + "; ".join(changes)
        return self.append(updated, ChangeKind.UPDATE, message)

    def clear(self) -> None:
        self._entries.clear()

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]


def _value_changes(updated: DesignElement, original: Optional[DesignElement]) -> List[str]:
    if not isinstance(updated, Class):
        return []

    before: Dict[str, str] = {}
    if isinstance(original, Class):
        before = {
            a.name: literal_to_text(a.default_value)
            for a in original.owned_attributes if isinstance(a, Property)
        }

    changes = []
    for attribute in updated.owned_attributes:
        if attribute.default_value is None:
            continue
        new_value = literal_to_text(attribute.default_value)
        old_value = before.get(attribute.name)
        if old_value is None:
            changes.append(f"{attribute.name} = {new_value}")
        elif old_value != new_value:
            changes.append(f"{attribute.name}: {old_value} -> {new_value}")

    return changes
