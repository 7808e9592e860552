"""Data models for structured extraction results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ItemType(str, Enum):
    DECISION = "decision"
    ACTION = "action"
    COMMITMENT = "commitment"
    UNRESOLVED = "unresolved"


@dataclass
class ExtractedItem:
    """A single extracted item (decision, action, commitment, or unresolved)."""

    item_type: ItemType
    content: str
    owner: str | None = None
    due: str | None = None
    detail: str | None = None  # decision scope, action priority, or unresolved reason
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_type": self.item_type.value,
            "content": self.content,
            "owner": self.owner,
            "due": self.due,
            "detail": self.detail,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractedItem:
        return cls(
            item_type=ItemType(data["item_type"]),
            content=data["content"],
            owner=data.get("owner"),
            due=data.get("due"),
            detail=data.get("detail"),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class ExtractionResult:
    """Everything extracted from one note.

    Holds the note id only; results outlive the note they came from.
    """

    note_id: str
    created_at: datetime
    items: list[ExtractedItem] = field(default_factory=list)

    def _of_type(self, item_type: ItemType) -> list[ExtractedItem]:
        return [i for i in self.items if i.item_type is item_type]

    @property
    def decisions(self) -> list[ExtractedItem]:
        return self._of_type(ItemType.DECISION)

    @property
    def actions(self) -> list[ExtractedItem]:
        return self._of_type(ItemType.ACTION)

    @property
    def commitments(self) -> list[ExtractedItem]:
        return self._of_type(ItemType.COMMITMENT)

    @property
    def unresolved(self) -> list[ExtractedItem]:
        return self._of_type(ItemType.UNRESOLVED)
