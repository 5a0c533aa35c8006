"""Practice problem value object."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, eq=True)
class Problem:
    """The problem under attempt, supplied at session creation.

    Attributes:
        id: Stable problem identifier (e.g. "two-sum").
        title: Display title.
        description: Full problem statement.
    """

    id: str
    title: str
    description: str

    def __post_init__(self) -> None:
        """Validate problem fields."""
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("Problem id must be a non-empty string")
        if not isinstance(self.title, str):
            raise ValueError("Problem title must be a string")
        if not isinstance(self.description, str):
            raise ValueError("Problem description must be a string")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "title": self.title, "description": self.description}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> Problem:
        """Build a problem from its dictionary form.

        Raises:
            ValueError: If raw is not a mapping with an "id".
        """
        if not isinstance(raw, Mapping) or "id" not in raw:
            raise ValueError("Problem requires a mapping with an 'id'")
        return cls(
            id=raw["id"],
            title=raw.get("title", ""),
            description=raw.get("description", ""),
        )
