"""
Todo data models.

Defines Todo, TodoSection and Category.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class TodoSection(str, Enum):
    """Board section a todo lives in."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    DO_LATER = "do_later"

    @classmethod
    def parse(cls, value: str) -> "TodoSection | None":
        """Parse user/LLM text such as 'In Progress' or 'do_later'."""
        normalized = value.strip().lower().replace(" ", "_").replace("-", "_")
        for section in cls:
            if section.value == normalized:
                return section
        return None

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass
class Todo:
    id: str
    title: str
    description: str | None = None
    section: TodoSection = TodoSection.TODO
    category_id: str | None = None
    reminder_time: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Category:
    id: str
    name: str
    display_name: str
    color: str = "#137fec"
    icon: str | None = None
    sort_order: int = 0
    is_default: bool = False  # Seeded categories cannot be deleted
