"""
Todo Storage - ABC and in-memory implementation.
"""

import asyncio
import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime

from voicetodo.todo.models import Category, Todo, TodoSection
from voicetodo.tool.exceptions import ToolExecutionError

# Seeded with fixed ids; these cannot be deleted
DEFAULT_CATEGORIES = (
    Category(id="work", name="WORK", display_name="Work", sort_order=0, is_default=True),
    Category(
        id="life", name="LIFE", display_name="Life", color="#4caf50", sort_order=1, is_default=True
    ),
    Category(
        id="study", name="STUDY", display_name="Study", color="#ff9800", sort_order=2, is_default=True
    ),
)


class TodoRepository(ABC):
    """Abstract base for todo and category persistence."""

    @abstractmethod
    async def add_todo(
        self,
        title: str,
        description: str | None = None,
        section: TodoSection = TodoSection.TODO,
        category_id: str | None = None,
    ) -> Todo:
        ...

    @abstractmethod
    async def get_todo(self, todo_id: str) -> Todo | None:
        ...

    @abstractmethod
    async def update_todo(self, todo: Todo) -> None:
        """Replace a stored todo (matched by id)."""
        ...

    @abstractmethod
    async def delete_todo(self, todo_id: str) -> bool:
        """Delete a todo. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def list_todos(self, section: TodoSection | None = None) -> list[Todo]:
        """List todos in creation order, optionally filtered by section."""
        ...

    @abstractmethod
    async def create_category(
        self,
        name: str,
        display_name: str,
        color: str = "#137fec",
        icon: str | None = None,
    ) -> Category:
        ...

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        ...

    @abstractmethod
    async def delete_category(self, category_id: str) -> None:
        """
        Delete a user-created category. Its todos become uncategorized.

        Raises:
            ToolExecutionError: If the category is unknown or a default one
        """
        ...

    async def update_section(self, todo_id: str, section: TodoSection) -> Todo | None:
        todo = await self.get_todo(todo_id)
        if todo is None:
            return None
        updated = replace(todo, section=section)
        await self.update_todo(updated)
        return updated

    async def update_reminder(self, todo_id: str, when: datetime) -> Todo | None:
        todo = await self.get_todo(todo_id)
        if todo is None:
            return None
        updated = replace(todo, reminder_time=when)
        await self.update_todo(updated)
        return updated


class InMemoryTodoRepository(TodoRepository):
    """In-memory implementation for testing. Seeds the default categories unless told not to."""

    def __init__(self, seed_defaults: bool = True) -> None:
        self._todos: dict[str, Todo] = {}
        self._categories: dict[str, Category] = {}
        if seed_defaults:
            self._categories.update({c.id: replace(c) for c in DEFAULT_CATEGORIES})
        self._lock = asyncio.Lock()

    async def add_todo(
        self,
        title: str,
        description: str | None = None,
        section: TodoSection = TodoSection.TODO,
        category_id: str | None = None,
    ) -> Todo:
        todo = Todo(
            id=uuid.uuid4().hex[:8],
            title=title,
            description=description,
            section=section,
            category_id=category_id,
        )
        async with self._lock:
            self._todos[todo.id] = todo
        return todo

    async def get_todo(self, todo_id: str) -> Todo | None:
        return self._todos.get(todo_id)

    async def update_todo(self, todo: Todo) -> None:
        async with self._lock:
            if todo.id in self._todos:
                self._todos[todo.id] = todo

    async def delete_todo(self, todo_id: str) -> bool:
        async with self._lock:
            return self._todos.pop(todo_id, None) is not None

    async def list_todos(self, section: TodoSection | None = None) -> list[Todo]:
        return [t for t in self._todos.values() if section is None or t.section == section]

    async def create_category(
        self,
        name: str,
        display_name: str,
        color: str = "#137fec",
        icon: str | None = None,
    ) -> Category:
        async with self._lock:
            category = Category(
                id=uuid.uuid4().hex[:8],
                name=name,
                display_name=display_name,
                color=color,
                icon=icon,
                sort_order=max((c.sort_order for c in self._categories.values()), default=-1) + 1,
            )
            self._categories[category.id] = category
        return category

    async def list_categories(self) -> list[Category]:
        return sorted(self._categories.values(), key=lambda c: c.sort_order)

    async def delete_category(self, category_id: str) -> None:
        async with self._lock:
            category = self._categories.get(category_id)
            if category is None:
                raise ToolExecutionError("No category matches the given categoryId")
            if category.is_default:
                raise ToolExecutionError("Cannot delete default category")
            del self._categories[category_id]
            for todo_id, todo in self._todos.items():
                if todo.category_id == category_id:
                    self._todos[todo_id] = replace(todo, category_id=None)
