"""
Todo tools exposed to the agent.

Usage:
    from voicetodo.todo.tools import create_todo_tools

    tools = create_todo_tools(InMemoryTodoRepository())
    dispatcher = ToolDispatcher(tools, invoker)

Tools raise ToolExecutionError for bad input or missing todos. Those
messages carry no transient markers, so such calls are not retried.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Type

from voicetodo.todo.models import Todo, TodoSection
from voicetodo.todo.repository import TodoRepository
from voicetodo.tool.base import BaseTool
from voicetodo.tool.exceptions import ToolExecutionError

TODO_TOOLS: dict[str, Type["TodoTool"]] = {}

_SECTION_CHOICES = ", ".join(s.value for s in TodoSection)
_SECTION_ICONS = {
    TodoSection.TODO: "[ ]",
    TodoSection.IN_PROGRESS: "[~]",
    TodoSection.DONE: "[x]",
    TodoSection.DO_LATER: "[>]",
}


def todo_tool(name: str):
    """Register a TodoTool subclass under its tool name."""

    def decorator(cls: Type["TodoTool"]) -> Type["TodoTool"]:
        if name in TODO_TOOLS:
            raise ValueError(f"Todo tool name '{name}' is already registered")
        TODO_TOOLS[name] = cls
        cls.tool_name = name
        return cls

    return decorator


def create_todo_tools(repository: TodoRepository) -> list[BaseTool]:
    """Instantiate every registered todo tool over one repository."""
    return [cls(repository) for cls in TODO_TOOLS.values()]


def _string_param(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


def _object_schema(properties: dict[str, Any], required: list[str]) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required}


class TodoTool(BaseTool):
    """Base class for tools operating on a TodoRepository."""

    tool_name: str = ""

    def __init__(self, repository: TodoRepository) -> None:
        self.repository = repository
        super().__init__()

    def get_name(self) -> str:
        return self.tool_name

    @staticmethod
    def require_str(parameters: dict[str, Any], key: str) -> str:
        value = parameters.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ToolExecutionError(f"Missing required argument: {key}")
        return value

    async def require_todo(self, parameters: dict[str, Any]) -> Todo:
        todo_id = self.require_str(parameters, "todoId")
        todo = await self.repository.get_todo(todo_id)
        if todo is None:
            raise ToolExecutionError("No todo matches the given todoId")
        return todo


class _SectionMoveTool(TodoTool):
    target: TodoSection = TodoSection.TODO

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema({"todoId": _string_param("Todo ID")}, ["todoId"])

    async def execute(self, parameters: dict[str, Any]) -> str:
        todo = await self.require_todo(parameters)
        await self.repository.update_section(todo.id, self.target)
        return f"Moved todo to {self.target.label}: {todo.title}"


@todo_tool("addTodo")
class AddTodoTool(TodoTool):
    def get_description(self) -> str:
        return "Add a new todo item"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema(
            {
                "title": _string_param("Title of the todo"),
                "description": _string_param("Optional description"),
                "section": _string_param(
                    f"Section to place the todo in ({_SECTION_CHOICES})"
                ),
            },
            ["title"],
        )

    async def execute(self, parameters: dict[str, Any]) -> str:
        title = self.require_str(parameters, "title")
        raw = parameters.get("section")
        section = (TodoSection.parse(raw) if isinstance(raw, str) else None) or TodoSection.TODO
        todo = await self.repository.add_todo(
            title=title,
            description=parameters.get("description"),
            section=section,
        )
        return f"Added todo: {todo.title} in {section.label} [{todo.id}]"


@todo_tool("editTitle")
class EditTitleTool(TodoTool):
    def get_description(self) -> str:
        return "Change the title of a todo"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema(
            {"todoId": _string_param("Todo ID"), "title": _string_param("New title")},
            ["todoId", "title"],
        )

    async def execute(self, parameters: dict[str, Any]) -> str:
        todo = await self.require_todo(parameters)
        title = self.require_str(parameters, "title")
        await self.repository.update_todo(replace(todo, title=title))
        return f"Updated todo title to: {title}"


@todo_tool("editDescription")
class EditDescriptionTool(TodoTool):
    def get_description(self) -> str:
        return "Edit todo description"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema(
            {
                "todoId": _string_param("Todo ID"),
                "description": _string_param("New description"),
            },
            ["todoId", "description"],
        )

    async def execute(self, parameters: dict[str, Any]) -> str:
        todo = await self.require_todo(parameters)
        description = parameters.get("description") or ""
        await self.repository.update_todo(replace(todo, description=description))
        return f"Updated todo description to: {description}"


@todo_tool("removeTodo")
class RemoveTodoTool(TodoTool):
    def get_description(self) -> str:
        return "Remove a todo item"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema({"todoId": _string_param("ID of todo to remove")}, ["todoId"])

    async def execute(self, parameters: dict[str, Any]) -> str:
        todo = await self.require_todo(parameters)
        await self.repository.delete_todo(todo.id)
        return f"Removed todo: {todo.title}"


@todo_tool("markComplete")
class MarkCompleteTool(_SectionMoveTool):
    target = TodoSection.DONE

    def get_description(self) -> str:
        return "Mark todo as complete"


@todo_tool("markInProgress")
class MarkInProgressTool(_SectionMoveTool):
    target = TodoSection.IN_PROGRESS

    def get_description(self) -> str:
        return "Mark todo as in progress"


@todo_tool("markDoLater")
class MarkDoLaterTool(_SectionMoveTool):
    target = TodoSection.DO_LATER

    def get_description(self) -> str:
        return "Mark todo to do later"


@todo_tool("setReminder")
class SetReminderTool(TodoTool):
    def get_description(self) -> str:
        return "Set reminder for todo"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema(
            {
                "todoId": _string_param("Todo ID"),
                "time": {
                    "type": "integer",
                    "description": "Reminder time in milliseconds since epoch",
                },
            },
            ["todoId", "time"],
        )

    async def execute(self, parameters: dict[str, Any]) -> str:
        todo = await self.require_todo(parameters)
        millis = parameters.get("time")
        if isinstance(millis, bool) or not isinstance(millis, (int, float)):
            raise ToolExecutionError("Argument 'time' must be milliseconds since epoch")
        try:
            when = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise ToolExecutionError("Argument 'time' is out of range") from e
        await self.repository.update_reminder(todo.id, when)
        return f"Set reminder for todo '{todo.title}' at {when.isoformat()}"


@todo_tool("listTodos")
class ListTodosTool(TodoTool):
    def get_description(self) -> str:
        return "List all todos"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema(
            {
                "section": _string_param(
                    f"Section to filter by ({_SECTION_CHOICES}, or 'all' for all todos)"
                )
            },
            [],
        )

    async def execute(self, parameters: dict[str, Any]) -> str:
        raw = str(parameters.get("section") or "all")
        if raw.strip().lower() == "all":
            todos = await self.repository.list_todos()
        else:
            section = TodoSection.parse(raw)
            if section is None:
                return f"Invalid section. Available sections: {_SECTION_CHOICES}, or 'all'"
            todos = await self.repository.list_todos(section)

        if not todos:
            return "No todos found"

        lines = []
        for todo in todos:
            line = f"{_SECTION_ICONS[todo.section]} {todo.title} [{todo.id}]"
            if todo.description:
                line += f'\n   Description: "{todo.description}"'
            lines.append(line)
        return "Todos:\n" + "\n".join(lines)


@todo_tool("readOutLoud")
class ReadOutLoudTool(TodoTool):
    def get_description(self) -> str:
        return "Read text out loud"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema({"text": _string_param("Text to read")}, ["text"])

    async def execute(self, parameters: dict[str, Any]) -> str:
        # Speech output belongs to the client; the tool only echoes the text
        return f"Reading: {self.require_str(parameters, 'text')}"


@todo_tool("createCategory")
class CreateCategoryTool(TodoTool):
    def get_description(self) -> str:
        return "Create a new category"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema(
            {
                "name": _string_param("Category name (e.g., 'Work', 'Personal')"),
                "displayName": _string_param("Display name"),
                "color": _string_param("Hex color code"),
                "icon": _string_param("Optional icon emoji"),
            },
            ["name"],
        )

    async def execute(self, parameters: dict[str, Any]) -> str:
        name = self.require_str(parameters, "name")
        category = await self.repository.create_category(
            name=name,
            display_name=parameters.get("displayName") or name,
            color=parameters.get("color") or "#137fec",
            icon=parameters.get("icon"),
        )
        return f"Created category: {category.display_name}"


@todo_tool("listCategories")
class ListCategoriesTool(TodoTool):
    def get_description(self) -> str:
        return "List all categories"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema({}, [])

    async def execute(self, parameters: dict[str, Any]) -> str:
        categories = await self.repository.list_categories()
        if not categories:
            return "No categories found"
        lines = [
            f"{c.icon + ' ' if c.icon else ''}{c.display_name} [{c.id}]"
            for c in categories
        ]
        return "Categories:\n" + "\n".join(lines)


@todo_tool("deleteCategory")
class DeleteCategoryTool(TodoTool):
    def get_description(self) -> str:
        return "Delete a category (cannot delete default categories)"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema({"categoryId": _string_param("Category ID")}, ["categoryId"])

    async def execute(self, parameters: dict[str, Any]) -> str:
        await self.repository.delete_category(self.require_str(parameters, "categoryId"))
        return "Deleted category"


@todo_tool("createSection")
class CreateSectionTool(TodoTool):
    def get_description(self) -> str:
        return "Create new section"

    def get_parameters(self) -> dict[str, Any]:
        return _object_schema({"name": _string_param("Section name")}, ["name"])

    async def execute(self, parameters: dict[str, Any]) -> str:
        # Sections are fixed; answer with the ones that exist
        available = ", ".join(s.label for s in TodoSection)
        return (
            f"Available sections are: {available}. "
            "Please use one of these sections when adding or moving todos."
        )


__all__ = ["TODO_TOOLS", "TodoTool", "create_todo_tools", "todo_tool"]
