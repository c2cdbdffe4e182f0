from voicetodo.todo.catalog import (
    TOOL_CATALOG,
    ToolPermissionItem,
    permission_overview,
    toggle_permission,
)
from voicetodo.todo.models import Category, Todo, TodoSection
from voicetodo.todo.repository import InMemoryTodoRepository, TodoRepository
from voicetodo.todo.tools import TODO_TOOLS, TodoTool, create_todo_tools

__all__ = [
    "Category",
    "InMemoryTodoRepository",
    "TODO_TOOLS",
    "TOOL_CATALOG",
    "Todo",
    "TodoRepository",
    "TodoSection",
    "TodoTool",
    "ToolPermissionItem",
    "create_todo_tools",
    "permission_overview",
    "toggle_permission",
]
