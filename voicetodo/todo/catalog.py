"""
Permission catalog for the todo tools.

Backs a settings view that lists every tool together with its
always-allowed flag and lets the user toggle it.
"""

from dataclasses import dataclass

from voicetodo.tool.permission.gate import PermissionGate


@dataclass(frozen=True)
class ToolCatalogEntry:
    tool_name: str
    display_name: str
    description: str


@dataclass(frozen=True)
class ToolPermissionItem:
    tool_name: str
    display_name: str
    description: str
    is_allowed: bool


TOOL_CATALOG: tuple[ToolCatalogEntry, ...] = (
    ToolCatalogEntry("addTodo", "Add Todo", "Create new todo items"),
    ToolCatalogEntry("editTitle", "Edit Title", "Change todo titles"),
    ToolCatalogEntry("editDescription", "Edit Description", "Update todo descriptions"),
    ToolCatalogEntry("removeTodo", "Remove Todo", "Delete todo items"),
    ToolCatalogEntry("markComplete", "Mark Complete", "Mark todos as done"),
    ToolCatalogEntry("markInProgress", "Mark In Progress", "Mark todos as in progress"),
    ToolCatalogEntry("markDoLater", "Mark Do Later", "Mark todos to do later"),
    ToolCatalogEntry("setReminder", "Set Reminder", "Schedule reminders for todos"),
    ToolCatalogEntry("listTodos", "List Todos", "View all todos"),
    ToolCatalogEntry("readOutLoud", "Read Out Loud", "Text-to-speech for todos"),
    ToolCatalogEntry("createCategory", "Create Category", "Create new categories"),
    ToolCatalogEntry("listCategories", "List Categories", "View all categories"),
    ToolCatalogEntry("deleteCategory", "Delete Category", "Delete user-created categories"),
    ToolCatalogEntry("createSection", "Create Section", "List the sections todos can use"),
)


def permission_overview(gate: PermissionGate) -> list[ToolPermissionItem]:
    """
    List every catalog tool with its current always-allowed flag.

    The gate must already be initialized.
    """
    return [
        ToolPermissionItem(
            tool_name=entry.tool_name,
            display_name=entry.display_name,
            description=entry.description,
            is_allowed=gate.is_always_allowed(entry.tool_name),
        )
        for entry in TOOL_CATALOG
    ]


async def toggle_permission(gate: PermissionGate, tool_name: str) -> bool:
    """Flip the always-allowed flag of a tool. Returns the new value."""
    allowed = not gate.is_always_allowed(tool_name)
    await gate.set_always_allowed(tool_name, allowed)
    return allowed


__all__ = [
    "TOOL_CATALOG",
    "ToolCatalogEntry",
    "ToolPermissionItem",
    "permission_overview",
    "toggle_permission",
]
