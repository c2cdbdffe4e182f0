"""Tests for the tool permission catalog."""

import pytest

from voicetodo.todo.catalog import TOOL_CATALOG, permission_overview, toggle_permission
from voicetodo.todo.repository import InMemoryTodoRepository
from voicetodo.todo.tools import create_todo_tools
from voicetodo.tool.permission.gate import PermissionGate
from voicetodo.tool.permission.store import InMemoryPermissionStore


class CountingStore(InMemoryPermissionStore):
    def __init__(self, initial=None) -> None:
        super().__init__(initial)
        self.loads = 0

    async def load(self) -> set[str]:
        self.loads += 1
        return await super().load()


def test_catalog_covers_every_tool():
    names = {t.get_name() for t in create_todo_tools(InMemoryTodoRepository())}
    assert {entry.tool_name for entry in TOOL_CATALOG} == names


@pytest.mark.asyncio
async def test_permission_overview():
    gate = PermissionGate(InMemoryPermissionStore({"listTodos"}))
    await gate.init()

    items = permission_overview(gate)

    by_name = {item.tool_name: item for item in items}
    assert by_name["listTodos"].is_allowed
    assert not by_name["addTodo"].is_allowed
    assert by_name["addTodo"].display_name == "Add Todo"
    assert [i.tool_name for i in items] == [e.tool_name for e in TOOL_CATALOG]


def test_permission_overview_requires_initialized_gate():
    with pytest.raises(RuntimeError):
        permission_overview(PermissionGate(InMemoryPermissionStore()))


@pytest.mark.asyncio
async def test_toggle_permission():
    store = CountingStore()
    gate = PermissionGate(store)
    await gate.init()

    assert await toggle_permission(gate, "addTodo") is True
    assert await store.load() == {"addTodo"}

    assert await toggle_permission(gate, "addTodo") is False
    assert await store.load() == set()


@pytest.mark.asyncio
async def test_catalog_does_not_reload_gate():
    store = CountingStore({"listTodos"})
    gate = PermissionGate(store)
    await gate.init()

    permission_overview(gate)
    permission_overview(gate)

    # Only the load from init(); overview reads the in-memory set
    assert store.loads == 1
