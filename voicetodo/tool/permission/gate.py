"""
PermissionGate - Always-allow decisions for tool calls.

Owns the in-memory set of always-allowed tool names and keeps it in step
with a PermissionStore. One gate instance is created per application and
handed to everything that needs it.
"""

import asyncio

from voicetodo.tool.exceptions import PermissionConsistencyError
from voicetodo.tool.permission.store import PermissionStore
from voicetodo.utils.logging import get_logger

logger = get_logger(__name__)


class PermissionGate:
    """
    Decides whether a tool may run without interactive approval.

    Lookups are synchronous and never touch storage. Updates are
    serialized: each one persists the new set, re-reads the store and
    adopts what was actually persisted.
    """

    def __init__(self, store: PermissionStore) -> None:
        self.store = store
        self._allowed: frozenset[str] = frozenset()
        self._initialized = False
        self._lock = asyncio.Lock()

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init(self) -> None:
        """Load the always-allowed set from the store. Safe to call again."""
        async with self._lock:
            self._allowed = frozenset(await self.store.load())
            self._initialized = True
        logger.info("permission_gate_initialized", allowed_count=len(self._allowed))

    def is_always_allowed(self, tool_name: str) -> bool:
        self._ensure_initialized()
        return tool_name in self._allowed

    def allowed_tools(self) -> frozenset[str]:
        """Snapshot of the always-allowed tool names"""
        self._ensure_initialized()
        return self._allowed

    async def set_always_allowed(self, tool_name: str, allowed: bool) -> None:
        """
        Grant or revoke always-allow for a tool.

        Raises:
            PermissionStoreError: Store write/read failed; in-memory set unchanged
            PermissionConsistencyError: Store content differs from the write
        """
        self._ensure_initialized()
        async with self._lock:
            candidate = set(self._allowed)
            if allowed:
                candidate.add(tool_name)
            else:
                candidate.discard(tool_name)
            expected = frozenset(candidate)

            await self.store.save(expected)
            persisted = frozenset(await self.store.load())
            self._allowed = persisted

        if persisted != expected:
            logger.error(
                "permission_persistence_drift",
                tool_name=tool_name,
                allowed=allowed,
                expected=sorted(expected),
                persisted=sorted(persisted),
            )
            raise PermissionConsistencyError(tool_name, expected, persisted)

        logger.info("tool_always_allowed_updated", tool_name=tool_name, allowed=allowed)

    async def clear_all(self) -> None:
        """Revoke always-allow for every tool."""
        async with self._lock:
            await self.store.save(frozenset())
            self._allowed = frozenset()
            self._initialized = True
        logger.info("tool_permissions_cleared")

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("PermissionGate used before init()")


__all__ = ["PermissionGate"]
