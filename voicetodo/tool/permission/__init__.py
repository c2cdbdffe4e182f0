"""
Permission system for tool execution.

Always-allow bookkeeping (PermissionGate over a PermissionStore) and the
interactive approval broker (ApprovalChannel).
"""

from voicetodo.tool.permission.approval import (
    ApprovalChannel,
    ApprovalDecision,
    ApprovalRequest,
    Subscription,
)
from voicetodo.tool.permission.factory import (
    create_permission_gate,
    create_permission_store,
)
from voicetodo.tool.permission.gate import PermissionGate
from voicetodo.tool.permission.store import (
    InMemoryPermissionStore,
    MongoPermissionStore,
    PermissionStore,
    SQLitePermissionStore,
)

__all__ = [
    "ApprovalChannel",
    "ApprovalDecision",
    "ApprovalRequest",
    "Subscription",
    "PermissionGate",
    "PermissionStore",
    "InMemoryPermissionStore",
    "SQLitePermissionStore",
    "MongoPermissionStore",
    "create_permission_store",
    "create_permission_gate",
]
