"""
Permission storage factory.

Builds the PermissionStore and PermissionGate described by the settings.
Stores connect lazily on first operation; the gate still needs `init()`.
"""

from voicetodo.config.settings import VoiceTodoSettings, settings
from voicetodo.tool.permission.gate import PermissionGate
from voicetodo.tool.permission.store import (
    InMemoryPermissionStore,
    MongoPermissionStore,
    PermissionStore,
    SQLitePermissionStore,
)
from voicetodo.utils.logging import get_logger

logger = get_logger(__name__)


def create_permission_store(config: VoiceTodoSettings | None = None) -> PermissionStore:
    config = config or settings
    storage_type = config.permission_store_type

    if storage_type == "memory":
        store: PermissionStore = InMemoryPermissionStore()
    elif storage_type == "sqlite":
        store = SQLitePermissionStore(db_path=config.sqlite_db_path)
    elif storage_type == "mongodb":
        if not config.mongo_uri:
            raise ValueError("mongo_uri is required for mongodb permission storage")
        store = MongoPermissionStore(uri=config.mongo_uri, db_name=config.mongo_db_name)
    else:
        raise ValueError(f"Unknown permission_store_type: {storage_type}")

    logger.debug("permission_store_created", storage_type=storage_type)
    return store


def create_permission_gate(config: VoiceTodoSettings | None = None) -> PermissionGate:
    return PermissionGate(create_permission_store(config))


__all__ = ["create_permission_store", "create_permission_gate"]
