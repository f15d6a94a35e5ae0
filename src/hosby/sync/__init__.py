"""Schema synchronization with the Hosby backend."""

from hosby.sync.client import BackendClient, PullResponse
from hosby.sync.engine import (
    ConflictAction,
    ConflictContext,
    PullOutcome,
    PullResult,
    PushOutcome,
    PushResult,
    SyncEngine,
    SyncState,
    merge_schemas,
    render_diff,
)
from hosby.sync.hashing import schema_hash
from hosby.sync.state import SyncStateStore

__all__ = [
    "BackendClient",
    "ConflictAction",
    "ConflictContext",
    "PullOutcome",
    "PullResponse",
    "PullResult",
    "PushOutcome",
    "PushResult",
    "SyncEngine",
    "SyncState",
    "SyncStateStore",
    "merge_schemas",
    "render_diff",
    "schema_hash",
]
