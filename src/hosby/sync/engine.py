"""Push/pull state machine for the local schema.

    IDLE -> HASHING -> UNCHANGED                                  -> DONE
                    -> SENDING                                    -> DONE
                    -> FETCHING -> (CONFLICT -> RESOLVING)        -> DONE

The engine never talks to the user. Conflicts are handed to a resolver
callback that returns a ``ConflictAction``; the CLI supplies an interactive
one, tests supply a lambda. Sync markers are written only after the network
call and any schema write have succeeded.
"""

from __future__ import annotations

import copy
import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from hosby.auth.session import AuthCredentials, require_login
from hosby.auth.store import CredentialStore
from hosby.config import DEFAULT_API_URL
from hosby.exceptions import ConflictUnresolved, ValidationError
from hosby.logging_config import LogConfig, null_config
from hosby.schema.models import EPOCH, ProjectIdentity, SchemaDocument, SyncRecord, truncate_ms
from hosby.schema.store import SchemaStore
from hosby.sync.client import BackendClient
from hosby.sync.hashing import schema_hash
from hosby.sync.state import SyncStateStore

DIFF_EXCERPT_CHARS = 500


class SyncState(Enum):
    IDLE = "idle"
    HASHING = "hashing"
    UNCHANGED = "unchanged"
    SENDING = "sending"
    FETCHING = "fetching"
    CONFLICT = "conflict"
    RESOLVING = "resolving"
    DONE = "done"


class PushOutcome(Enum):
    UNCHANGED = "unchanged"
    PUSHED = "pushed"


class PullOutcome(Enum):
    NO_UPDATES = "no_updates"
    UP_TO_DATE = "up_to_date"
    UPDATED = "updated"
    KEPT_LOCAL = "kept_local"
    MERGED = "merged"
    REPLACED = "replaced"


class ConflictAction(Enum):
    SERVER = "server"
    LOCAL = "local"
    MERGE = "merge"
    DIFF = "diff"


@dataclass
class ConflictContext:
    """What the resolver sees. ``diff`` is set only on the second call."""

    local: SchemaDocument
    remote: SchemaDocument
    diff: str | None = None


ConflictResolver = Callable[[ConflictContext], ConflictAction]


@dataclass
class PushResult:
    outcome: PushOutcome
    hash: str
    states: list[SyncState] = field(default_factory=list)


@dataclass
class PullResult:
    outcome: PullOutcome
    hash: str
    states: list[SyncState] = field(default_factory=list)
    message: str | None = None


# ------------------------------------------------------------------
# Pure helpers
# ------------------------------------------------------------------


def merge_schemas(local: SchemaDocument, remote: SchemaDocument) -> SchemaDocument:
    """Shallow merge, remote wins.

    Top-level keys from *remote* replace those in *local*; ``tables`` is merged
    one level down, so a table present on both sides is taken whole from
    *remote*. Columns are never merged.
    """
    local_tables = local.get("tables") if isinstance(local.get("tables"), dict) else {}
    remote_tables = remote.get("tables") if isinstance(remote.get("tables"), dict) else {}
    merged = {**copy.deepcopy(local), **copy.deepcopy(remote)}
    merged["tables"] = {**copy.deepcopy(local_tables), **copy.deepcopy(remote_tables)}
    return merged


def render_diff(
    local: SchemaDocument, remote: SchemaDocument, limit: int = DIFF_EXCERPT_CHARS
) -> str:
    """Side-by-side excerpts of both documents, each cut to *limit* characters."""
    server = json.dumps(remote, indent=2, ensure_ascii=False)[:limit]
    mine = json.dumps(local, indent=2, ensure_ascii=False)[:limit]
    return (
        "=== Server Schema (excerpt) ===\n"
        f"{server}...\n"
        "\n"
        "=== Local Schema (excerpt) ===\n"
        f"{mine}..."
    )


def _as_action(value: object) -> ConflictAction | None:
    if isinstance(value, ConflictAction):
        return value
    try:
        return ConflictAction(value)
    except ValueError:
        return None


def _now() -> datetime:
    return truncate_ms(datetime.now(timezone.utc))


# ------------------------------------------------------------------
# Engine
# ------------------------------------------------------------------


class SyncEngine:
    """Push and pull the schema of one project directory.

    Args:
        store: Local schema file.
        state: Last-push / last-pull markers.
        credentials: Credential store holding the backend session.
        api_url: Backend API root.
        timeout: Per-request timeout in seconds.
        client_factory: Builds the backend client once credentials are known.
        on_state: Called with every state the engine enters.
        log_config: Logging configuration for this component.
    """

    def __init__(
        self,
        store: SchemaStore,
        state: SyncStateStore,
        credentials: CredentialStore,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        client_factory: Callable[..., BackendClient] = BackendClient,
        on_state: Callable[[SyncState], None] | None = None,
        log_config: LogConfig | None = None,
    ) -> None:
        self.store = store
        self.state = state
        self.credentials = credentials
        self.api_url = api_url
        self.timeout = timeout
        self._client_factory = client_factory
        self._on_state = on_state
        self._log_config = log_config
        self._log = (log_config or null_config()).logger("sync")

    def _enter(self, states: list[SyncState], new_state: SyncState) -> None:
        states.append(new_state)
        self._log.debug("sync state -> %s", new_state.value)
        if self._on_state is not None:
            self._on_state(new_state)

    def _client(self, auth: AuthCredentials) -> BackendClient:
        return self._client_factory(
            base_url=self.api_url,
            credentials=auth,
            timeout=self.timeout,
            log_config=self._log_config,
        )

    def _identity(self, doc: SchemaDocument) -> ProjectIdentity:
        identity = ProjectIdentity.from_metadata(doc)
        if identity is None:
            raise ValidationError(
                "No project is linked to this schema. "
                "Run `hosby config project --id <id> --name <name>`."
            )
        return identity

    # ------------------------------------------------------------------
    # Push
    # ------------------------------------------------------------------

    def push(self, force: bool = False) -> PushResult:
        states = [SyncState.IDLE]
        doc = self.store.load()

        self._enter(states, SyncState.HASHING)
        current = schema_hash(doc)
        if not force:
            last = self.state.read_push()
            if last is not None and last.hash == current:
                self._log.info("Schema unchanged since last push (%s)", last.time.isoformat())
                self._enter(states, SyncState.UNCHANGED)
                self._enter(states, SyncState.DONE)
                return PushResult(PushOutcome.UNCHANGED, current, states)

        auth = require_login(self.credentials)
        identity = self._identity(doc)

        self._enter(states, SyncState.SENDING)
        self._client(auth).push(identity.id, doc, current)
        self.state.write_push(SyncRecord(time=_now(), hash=current, id=identity.id))
        self._log.info("Pushed schema %s to project %s", current, identity.id)

        self._enter(states, SyncState.DONE)
        return PushResult(PushOutcome.PUSHED, current, states)

    # ------------------------------------------------------------------
    # Pull
    # ------------------------------------------------------------------

    def pull(self, resolver: ConflictResolver | None = None) -> PullResult:
        states = [SyncState.IDLE]
        local = self.store.load()

        self._enter(states, SyncState.HASHING)
        local_hash = schema_hash(local)
        last = self.state.read_pull()
        last_time = last.time if last is not None else EPOCH

        auth = require_login(self.credentials)
        identity = self._identity(local)

        self._enter(states, SyncState.FETCHING)
        response = self._client(auth).pull(identity.id, local_hash, last_time)
        if response.schema is None:
            self._log.info("No schema updates available from server")
            self._enter(states, SyncState.DONE)
            return PullResult(PullOutcome.NO_UPDATES, local_hash, states, response.message)

        remote = response.schema
        remote_hash = schema_hash(remote)
        has_changes = response.updated or remote_hash != local_hash
        has_local_mods = self.store.mtime() > last_time
        self._log.debug(
            "remote=%s local=%s updated=%s local_mods=%s",
            remote_hash, local_hash, response.updated, has_local_mods,
        )

        if has_changes and has_local_mods:
            self._enter(states, SyncState.CONFLICT)
            self._log.warning("Conflict detected: both local and server schemas have changed")
            action = self._resolve(resolver, local, remote)
            self._enter(states, SyncState.RESOLVING)
            outcome, resolved_hash = self._apply(action, local, local_hash, remote)
        elif has_changes:
            written = self.store.save(remote)
            outcome, resolved_hash = PullOutcome.UPDATED, schema_hash(written)
            self._log.info("Schema updated from server")
        else:
            outcome, resolved_hash = PullOutcome.UP_TO_DATE, local_hash
            self._log.info("Schema is already up to date")

        self.state.write_pull(SyncRecord(time=_now(), hash=resolved_hash))
        self._enter(states, SyncState.DONE)
        return PullResult(outcome, resolved_hash, states, response.message)

    def _resolve(
        self,
        resolver: ConflictResolver | None,
        local: SchemaDocument,
        remote: SchemaDocument,
    ) -> ConflictAction:
        if resolver is None:
            raise ConflictUnresolved("Local and server schemas have both changed; a choice is required.")

        action = _as_action(resolver(ConflictContext(local=local, remote=remote)))
        if action is ConflictAction.DIFF:
            diff = render_diff(local, remote)
            action = _as_action(resolver(ConflictContext(local=local, remote=remote, diff=diff)))
        if action is None or action is ConflictAction.DIFF:
            raise ConflictUnresolved("No conflict resolution was chosen; nothing was written.")
        return action

    def _apply(
        self,
        action: ConflictAction,
        local: SchemaDocument,
        local_hash: str,
        remote: SchemaDocument,
    ) -> tuple[PullOutcome, str]:
        if action is ConflictAction.LOCAL:
            self._log.info("Keeping local schema")
            return PullOutcome.KEPT_LOCAL, local_hash
        if action is ConflictAction.MERGE:
            written = self.store.save(merge_schemas(local, remote))
            self._log.info("Schemas merged")
            return PullOutcome.MERGED, schema_hash(written)
        written = self.store.save(remote)
        self._log.info("Local schema replaced with server version")
        return PullOutcome.REPLACED, schema_hash(written)
