"""
Pytest configuration and fixtures for Pinboard tests.

Provides an in-memory stand-in for the Supabase client with the same
call surface the repositories and services use (table query builder,
storage, RPC and auth), injected through ``DatabaseManager(client=...)``.
"""

from __future__ import annotations

import copy
import itertools
import time
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable, Optional

import pytest
from postgrest.exceptions import APIError

from pinboard.auth import SessionManager
from pinboard.config import AppConfig
from pinboard.database import DatabaseManager
from pinboard.logger import StructuredLogger
from pinboard.models.auth_models import AuthEvent, AuthSession
from pinboard.models.enums import AuthEventType
from pinboard.services import create_services

FAKE_URL = "https://fake.supabase.co"


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

class FakeQuery:
    """One chained PostgREST request against a ``FakeSupabase`` table."""

    def __init__(self, client: "FakeSupabase", table: str) -> None:
        self._client = client
        self._table = table
        self._action = "select"
        self._payload: Any = None
        self._on_conflict = "id"
        self._filters: list[Callable[[dict[str, Any]], bool]] = []
        self._order: Optional[tuple[str, bool]] = None
        self._single = False
        self._limit: Optional[int] = None

    # --- builders ---

    def select(self, *_columns: str, **_kwargs: Any) -> "FakeQuery":
        self._action = "select"
        return self

    def insert(self, payload: Any) -> "FakeQuery":
        self._action, self._payload = "insert", payload
        return self

    def upsert(self, payload: Any, on_conflict: str = "id", **_kwargs: Any) -> "FakeQuery":
        self._action, self._payload, self._on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def in_(self, column: str, values: Any) -> "FakeQuery":
        wanted = {str(v) for v in values}
        self._filters.append(lambda row: str(row.get(column)) in wanted)
        return self

    def order(self, column: str, desc: bool = False, **_kwargs: Any) -> "FakeQuery":
        self._order = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self._limit = count
        return self

    def single(self) -> "FakeQuery":
        self._single = True
        return self

    # --- execution ---

    def execute(self) -> SimpleNamespace:
        self._client.raise_if_failing(f"{self._table}.{self._action}")
        rows = self._client.tables.setdefault(self._table, [])
        handler = getattr(self, f"_run_{self._action}")
        return SimpleNamespace(data=handler(rows), count=None)

    def _matching(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [row for row in rows if all(f(row) for f in self._filters)]

    def _run_select(self, rows: list[dict[str, Any]]) -> Any:
        found = self._matching(rows)
        if self._order is not None:
            column, desc = self._order
            found = sorted(found, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            found = found[: self._limit]
        found = copy.deepcopy(found)
        if self._single:
            if len(found) != 1:
                raise APIError({
                    "code": "PGRST116",
                    "message": "JSON object requested, multiple (or no) rows returned",
                    "details": f"The result contains {len(found)} rows",
                    "hint": None,
                })
            return found[0]
        return found

    def _run_insert(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        payloads = self._payload if isinstance(self._payload, list) else [self._payload]
        created = [self._client.stamp(self._table, dict(p)) for p in payloads]
        rows.extend(created)
        return copy.deepcopy(created)

    def _run_upsert(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        payloads = self._payload if isinstance(self._payload, list) else [self._payload]
        result = []
        for payload in payloads:
            key = payload.get(self._on_conflict)
            existing = next(
                (r for r in rows if key is not None and r.get(self._on_conflict) == key),
                None,
            )
            if existing is not None:
                existing.update(payload)
                result.append(existing)
            else:
                row = self._client.stamp(self._table, dict(payload))
                rows.append(row)
                result.append(row)
        return copy.deepcopy(result)

    def _run_delete(self, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        # Row-level security silently filters the delete down to nothing.
        if self._table in self._client.rls_blocked_deletes:
            return []
        doomed = self._matching(rows)
        for row in doomed:
            rows.remove(row)
        return copy.deepcopy(doomed)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class FakeBucketApi:
    def __init__(self, storage: "FakeStorage", bucket: str) -> None:
        self._storage = storage
        self._bucket = bucket

    def upload(self, path: str, content: bytes, options: Optional[dict] = None) -> Any:
        self._storage.client.raise_if_failing("storage.upload")
        if self._bucket not in self._storage.buckets:
            raise Exception("Bucket not found")
        objects = self._storage.objects.setdefault(self._bucket, {})
        upsert = (options or {}).get("upsert") == "true"
        if path in objects and not upsert:
            raise Exception("The resource already exists")
        objects[path] = content
        self._storage.upload_options.append(dict(options or {}))
        return SimpleNamespace(path=path, full_path=f"{self._bucket}/{path}")

    def remove(self, paths: list[str]) -> list[dict[str, str]]:
        self._storage.client.raise_if_failing("storage.remove")
        objects = self._storage.objects.setdefault(self._bucket, {})
        removed = []
        for path in paths:
            if objects.pop(path, None) is not None:
                removed.append({"name": path})
        self._storage.removed.extend(paths)
        return removed

    def get_public_url(self, path: str, *_args: Any) -> str:
        delay = self._storage.url_delays.get(path, self._storage.url_delay)
        if delay:
            time.sleep(delay)
        if path in self._storage.broken_paths:
            raise Exception(f"cannot build URL for {path}")
        if self._storage.blank_public_urls:
            return ""
        return f"{FAKE_URL}/storage/v1/object/public/{self._bucket}/{path}"


class FakeStorage:
    def __init__(self, client: "FakeSupabase") -> None:
        self.client = client
        self.buckets: dict[str, SimpleNamespace] = {}
        self.objects: dict[str, dict[str, bytes]] = {}
        self.removed: list[str] = []
        self.upload_options: list[dict[str, str]] = []
        self.broken_paths: set[str] = set()
        self.blank_public_urls = False
        self.url_delay = 0.0
        self.url_delays: dict[str, float] = {}

    def from_(self, bucket: str) -> FakeBucketApi:
        return FakeBucketApi(self, bucket)

    def get_bucket(self, name: str) -> SimpleNamespace:
        self.client.raise_if_failing("storage.get_bucket")
        if name not in self.buckets:
            raise Exception("Bucket not found")
        return self.buckets[name]

    def create_bucket(self, name: str, options: Optional[dict] = None, **_kwargs: Any) -> Any:
        self.client.raise_if_failing("storage.create_bucket")
        self.buckets[name] = SimpleNamespace(
            id=name, name=name, public=bool((options or {}).get("public")),
        )
        return {"name": name}

    def update_bucket(self, name: str, options: dict) -> Any:
        self.client.raise_if_failing("storage.update_bucket")
        self.buckets[name].public = bool(options.get("public"))
        return {"message": "Successfully updated"}


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

class FakeSubscription:
    def __init__(self, auth: "FakeAuth", callback: Callable[..., None]) -> None:
        self._auth = auth
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        self.active = False
        if self.callback in self._auth.listeners:
            self._auth.listeners.remove(self.callback)


class FakeAuth:
    """Password accounts plus a single current session."""

    def __init__(self, client: "FakeSupabase") -> None:
        self.client = client
        self.accounts: dict[str, tuple[str, str]] = {}
        self.session: Optional[SimpleNamespace] = None
        self.require_confirmation = False
        self.server_user_id: Optional[str] = None
        self.sign_up_calls: list[dict[str, Any]] = []
        self.listeners: list[Callable[..., None]] = []
        self._ids = itertools.count(1)

    def add_account(self, email: str, password: str, user_id: Optional[str] = None) -> str:
        user_id = user_id or f"user-{next(self._ids)}"
        self.accounts[email] = (password, user_id)
        return user_id

    def make_session(self, user_id: str, email: Optional[str]) -> SimpleNamespace:
        return SimpleNamespace(
            user=SimpleNamespace(id=user_id, email=email),
            access_token=f"token-{user_id}",
            refresh_token=f"refresh-{user_id}",
            expires_at=None,
        )

    def _emit(self, event: str, session: Optional[SimpleNamespace]) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    def get_session(self) -> Optional[SimpleNamespace]:
        self.client.raise_if_failing("auth.get_session")
        return self.session

    def get_user(self) -> Optional[SimpleNamespace]:
        self.client.raise_if_failing("auth.get_user")
        if self.session is None:
            return None
        user = self.session.user
        if self.server_user_id is not None:
            user = SimpleNamespace(id=self.server_user_id, email=user.email)
        return SimpleNamespace(user=user)

    def sign_in_with_password(self, credentials: dict[str, str]) -> SimpleNamespace:
        self.client.raise_if_failing("auth.sign_in_with_password")
        account = self.accounts.get(credentials["email"])
        if account is None or account[0] != credentials["password"]:
            raise Exception("Invalid login credentials")
        self.session = self.make_session(account[1], credentials["email"])
        self._emit("SIGNED_IN", self.session)
        return SimpleNamespace(session=self.session, user=self.session.user)

    def sign_up(self, credentials: dict[str, Any]) -> SimpleNamespace:
        self.client.raise_if_failing("auth.sign_up")
        self.sign_up_calls.append(credentials)
        email = credentials["email"]
        if email in self.accounts:
            raise Exception("User already registered")
        user_id = self.add_account(email, credentials["password"])
        user = SimpleNamespace(id=user_id, email=email)
        if self.require_confirmation:
            return SimpleNamespace(session=None, user=user)
        self.session = self.make_session(user_id, email)
        self._emit("SIGNED_IN", self.session)
        return SimpleNamespace(session=self.session, user=user)

    def sign_out(self) -> None:
        self.client.raise_if_failing("auth.sign_out")
        self.session = None
        self._emit("SIGNED_OUT", None)

    def on_auth_state_change(self, callback: Callable[..., None]) -> FakeSubscription:
        self.listeners.append(callback)
        return FakeSubscription(self, callback)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class FakeSupabase:
    """In-memory client: ``table``, ``storage``, ``rpc`` and ``auth``.

    ``failures`` maps an operation name (``"images.insert"``,
    ``"storage.upload"``, ``"rpc.<name>"``, ``"auth.get_session"``) to
    the exception it should raise.
    ``delays`` maps the same names to seconds slept before the call runs.
    """

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.rls_blocked_deletes: set[str] = set()
        self.rpc_results: dict[str, Any] = {}
        self.rpc_calls: list[str] = []
        self.storage = FakeStorage(self)
        self.auth = FakeAuth(self)
        self._ids = itertools.count(1)
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def raise_if_failing(self, operation: str) -> None:
        delay = self.delays.get(operation)
        if delay:
            time.sleep(delay)
        exc = self.failures.get(operation)
        if exc is not None:
            raise exc

    def stamp(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Fill server defaults: ``id`` and a strictly increasing ``created_at``."""
        row.setdefault("id", f"{table[:-1]}-{next(self._ids)}")
        if "created_at" not in row:
            self._clock += timedelta(minutes=1)
            row["created_at"] = self._clock.isoformat()
        return row

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[dict] = None) -> SimpleNamespace:
        self.rpc_calls.append(name)
        self.raise_if_failing(f"rpc.{name}")
        data = self.rpc_results.get(name, {"success": True, "message": "ok"})
        return SimpleNamespace(execute=lambda: SimpleNamespace(data=data))

    # --- seeding helpers ---

    def add_row(self, table: str, **row: Any) -> dict[str, Any]:
        stored = self.stamp(table, dict(row))
        self.tables.setdefault(table, []).append(stored)
        return stored

    def sign_in_as(self, user_id: str, email: str = "owner@example.com") -> None:
        self.auth.accounts.setdefault(email, ("secret123", user_id))
        self.auth.session = self.auth.make_session(user_id, email)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Keep ``.env`` lookups and the default log file out of the repo."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def logger(tmp_path) -> StructuredLogger:
    return StructuredLogger(name="pinboard.tests", log_file=str(tmp_path / "test.log"))


@pytest.fixture
def config() -> AppConfig:
    return AppConfig(
        _env_file=None,
        SUPABASE_URL=FAKE_URL,
        SUPABASE_ANON_KEY="anon-key",
        STORAGE_BUCKET="images",
        FETCH_TIMEOUT_S=2.0,
        RESOLVE_TIMEOUT_S=2.0,
    )


@pytest.fixture
def fake() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def db(fake, logger) -> DatabaseManager:
    return DatabaseManager(FAKE_URL, "anon-key", logger, client=fake)


@pytest.fixture
def session(logger) -> SessionManager:
    return SessionManager(logger=logger)


@pytest.fixture
def services(db, config, session):
    return create_services(db=db, config=config, session=session, with_image_loader=False)


@pytest.fixture
def signed_in(fake, session) -> str:
    """Sign ``user-1`` in on both the fake provider and the session holder."""
    fake.sign_in_as("user-1", "owner@example.com")
    session.dispatch(
        AuthEvent(
            type=AuthEventType.SIGNED_IN,
            session=AuthSession(user_id="user-1", email="owner@example.com"),
        )
    )
    return "user-1"
