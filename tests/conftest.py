"""
In-memory stand-in for the Supabase client used by the API tests.

It covers the subset of the PostgREST query builder and GoTrue auth calls the
services make, including the unique constraints and ON DELETE CASCADE rules
of supabase/schema.sql that the services rely on.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from courtbook.database.supabase_client import get_supabase, get_service_supabase
from courtbook.main import app
from courtbook.modules.auth.service import clear_auth_cache

UNIQUE_KEYS = {
    "profiles": [("user_id",)],
    "user_roles": [("user_id", "role")],
    "invites": [("email",), ("invite_code",)],
    "bookings": [("session_id", "user_id")],
}

DEFAULTS = {
    "profiles": {
        "full_name": None, "avatar_url": None, "is_approved": False,
        "approved_at": None, "approved_by": None, "rejected_at": None, "rejected_by": None,
    },
    "user_roles": {"role": "member"},
    "invites": {"invited_by": None, "used": False},
    "sessions": {
        "description": None, "max_participants": 10, "created_by": None, "is_cancelled": False,
        "recurrence_type": "none", "recurrence_days": None, "recurrence_end_date": None,
        "parent_session_id": None, "is_recurring_instance": False,
    },
    "bookings": {"reminder_sent": False},
    "session_comments": {},
    "notifications": {
        "session_id": None, "actor_id": None, "actor_name": None,
        "session_title": None, "is_read": False,
    },
}

# (child table, child column) removed with the parent row
CASCADES = {
    "sessions": [
        ("sessions", "parent_session_id"),
        ("bookings", "session_id"),
        ("session_comments", "session_id"),
        ("notifications", "session_id"),
    ],
}
USER_CASCADES = [
    ("profiles", "user_id"),
    ("user_roles", "user_id"),
    ("bookings", "user_id"),
    ("session_comments", "user_id"),
    ("notifications", "user_id"),
]


def _sort_key(value):
    return (value is None, value if value is not None else "")


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.columns: Optional[List[str]] = None
        self.payload: Any = None
        self.filters: List = []
        self.orders: List = []
        self._limit: Optional[int] = None
        self._offset = 0

    # operations
    def select(self, columns: str = "*", **kwargs):
        self.operation = "select"
        if columns.strip() != "*":
            self.columns = [c.strip() for c in columns.split(",")]
        return self

    def insert(self, payload):
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload):
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # filters
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) > value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) <= value)
        return self

    def order(self, column, desc=False, **kwargs):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def offset(self, count):
        self._offset = count
        return self

    # execution
    def _matching(self) -> List[Dict[str, Any]]:
        return [r for r in self.db.tables[self.table] if all(f(r) for f in self.filters)]

    def execute(self):
        if self.table in self.db.failing_tables:
            raise Exception(f"simulated failure on {self.table}")
        if self.operation == "insert":
            for should_fail in self.db.insert_failures:
                if should_fail(self.table, self.payload):
                    raise Exception(f"simulated insert failure on {self.table}")
            return SimpleNamespace(data=self.db.insert_rows(self.table, self.payload))
        if self.operation == "update":
            rows = self._matching()
            for row in rows:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in rows])
        if self.operation == "delete":
            rows = self._matching()
            for row in rows:
                self.db.delete_row(self.table, row)
            return SimpleNamespace(data=[dict(r) for r in rows])

        rows = self._matching()
        for column, desc in reversed(self.orders):
            rows = sorted(rows, key=lambda r: _sort_key(r.get(column)), reverse=desc)
        rows = rows[self._offset:]
        if self._limit is not None:
            rows = rows[:self._limit]
        if self.columns:
            rows = [{c: r.get(c) for c in self.columns} for r in rows]
        else:
            rows = [dict(r) for r in rows]
        return SimpleNamespace(data=rows)


class FakeAdminAuth:
    def __init__(self, db: "FakeSupabase"):
        self.db = db

    def delete_user(self, user_id):
        if user_id not in self.db.users:
            raise Exception("User not found")
        del self.db.users[user_id]
        for table, column in USER_CASCADES:
            for row in [r for r in self.db.tables[table] if r.get(column) == user_id]:
                self.db.delete_row(table, row)

    def update_user_by_id(self, user_id, attributes):
        if user_id not in self.db.users:
            raise Exception("User not found")
        user = self.db.users[user_id]
        if "email" in attributes:
            user.email = attributes["email"]
        return SimpleNamespace(user=user)


class FakeAuth:
    def __init__(self, db: "FakeSupabase"):
        self.db = db
        self.admin = FakeAdminAuth(db)
        self.recovery_emails: List[str] = []

    def sign_up(self, credentials):
        email = credentials["email"]
        if any(u.email == email for u in self.db.users.values()):
            raise Exception("User already registered")
        user = self.db.add_auth_user(email, credentials["password"])
        user.user_metadata = credentials.get("options", {}).get("data", {})
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        for user in self.db.users.values():
            if user.email == credentials["email"] and self.db.passwords.get(user.id) == credentials["password"]:
                session = SimpleNamespace(access_token=f"token-{user.id}")
                return SimpleNamespace(user=user, session=session)
        raise Exception("Invalid login credentials")

    def get_user(self, jwt=None):
        if jwt and jwt.startswith("token-"):
            user = self.db.users.get(jwt[len("token-"):])
            if user is not None:
                return SimpleNamespace(user=user)
        raise Exception("invalid JWT: unable to parse or verify signature")

    def sign_out(self):
        return None

    def reset_password_for_email(self, email, options=None):
        self.recovery_emails.append(email)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {name: [] for name in DEFAULTS}
        self.users: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.failing_tables: set = set()
        # callables (table, payload) -> bool; a true result fails that insert
        self.insert_failures: List = []
        self.auth = FakeAuth(self)
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def _now(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def add_auth_user(self, email: str, password: str = "secret123") -> SimpleNamespace:
        user = SimpleNamespace(
            id=str(uuid.uuid4()), email=email, user_metadata={}, app_metadata={}
        )
        self.users[user.id] = user
        self.passwords[user.id] = password
        return user

    def _violates_unique(self, table: str, row: Dict[str, Any], pending: List[Dict[str, Any]]) -> bool:
        for key in UNIQUE_KEYS.get(table, []):
            value = tuple(row.get(c) for c in key)
            for other in self.tables[table] + pending:
                if tuple(other.get(c) for c in key) == value:
                    return True
        return False

    def insert_rows(self, table: str, payload) -> List[Dict[str, Any]]:
        rows = payload if isinstance(payload, list) else [payload]
        prepared: List[Dict[str, Any]] = []
        for data in rows:
            row = {"id": str(uuid.uuid4()), "created_at": self._now(), **DEFAULTS[table], **data}
            if table == "session_comments":
                row.setdefault("updated_at", row["created_at"])
            if self._violates_unique(table, row, prepared):
                raise APIError({
                    "message": f'duplicate key value violates unique constraint on "{table}"',
                    "code": "23505",
                    "hint": None,
                    "details": None,
                })
            prepared.append(row)
        self.tables[table].extend(prepared)
        return [dict(r) for r in prepared]

    def delete_row(self, table: str, row: Dict[str, Any]) -> None:
        if row in self.tables[table]:
            self.tables[table].remove(row)
        for child_table, column in CASCADES.get(table, []):
            for child in [r for r in self.tables[child_table] if r.get(column) == row["id"]]:
                self.delete_row(child_table, child)

    # test helpers
    def rows(self, table: str, **match) -> List[Dict[str, Any]]:
        return [r for r in self.tables[table] if all(r.get(k) == v for k, v in match.items())]

    def create_user(
        self,
        email: str,
        full_name: Optional[str] = None,
        roles=("member",),
        approved: bool = True,
    ) -> str:
        user = self.add_auth_user(email)
        self.insert_rows("profiles", {
            "user_id": user.id,
            "email": email,
            "full_name": full_name,
            "is_approved": approved,
        })
        for role in roles:
            self.insert_rows("user_roles", {"user_id": user.id, "role": role})
        return user.id


def auth_headers(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer token-{user_id}"}


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    clear_auth_cache()
    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_service_supabase] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()
    clear_auth_cache()


@pytest.fixture
def admin_id(fake_db) -> str:
    return fake_db.create_user("admin@example.com", "Ada Admin", roles=("admin", "member"))


@pytest.fixture
def alice_id(fake_db) -> str:
    return fake_db.create_user("alice@example.com", "Alice")


@pytest.fixture
def bob_id(fake_db) -> str:
    return fake_db.create_user("bob@example.com", "Bob")


@pytest.fixture
def session_payload():
    def build(**overrides):
        payload = {
            "title": "Friday padel",
            "sport_type": "padel",
            "location": "Court 3",
            "session_date": "2026-01-05",
            "start_time": "18:00:00",
            "end_time": "19:30:00",
            "max_participants": 4,
        }
        payload.update(overrides)
        return payload
    return build
