"""In-memory stand-in for the supabase-py client used by the endpoint tests.

Covers the subset of the PostgREST query builder the services call:
select/insert/upsert/update/delete, the comparison filters, or_ with nested
and(...), order/limit/offset, single/maybe_single and rpc.
"""
import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional


class APIError(Exception):
    pass


def _coerce(row_value: Any, value: Any) -> Any:
    """Cast a filter value (often a string from or_ syntax) to the column's type."""
    if isinstance(value, str):
        if isinstance(row_value, bool):
            return value.lower() == "true"
        if isinstance(row_value, (int, float)):
            return float(value)
    return value


def _as_datetime(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _compare(op: str, row_value: Any, value: Any) -> bool:
    if op == "is":
        if value in (None, "null"):
            return row_value is None
        return row_value is _coerce(row_value, value)
    if op == "in":
        return row_value in value
    if row_value is None:
        return op == "neq" and value is not None
    value = _coerce(row_value, value)
    if op in ("gt", "gte", "lt", "lte"):
        # timestamptz columns compare as instants, not as text
        row_moment, moment = _as_datetime(row_value), _as_datetime(value)
        if row_moment is not None and moment is not None:
            row_value, value = row_moment, moment
    if op == "eq":
        return row_value == value
    if op == "neq":
        return row_value != value
    if op == "gt":
        return row_value > value
    if op == "gte":
        return row_value >= value
    if op == "lt":
        return row_value < value
    if op == "lte":
        return row_value <= value
    raise ValueError(f"Unsupported operator {op}")


def _split_top_level(expression: str) -> List[str]:
    parts, depth, current = [], 0, ""
    for char in expression:
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if char == "," and depth == 0:
            parts.append(current)
            current = ""
        else:
            current += char
    if current:
        parts.append(current)
    return parts


def _parse_or(expression: str) -> Callable[[Dict[str, Any]], bool]:
    terms = []
    for part in _split_top_level(expression):
        part = part.strip()
        if part.startswith("and(") and part.endswith(")"):
            inner = [_parse_term(t) for t in _split_top_level(part[4:-1])]
            terms.append(lambda row, inner=inner: all(t(row) for t in inner))
        else:
            terms.append(_parse_term(part))
    return lambda row: any(t(row) for t in terms)


def _parse_term(term: str) -> Callable[[Dict[str, Any]], bool]:
    column, op, value = term.strip().split(".", 2)
    return lambda row: _compare(op, row.get(column), value)


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.columns = "*"
        self.payload: Any = None
        self.on_conflict = "id"
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.ordering: List[tuple] = []
        self.limit_count: Optional[int] = None
        self.offset_count = 0
        self.single_mode: Optional[str] = None
        self.count_mode: Optional[str] = None

    # actions
    def select(self, columns: str = "*", count: Optional[str] = None):
        self.columns = columns
        self.count_mode = count
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict: str = "id"):
        self.action, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    # filters
    def _filter(self, op: str, column: str, value: Any):
        self.filters.append(lambda row: _compare(op, row.get(column), value))
        return self

    def eq(self, column, value):
        return self._filter("eq", column, value)

    def neq(self, column, value):
        return self._filter("neq", column, value)

    def gt(self, column, value):
        return self._filter("gt", column, value)

    def gte(self, column, value):
        return self._filter("gte", column, value)

    def lt(self, column, value):
        return self._filter("lt", column, value)

    def lte(self, column, value):
        return self._filter("lte", column, value)

    def in_(self, column, values):
        return self._filter("in", column, list(values))

    def is_(self, column, value):
        return self._filter("is", column, value)

    def or_(self, expression: str):
        self.filters.append(_parse_or(expression))
        return self

    # modifiers
    def order(self, column: str, desc: bool = False):
        self.ordering.append((column, desc))
        return self

    def limit(self, count: int):
        self.limit_count = count
        return self

    def offset(self, count: int):
        self.offset_count = count
        return self

    def single(self):
        self.single_mode = "single"
        return self

    def maybe_single(self):
        self.single_mode = "maybe_single"
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: copy.deepcopy(row.get(name)) for name in names}

    def execute(self):
        if self.action != "select" and self.table_name in self.db.failing_writes:
            raise APIError(self.db.failing_writes.pop(self.table_name))
        rows = self.db.tables.setdefault(self.table_name, [])
        if self.action == "insert":
            data = [self.db._insert_row(self.table_name, item) for item in _as_list(self.payload)]
        elif self.action == "upsert":
            data = [self.db._upsert_row(self.table_name, item, self.on_conflict) for item in _as_list(self.payload)]
        elif self.action == "update":
            data = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self.payload))
                    data.append(copy.deepcopy(row))
        elif self.action == "delete":
            data = [copy.deepcopy(r) for r in rows if self._matches(r)]
            self.db.tables[self.table_name] = [r for r in rows if not self._matches(r)]
        else:
            selected = [r for r in rows if self._matches(r)]
            for column, desc in reversed(self.ordering):
                selected.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
            total = len(selected)
            selected = selected[self.offset_count:]
            if self.limit_count is not None:
                selected = selected[:self.limit_count]
            data = [self._project(r) for r in selected]
            if self.single_mode:
                if not data:
                    if self.single_mode == "single":
                        raise APIError("JSON object requested, multiple (or no) rows returned")
                    return None
                return SimpleNamespace(data=data[0], count=total)
            return SimpleNamespace(data=data, count=total if self.count_mode else None)
        return SimpleNamespace(data=data, count=None)


def _as_list(payload) -> List[Dict[str, Any]]:
    return payload if isinstance(payload, list) else [payload]


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.db, self.name, self.params = db, name, params

    def execute(self):
        self.db.rpc_calls.append((self.name, self.params))
        handler = self.db.rpc_handlers.get(self.name)
        return SimpleNamespace(data=handler(self.params) if handler else None)


class FakeAuth:
    """Mimics supabase.auth for sign up, sign in and token lookup."""

    def __init__(self):
        self.users: Dict[str, SimpleNamespace] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.resent: List[Dict[str, Any]] = []
        self.fail_resend: Optional[str] = None
        self.revoked: List[str] = []
        self.admin = SimpleNamespace(sign_out=lambda jwt, scope="global": self.revoked.append(jwt))

    def sign_up(self, credentials):
        email = credentials["email"]
        if email in self.passwords:
            raise APIError("User already registered")
        user = SimpleNamespace(
            id=str(uuid.uuid4()),
            email=email,
            user_metadata=credentials.get("options", {}).get("data", {}),
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        self.users[user.id] = user
        self.passwords[email] = credentials["password"]
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        email = credentials["email"]
        if self.passwords.get(email) != credentials["password"]:
            raise APIError("Invalid login credentials")
        user = next(u for u in self.users.values() if u.email == email)
        token = f"token-{user.id}"
        self.tokens[token] = user.id
        return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))

    def get_user(self, jwt=None):
        user_id = self.tokens.get(jwt)
        if not user_id:
            raise APIError("invalid JWT")
        return SimpleNamespace(user=self.users[user_id])

    def resend(self, credentials):
        if self.fail_resend:
            raise APIError(self.fail_resend)
        self.resent.append(credentials)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.rpc_calls: List[tuple] = []
        self.rpc_handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        # table -> error raised by the next write to it
        self.failing_writes: Dict[str, str] = {}
        self.auth = FakeAuth()
        self._clock = itertools.count()
        self._epoch = datetime.now(timezone.utc) - timedelta(hours=1)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    def _next_timestamp(self) -> str:
        # Strictly increasing so ordering by created_at is deterministic
        return (self._epoch + timedelta(milliseconds=next(self._clock))).isoformat()

    def _insert_row(self, table: str, item: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(item)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._next_timestamp())
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    def _upsert_row(self, table: str, item: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        keys = [k.strip() for k in on_conflict.split(",")]
        for row in self.tables.setdefault(table, []):
            if all(k in item and row.get(k) == item[k] for k in keys):
                row.update(copy.deepcopy(item))
                return copy.deepcopy(row)
        return self._insert_row(table, item)

    def seed(self, table: str, **values) -> Dict[str, Any]:
        """Insert a row directly, for arranging test state."""
        return self._insert_row(table, values)

    def rows(self, table: str, **match) -> List[Dict[str, Any]]:
        return [r for r in self.tables.get(table, []) if all(r.get(k) == v for k, v in match.items())]
