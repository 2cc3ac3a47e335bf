# tests/fakesupabase.py
"""In-memory stand-in for the async Supabase query builder used by the repositories."""

from copy import deepcopy
from uuid import UUID

from postgrest.exceptions import APIError


def api_error(message, code=None):
    return APIError({"message": message, "code": code, "hint": None, "details": None})


class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = len(data) if count is None else count


class FakeQuery:
    def __init__(self, db, name):
        self._db = db
        self._name = name
        self._action = "select"
        self._payload = None
        self._on_conflict = None
        self._filters = []
        self._order = None
        self._range = None
        self._limit = None
        self._count = None
        self._error = None

    @property
    def _rows(self):
        return self._db.tables.setdefault(self._name, [])

    def select(self, *args, count=None, **kwargs):
        self._count = count
        return self

    def insert(self, row):
        self._action, self._payload = "insert", row
        return self

    def update(self, changes):
        self._action, self._payload = "update", changes
        return self

    def upsert(self, row, on_conflict=None):
        self._action, self._payload, self._on_conflict = "upsert", row, on_conflict
        return self

    def eq(self, field, value):
        self._check_uuid(field, value)
        self._filters.append(lambda r: r.get(field) == value)
        return self

    def neq(self, field, value):
        self._filters.append(lambda r: r.get(field) != value)
        return self

    def in_(self, field, values):
        values_set = set(values or [])
        self._filters.append(lambda r: r.get(field) in values_set)
        return self

    def order(self, field, desc=False):
        self._order = (field, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _check_uuid(self, field, value):
        if field not in self._db.uuid_columns.get(self._name, []):
            return
        try:
            UUID(str(value))
        except ValueError:
            self._error = api_error(f'invalid input syntax for type uuid: "{value}"', code="22P02")

    def _matches(self, row):
        return all(f(row) for f in self._filters)

    def _check_unique(self, row, ignore=None):
        for field in self._db.unique.get(self._name, []):
            for existing in self._rows:
                if existing is ignore:
                    continue
                if existing.get(field) == row.get(field):
                    raise api_error(
                        f'duplicate key value violates unique constraint "{self._name}_{field}_key"',
                        code="23505",
                    )

    async def execute(self):
        self._db.calls.append((self._action, self._name))
        failure = self._db.failures.get((self._action, self._name))
        if self._error is not None:
            failure = self._error
        if failure is not None:
            raise failure

        if self._action == "insert":
            rows = self._payload if isinstance(self._payload, list) else [self._payload]
            stored = []
            for row in rows:
                self._check_unique(row)
                self._rows.append(deepcopy(row))
                stored.append(deepcopy(row))
            return FakeResult(stored)

        if self._action == "update":
            updated = []
            for row in self._rows:
                if self._matches(row):
                    row.update(deepcopy(self._payload))
                    updated.append(deepcopy(row))
            return FakeResult(updated)

        if self._action == "upsert":
            key = self._on_conflict or "id"
            for row in self._rows:
                if row.get(key) == self._payload.get(key):
                    row.update(deepcopy(self._payload))
                    return FakeResult([deepcopy(row)])
            self._rows.append(deepcopy(self._payload))
            return FakeResult([deepcopy(self._payload)])

        result = [row for row in self._rows if self._matches(row)]
        total = len(result)
        if self._order is not None:
            field, desc = self._order
            result.sort(key=lambda r: (r.get(field) is None, r.get(field) or ""), reverse=desc)
        if self._range is not None:
            start, end = self._range
            result = result[start:end + 1]
        if self._limit is not None:
            result = result[: self._limit]
        result = deepcopy(result)
        return FakeResult(result, count=total if self._count else None)


class FakeSupabase:
    def __init__(self, tables=None, unique=None, uuid_columns=None):
        self.tables = {name: list(rows) for name, rows in (tables or {}).items()}
        self.unique = unique or {
            "code_reviews": ["submission_id"],
            "mentor_progress": ["user_id"],
        }
        self.uuid_columns = uuid_columns or {}
        self.failures = {}
        self.calls = []

    def table(self, name: str):
        return FakeQuery(self, name)

    def fail(self, action, table, exc):
        self.failures[(action, table)] = exc

    def rows(self, name):
        return self.tables.get(name, [])
