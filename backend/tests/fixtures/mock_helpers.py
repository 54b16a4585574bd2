"""Helper functions for creating mocked external services."""

import copy
import uuid
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import Mock


def create_mock_supabase(return_data: Optional[List[Dict[str, Any]]] = None):
    """
    Create a mocked Supabase client with chainable query builder.

    Args:
        return_data: Data to return from execute() call

    Returns:
        Mock Supabase client with chainable methods
    """
    mock = Mock()

    # Make all query builder methods return the mock itself (chainable)
    mock.table.return_value = mock
    mock.select.return_value = mock
    mock.eq.return_value = mock
    mock.gte.return_value = mock
    mock.in_.return_value = mock
    mock.order.return_value = mock
    mock.limit.return_value = mock
    mock.insert.return_value = mock
    mock.update.return_value = mock
    mock.delete.return_value = mock

    # execute() returns mock response with data
    mock_response = Mock()
    mock_response.data = return_data if return_data is not None else []
    mock.execute.return_value = mock_response

    return mock


class FakeResponse:
    def __init__(self, data: List[Dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Chainable query over one in-memory table, mirroring supabase-py calls."""

    def __init__(self, db: "InMemorySupabase", table: str):
        self.db = db
        self.table_name = table
        self.operation = "select"
        self.payload: Any = None
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_by: Optional[tuple] = None
        self.max_rows: Optional[int] = None

    def select(self, *columns: str) -> "FakeQuery":
        self.operation = "select"
        return self

    def insert(self, payload: Any, **kwargs: Any) -> "FakeQuery":
        self.operation = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]) -> "FakeQuery":
        self.operation = "update"
        self.payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self.operation = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def in_(self, column: str, values: List[Any]) -> "FakeQuery":
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.max_rows = count
        return self

    def execute(self) -> FakeResponse:
        failure = self.db.failures.get((self.table_name, self.operation))
        if failure is not None:
            raise failure

        self.db.calls.append((self.table_name, self.operation))
        rows = self.db.tables.setdefault(self.table_name, [])

        if self.operation == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = []
            for item in items:
                row = dict(item)
                row.setdefault("id", str(uuid.uuid4()))
                rows.append(row)
                inserted.append(copy.deepcopy(row))
            return FakeResponse(inserted)

        matched = [row for row in rows if all(f(row) for f in self.filters)]

        if self.operation == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse(copy.deepcopy(matched))

        if self.operation == "delete":
            for row in matched:
                rows.remove(row)
            return FakeResponse(copy.deepcopy(matched))

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return FakeResponse(copy.deepcopy(matched))


class InMemorySupabase:
    """
    Minimal stand-in for a Supabase client backed by dicts.

    tables maps table name to a list of rows. Use fail() to make a given
    table operation raise, e.g. fail("portal_notifications", "insert", ...).
    """

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = copy.deepcopy(tables or {})
        self.failures: Dict[tuple, Exception] = {}
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def fail(self, table: str, operation: str, error: Exception) -> None:
        self.failures[(table, operation)] = error

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables.get(table, [])
