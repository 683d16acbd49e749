"""In-memory implementation of the table client protocol.

Used by tests and the demo application. Rows are plain dicts; inserts get a
uuid ``id`` and ``created_at``/``updated_at`` ISO timestamps unless supplied.
Failures can be injected per table and operation to exercise error paths.
"""

import copy
import datetime
import itertools
import logging
import threading
import uuid
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pyqt_bizforms.protocols.table_client import NO_ROWS_CODE, QueryError, QueryResult

logger = logging.getLogger(__name__)

_SELECT, _INSERT, _UPDATE, _UPSERT, _DELETE = "select", "insert", "update", "upsert", "delete"


class InMemoryTableClient:
    """Thread-safe dict-of-lists backend.

    Example:
        client = InMemoryTableClient({"customers": [{"id": "c1", "user_id": "u1"}]})
        result = client.table("customers").select("*").eq("user_id", "u1").execute()
        assert result.data[0]["id"] == "c1"
    """

    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
    ):
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._clock = clock or datetime.datetime.now
        # Monotonic tiebreaker so rows inserted in the same instant keep insertion order
        self._sequence = itertools.count()
        self.tables: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(row, _seq=next(self._sequence)) for row in rows]
            for name, rows in (tables or {}).items()
        }
        self._failures: Dict[Tuple[str, Optional[str]], QueryError] = {}
        self._lock = threading.RLock()
        self.executed: List[Tuple[str, str]] = []

    def table(self, name: str) -> "InMemoryQuery":
        return InMemoryQuery(self, name)

    def fail(self, table: str, message: str, operation: Optional[str] = None, code: Optional[str] = None) -> None:
        """Make every query on ``table`` (optionally only ``operation``) fail."""
        self._failures[(table, operation)] = QueryError(message, code)

    def clear_failures(self) -> None:
        self._failures.clear()

    def rows(self, table: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [_strip(row) for row in copy.deepcopy(self.tables.get(table, []))]

    def _failure_for(self, table: str, operation: str) -> Optional[QueryError]:
        return self._failures.get((table, operation)) or self._failures.get((table, None))

    def _stamp(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        now = self._clock().isoformat()
        stamped = dict(row)
        stamped.setdefault("id", self._id_factory())
        stamped.setdefault("created_at", now)
        stamped.setdefault("updated_at", now)
        stamped["_seq"] = next(self._sequence)
        return stamped


def _strip(row: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in row.items() if k != "_seq"}


class InMemoryQuery:
    """Query builder; nothing touches the tables until execute()."""

    def __init__(self, client: InMemoryTableClient, table: str):
        self._client = client
        self._table = table
        self._operation = _SELECT
        self._columns = "*"
        self._payload: Any = None
        self._on_conflict = "id"
        self._filters: List[Callable[[Dict[str, Any]], bool]] = []
        self._ordering: List[Tuple[str, bool]] = []
        self._limit: Optional[int] = None
        self._single = False

    # Operations ---------------------------------------------------------

    def select(self, columns: str = "*") -> "InMemoryQuery":
        # After insert/update, select() only chooses returned columns
        self._columns = columns
        return self

    def insert(self, rows: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> "InMemoryQuery":
        self._operation = _INSERT
        self._payload = [rows] if isinstance(rows, Mapping) else list(rows)
        return self

    def update(self, patch: Mapping[str, Any]) -> "InMemoryQuery":
        self._operation = _UPDATE
        self._payload = dict(patch)
        return self

    def upsert(self, row: Mapping[str, Any], on_conflict: str = "id") -> "InMemoryQuery":
        self._operation = _UPSERT
        self._payload = dict(row)
        self._on_conflict = on_conflict
        return self

    def delete(self) -> "InMemoryQuery":
        self._operation = _DELETE
        return self

    # Filters and modifiers ----------------------------------------------

    def eq(self, column: str, value: Any) -> "InMemoryQuery":
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "InMemoryQuery":
        allowed = list(values)
        self._filters.append(lambda row: row.get(column) in allowed)
        return self

    def order(self, column: str, ascending: bool = True) -> "InMemoryQuery":
        self._ordering.append((column, ascending))
        return self

    def limit(self, count: int) -> "InMemoryQuery":
        self._limit = count
        return self

    def single(self) -> "InMemoryQuery":
        self._single = True
        return self

    # Execution ----------------------------------------------------------

    def execute(self) -> QueryResult:
        client = self._client
        with client._lock:
            client.executed.append((self._table, self._operation))
            failure = client._failure_for(self._table, self._operation)
            if failure is not None:
                logger.debug(f"Injected failure for {self._operation} on {self._table}: {failure.message}")
                return QueryResult(error=failure)

            table = client.tables.setdefault(self._table, [])
            handler = getattr(self, f"_execute_{self._operation}")
            rows = handler(table)
            rows = [self._project(_strip(row)) for row in rows]

        if self._single:
            if len(rows) != 1:
                return QueryResult(error=QueryError(
                    "JSON object requested, multiple (or no) rows returned", NO_ROWS_CODE))
            return QueryResult(data=rows[0])
        return QueryResult(data=rows)

    def _matches(self, row: Dict[str, Any]) -> bool:
        return all(predicate(row) for predicate in self._filters)

    def _execute_select(self, table: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        rows = [copy.deepcopy(row) for row in table if self._matches(row)]
        # Stable sorts applied last-to-first give first ordering precedence
        for column, ascending in reversed(self._ordering or [("_seq", True)]):
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column), row["_seq"]),
                      reverse=not ascending)
        if self._limit is not None:
            rows = rows[:self._limit]
        return rows

    def _execute_insert(self, table: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        inserted = [self._client._stamp(row) for row in self._payload]
        table.extend(inserted)
        return copy.deepcopy(inserted)

    def _execute_update(self, table: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        updated = []
        now = self._client._clock().isoformat()
        for row in table:
            if self._matches(row):
                row.update(self._payload)
                row["updated_at"] = now
                updated.append(copy.deepcopy(row))
        return updated

    def _execute_upsert(self, table: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        key = self._payload.get(self._on_conflict)
        for row in table:
            if key is not None and row.get(self._on_conflict) == key:
                row.update(self._payload)
                row["updated_at"] = self._client._clock().isoformat()
                return [copy.deepcopy(row)]
        row = self._client._stamp(self._payload)
        table.append(row)
        return [copy.deepcopy(row)]

    def _execute_delete(self, table: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        deleted = [row for row in table if self._matches(row)]
        table[:] = [row for row in table if not self._matches(row)]
        return deleted

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self._columns.strip() == "*":
            return row
        columns = [c.strip() for c in self._columns.split(",") if c.strip()]
        return {c: row.get(c) for c in columns}
