"""Protocols for the hosted table backend.

The backend is an opaque CRUD collaborator: queries are keyed by table name
and filter predicates and resolve to a QueryResult carrying rows or an error.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence, Union

from pyqt_bizforms.exceptions import BackendError

# Error code for ".single()" on zero rows, matching the hosted backend
NO_ROWS_CODE = "PGRST116"


@dataclass(frozen=True)
class QueryError:
    """Error reported by the backend for one query."""
    message: str
    code: Optional[str] = None


@dataclass
class QueryResult:
    """Outcome of an executed query: ``data`` on success, ``error`` otherwise."""
    data: Any = None
    error: Optional[QueryError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> Any:
        """Return data, or raise BackendError if the query failed."""
        if self.error is not None:
            raise BackendError(self.error.message, self.error.code)
        return self.data


class TableQuery(Protocol):
    """Chainable query builder for one table."""

    def select(self, columns: str = "*") -> "TableQuery":
        ...

    def insert(self, rows: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> "TableQuery":
        ...

    def update(self, patch: Mapping[str, Any]) -> "TableQuery":
        ...

    def upsert(self, row: Mapping[str, Any], on_conflict: str = "id") -> "TableQuery":
        ...

    def delete(self) -> "TableQuery":
        ...

    def eq(self, column: str, value: Any) -> "TableQuery":
        ...

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery":
        ...

    def order(self, column: str, ascending: bool = True) -> "TableQuery":
        ...

    def limit(self, count: int) -> "TableQuery":
        ...

    def single(self) -> "TableQuery":
        ...

    def execute(self) -> QueryResult:
        ...


class TableClient(Protocol):
    """Entry point of the backend: one query builder per table."""

    def table(self, name: str) -> TableQuery:
        ...
