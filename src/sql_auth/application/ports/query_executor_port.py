"""Port for dispatching lookups against the external credential store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol


class MissingColumnError(LookupError):
    """Raised when a lookup row does not carry the requested column."""

    def __init__(self, *, column: str) -> None:
        super().__init__(f"column not present in lookup result: {column}")
        self.column = column


@dataclass(frozen=True)
class LookupQuery:
    """Query template plus the values bound to its named parameters."""

    template: str
    params: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LookupResult:
    """Rows returned by one external lookup."""

    query: LookupQuery
    rows: tuple[Mapping[str, Any], ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def value(self, row_index: int, column: str) -> Any:
        """Return one column value from one row."""

        row = self.rows[row_index]
        if column not in row:
            raise MissingColumnError(column=column)
        return row[column]


@dataclass(frozen=True)
class QueryError:
    """Failure reported by the executor instead of a result."""

    query: LookupQuery
    message: str


class QueryResultSink(Protocol):
    """Completion target for one dispatched lookup."""

    async def on_result(self, result: LookupResult) -> object:
        """Consume a completed lookup."""

    async def on_error(self, error: QueryError) -> object:
        """Consume a failed lookup."""


class QueryExecutorPort(Protocol):
    """Non-blocking lookup dispatch contract."""

    def run(self, sink: QueryResultSink, query: LookupQuery) -> None:
        """Schedule `query` and later call exactly one of the sink methods."""
