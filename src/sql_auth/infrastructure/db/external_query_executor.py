"""SQLAlchemy executor for lookups against the external credential store."""

from __future__ import annotations

import asyncio
import logging
from functools import partial

import sqlalchemy as sa
from sqlalchemy.ext.asyncio import AsyncEngine

from sql_auth.application.ports.query_executor_port import (
    LookupQuery,
    LookupResult,
    QueryError,
    QueryExecutorPort,
    QueryResultSink,
)

logger = logging.getLogger(__name__)


class SqlAlchemyQueryExecutor(QueryExecutorPort):
    """Run bound text queries as background tasks on the current event loop."""

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._in_flight: set[asyncio.Task[None]] = set()

    def run(self, sink: QueryResultSink, query: LookupQuery) -> None:
        """Schedule `query`; the sink is called once it completes."""

        task = asyncio.get_running_loop().create_task(self._execute(sink, query))
        self._in_flight.add(task)
        task.add_done_callback(partial(self._collect, query))

    async def drain(self) -> None:
        """Wait for every dispatched lookup and its sink callback to finish."""

        while self._in_flight:
            await asyncio.gather(*tuple(self._in_flight), return_exceptions=True)

    def _collect(self, query: LookupQuery, task: asyncio.Task[None]) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                "sql_auth_sink_failed query=%r error=%s",
                query.template,
                error,
                exc_info=error,
            )

    async def _execute(self, sink: QueryResultSink, query: LookupQuery) -> None:
        try:
            result = await self._fetch(query)
        except Exception as error:  # noqa: BLE001
            logger.exception("sql_auth_lookup_failed query=%r", query.template)
            await sink.on_error(QueryError(query=query, message=str(error)))
            return
        await sink.on_result(result)

    async def _fetch(self, query: LookupQuery) -> LookupResult:
        async with self._engine.connect() as connection:
            cursor = await connection.execute(sa.text(query.template), dict(query.params))
            rows = tuple(dict(row) for row in cursor.mappings().all())
        logger.debug("sql_auth_lookup_completed rows=%s", len(rows))
        return LookupResult(query=query, rows=rows)
