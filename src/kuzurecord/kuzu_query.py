# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Chainable table query bound to a KuzuConnection.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Generator, List, Mapping, Optional, Tuple

from .constants import CypherConstants, ErrorMessages, QueryOperation
from .exceptions import ConnectionNotConfiguredError, QueryError
from .kuzu_query_builder import CypherQueryBuilder, JoinClause, QueryState, WhereBuilder

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from .kuzu_session import KuzuConnection


class TableQuery(WhereBuilder):
    """
    Query over one node table, knex-style.

    Builder methods mutate the query and return it, so a callable handed a
    query may customize it in place. Awaiting the query runs the select and
    yields a list of plain dict rows.
    """

    def __init__(self, connection: Optional["KuzuConnection"], table: str):
        super().__init__()
        self._connection = connection
        self._state = QueryState(table=table)
        # Filters live on the state so the builder sees them
        self._state.filters = self._clauses

    @property
    def table(self) -> str:
        return self._state.table

    # ------------------------------------------------------------------
    # Builder methods
    # ------------------------------------------------------------------

    def select(self, *fields: str) -> TableQuery:
        """Set the returned columns. ``"*"`` returns whole rows."""
        flattened: List[str] = []
        for item in fields:
            if isinstance(item, (list, tuple)):
                flattened.extend(item)
            else:
                flattened.append(item)
        self._state.select_fields = flattened or [CypherConstants.STAR]
        return self

    def scope(self, *args: Any) -> TableQuery:
        """
        Add a condition every row must meet, whatever ``where``/``or_where``
        calls follow. Takes the same arguments as ``where``.
        """
        self._state.scopes.extend(self._predicates_from_args(args))
        return self

    def join(self, table: str, left: str, right: str) -> TableQuery:
        """Inner join ``table`` on ``left = right``."""
        self._state.joins.append(JoinClause(table=table, left=left, right=right))
        return self

    def order_by(self, column: str, direction: str = "asc") -> TableQuery:
        normalized = direction.upper()
        if normalized not in (CypherConstants.ASC, CypherConstants.DESC):
            raise QueryError(ErrorMessages.INVALID_ORDER_DIRECTION.format(direction=direction))
        self._state.order_by.append((column, normalized))
        return self

    def limit(self, count: int) -> TableQuery:
        self._state.limit_value = count
        return self

    def offset(self, count: int) -> TableQuery:
        self._state.offset_value = count
        return self

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def to_cypher(
        self,
        operation: QueryOperation = QueryOperation.SELECT,
        values: Optional[Mapping[str, Any]] = None,
        returning: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Compile to ``(cypher, parameters)`` without executing."""
        builder = CypherQueryBuilder(self._state.copy())
        return builder.build(operation, values=values, returning=returning)

    def __repr__(self) -> str:
        return f"<TableQuery {self._state.table}>"

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _run(self, query: str, parameters: Dict[str, Any]) -> List[Dict[str, Any]]:
        if self._connection is None:
            raise ConnectionNotConfiguredError(ErrorMessages.NO_REGISTRY_CONNECTION)
        return await self._connection.execute(query, parameters)

    async def all(self) -> List[Dict[str, Any]]:
        return await self._run(*self.to_cypher())

    def __await__(self) -> Generator[Any, None, List[Dict[str, Any]]]:
        return self.all().__await__()

    async def first(self) -> Optional[Dict[str, Any]]:
        self._state.limit_value = 1
        rows = await self.all()
        return rows[0] if rows else None

    async def insert(self, props: Mapping[str, Any], returning: Optional[str] = None) -> Any:
        """Insert one row; returns the value of ``returning`` for the new row."""
        rows = await self._run(*self.to_cypher(QueryOperation.INSERT, values=props, returning=returning))
        if returning and rows:
            return rows[0].get(CypherConstants.RETURN_ID_ALIAS)
        return None

    async def update(self, props: Mapping[str, Any]) -> None:
        await self._run(*self.to_cypher(QueryOperation.UPDATE, values=props))

    async def delete(self) -> None:
        await self._run(*self.to_cypher(QueryOperation.DELETE))
