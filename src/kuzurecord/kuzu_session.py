# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Connection management for KuzuRecord.

KuzuConnection owns a ``kuzu.Database`` and a ``kuzu.AsyncConnection`` and
normalizes query results into plain dict rows. Node values returned by a query
(``RETURN n``) are flattened into the row with Kuzu's internal ``_id``/``_label``
properties dropped.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

import kuzu

from .constants import ErrorMessages, INTERNAL_PROPERTY_PREFIX
from .exceptions import ConnectionNotConfiguredError
from .kuzu_config import ConnectionConfig
from .kuzu_query import TableQuery

logger = logging.getLogger(__name__)


def _is_node_value(value: Any) -> bool:
    return isinstance(value, dict) and "_label" in value


def _public_properties(node: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in node.items() if not key.startswith(INTERNAL_PROPERTY_PREFIX)}


class KuzuConnection:
    """Wrapper around a Kuzu database and its async connection."""

    def __init__(self, config: Union[ConnectionConfig, Mapping[str, Any], str, None] = None):
        self.config = ConnectionConfig.coerce(config if config is not None else {})
        self._database = kuzu.Database(
            self.config.database,
            buffer_pool_size=self.config.buffer_pool_size,
            read_only=self.config.read_only,
        )
        self._connection = kuzu.AsyncConnection(
            self._database,
            max_concurrent_queries=self.config.max_concurrent_queries,
            max_threads_per_query=self.config.max_threads_per_query,
        )
        self._closed = False
        logger.debug("Opened Kuzu database at %s", self.config.database)

    @property
    def closed(self) -> bool:
        return self._closed

    def table(self, name: str) -> TableQuery:
        """Start a query against the node table ``name``."""
        return TableQuery(self, name)

    __call__ = table

    async def execute(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute one Cypher statement and return its rows as dicts."""
        if self._closed:
            raise ConnectionNotConfiguredError(ErrorMessages.CONNECTION_CLOSED)

        logger.debug("Executing Cypher: %s | parameters=%s", query, parameters)
        if parameters:
            result = await self._connection.execute(query, parameters)
        else:
            result = await self._connection.execute(query)

        try:
            columns = result.get_column_names()
            rows: List[Dict[str, Any]] = []
            while result.has_next():
                values = result.get_next()
                row: Dict[str, Any] = {}
                # Node columns are merged first so explicit aliases win
                for column, value in zip(columns, values):
                    if _is_node_value(value):
                        row.update(_public_properties(value))
                for column, value in zip(columns, values):
                    if not _is_node_value(value):
                        row[column] = value
                rows.append(row)
        finally:
            result.close()
        return rows

    async def execute_script(self, statements: List[str]) -> None:
        """Run statements one at a time, in order."""
        for statement in statements:
            await self.execute(statement)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._connection.close()
        self._database.close()
        logger.debug("Closed Kuzu database at %s", self.config.database)
