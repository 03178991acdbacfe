# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and shared fixtures for KuzuRecord tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Generator, List, Optional

import pytest

from kuzurecord import Registry


@pytest.fixture(scope="function")
def test_db_path(tmp_path: Path) -> Path:
    """Database location inside the test's temporary directory."""
    return tmp_path / "kuzurecord_db"


@pytest.fixture(scope="function")
def make_registry(test_db_path: Path) -> Generator[Callable[..., Awaitable[Registry]], None, None]:
    """
    Factory building a Registry over a fresh database with its tables created.

    Every registry built during the test is closed afterwards.
    """
    created: List[Registry] = []

    async def factory(*models: Any) -> Registry:
        registry = Registry({"database": test_db_path}, models)
        await registry.create_tables()
        created.append(registry)
        return registry

    try:
        yield factory
    finally:
        for registry in created:
            registry.close()


class QueryCounter:
    """Records every statement executed through a connection."""

    def __init__(self) -> None:
        self.statements: List[str] = []
        self.parameters: List[Optional[Dict[str, Any]]] = []

    @property
    def count(self) -> int:
        return len(self.statements)

    def reset(self) -> None:
        self.statements.clear()
        self.parameters.clear()


@pytest.fixture(scope="function")
def count_queries(monkeypatch: pytest.MonkeyPatch) -> Callable[[Registry], QueryCounter]:
    """Wrap a registry's connection so executed statements are recorded."""

    def attach(registry: Registry) -> QueryCounter:
        counter = QueryCounter()
        connection = registry.connection
        original_execute = connection.execute

        async def counting_execute(query: str, parameters: Optional[Dict[str, Any]] = None):
            counter.statements.append(query)
            counter.parameters.append(parameters)
            return await original_execute(query, parameters)

        monkeypatch.setattr(connection, "execute", counting_execute)
        return counter

    return attach
