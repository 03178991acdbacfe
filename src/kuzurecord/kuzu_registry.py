# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Model registry: model name -> class, plus the connection shared by those classes.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Type, Union

from .constants import ConventionConstants, ErrorMessages
from .exceptions import ConnectionNotConfiguredError, UnknownEntityError
from .kuzu_config import ConnectionConfig
from .kuzu_ddl import generate_registry_ddl
from .kuzu_orm import RecordBase
from .kuzu_session import KuzuConnection

logger = logging.getLogger(__name__)

ModelInput = Union[Type[RecordBase], Iterable[Type[RecordBase]]]


class Registry:
    """
    Binds model classes to one connection and resolves them by name.

    Relationship targets are only looked up in the registry of the model
    declaring the relationship.

    Example:
        >>> async with Registry({"database": ":memory:"}, [Hospital, Doctor, Patient]) as registry:
        ...     await registry.create_tables()
        ...     hospital = await Hospital.find_by_id(0, with_related=["doctors.patients"])
    """

    join_table_id_column: str = ConventionConstants.DEFAULT_ID_COLUMN

    def __init__(
        self,
        config: Union[ConnectionConfig, Mapping[str, Any], str, None] = None,
        models: ModelInput = (),
    ):
        self.models: Dict[str, Type[RecordBase]] = {}
        self.connection: Optional[KuzuConnection] = KuzuConnection(config) if config is not None else None
        self.load(models)

    def load(self, models: ModelInput) -> Registry:
        """Register ``models`` and bind them to this registry's connection."""
        if isinstance(models, type):
            models = [models]
        for model in models:
            self.models[model.model_name] = model
            model.registry = self
            model.connection = self.connection
            logger.debug("Registered %s as table %s", model.model_name, model.table_name)
        return self

    def get(self, name: str) -> Type[RecordBase]:
        model = self.models.get(name)
        if model is None:
            raise UnknownEntityError(name, ErrorMessages.UNKNOWN_ENTITY.format(name=name))
        return model

    __getitem__ = get

    def __contains__(self, name: object) -> bool:
        return name in self.models

    def __iter__(self) -> Iterator[Type[RecordBase]]:
        return iter(self.models.values())

    def __len__(self) -> int:
        return len(self.models)

    # ------------------------------------------------------------------
    # Schema management
    # ------------------------------------------------------------------

    def _require_connection(self) -> KuzuConnection:
        if self.connection is None:
            raise ConnectionNotConfiguredError(ErrorMessages.NO_REGISTRY_CONNECTION)
        return self.connection

    def generate_ddl(self) -> List[str]:
        return generate_registry_ddl(self)

    async def create_tables(self) -> None:
        """Create every node table the registered models need, if missing."""
        await self._require_connection().execute_script(self.generate_ddl())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self.connection is not None:
            self.connection.close()

    async def __aenter__(self) -> Registry:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()
