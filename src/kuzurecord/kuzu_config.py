# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Typed configuration for connections and model classes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConnectionConfig(BaseModel):
    """
    Settings for the shared Kuzu connection owned by a Registry.

    :class: ConnectionConfig
    :synopsis: Database location and execution limits
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    database: Union[str, Path] = Field(
        default=":memory:",
        description="Path of the Kuzu database, or ':memory:' for an in-memory database",
    )
    read_only: bool = False
    # 0 lets Kuzu size the buffer pool itself
    buffer_pool_size: int = Field(default=0, ge=0)
    max_concurrent_queries: int = Field(default=4, ge=1)
    max_threads_per_query: int = Field(default=0, ge=0)

    @field_validator("database")
    @classmethod
    def _normalize_database(cls, value: Union[str, Path]) -> str:
        return str(value)

    @classmethod
    def coerce(cls, value: Union["ConnectionConfig", Mapping[str, Any], str, Path]) -> "ConnectionConfig":
        """Accept a config object, a mapping of settings, or a bare database path."""
        if isinstance(value, cls):
            return value
        if isinstance(value, (str, Path)):
            return cls(database=value)
        return cls.model_validate(dict(value))


class ModelConfig(BaseModel):
    """
    Table-binding options captured by ``Model(schema, **options)``.

    Unset names are derived from the model at class-creation time.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    table_name: Optional[str] = None
    id_column: Optional[str] = None
    model_name: Optional[str] = None
    deleted_at_column: Optional[str] = None
    timestamps: bool = False
    created_at_column: Optional[str] = None
    updated_at_column: Optional[str] = None
    validate_on_init: bool = False
    underscored: bool = False
    # Extra storage columns for generated DDL: name -> Kuzu type
    columns: Dict[str, str] = Field(default_factory=dict)

    @property
    def soft_delete(self) -> bool:
        return bool(self.deleted_at_column)
