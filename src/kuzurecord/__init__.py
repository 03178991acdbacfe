# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
KuzuRecord: active-record models with batched relationship loading on Kuzu.
"""

from .constants import FieldType, FieldOption, KuzuDataType
from .exceptions import (
    KuzuRecordError,
    SchemaDefinitionError,
    MissingTypeError,
    UnknownTypeError,
    ValidationError,
    UnknownRelationshipError,
    UnknownEntityError,
    UnsupportedOperationError,
    QueryError,
    ConnectionNotConfiguredError,
)
from .inflection import pluralize, singularize, guess_column_name, guess_table_name
from .kuzu_config import ConnectionConfig, ModelConfig
from .kuzu_schema import Schema, ValidationIssue, ValidationResult, JsonSchemaForms
from .kuzu_relationships import RelationshipDescriptor
from .kuzu_query import TableQuery
from .kuzu_session import KuzuConnection
from .kuzu_orm import Model, RecordBase
from .kuzu_registry import Registry

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Schema
    "Schema",
    "FieldType",
    "FieldOption",
    "KuzuDataType",
    "ValidationIssue",
    "ValidationResult",
    "JsonSchemaForms",
    # Models
    "Model",
    "RecordBase",
    "RelationshipDescriptor",
    "Registry",
    # Storage
    "ConnectionConfig",
    "ModelConfig",
    "KuzuConnection",
    "TableQuery",
    # Naming
    "pluralize",
    "singularize",
    "guess_column_name",
    "guess_table_name",
    # Errors
    "KuzuRecordError",
    "SchemaDefinitionError",
    "MissingTypeError",
    "UnknownTypeError",
    "ValidationError",
    "UnknownRelationshipError",
    "UnknownEntityError",
    "UnsupportedOperationError",
    "QueryError",
    "ConnectionNotConfiguredError",
]
