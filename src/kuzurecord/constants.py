# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Constants module for KuzuRecord.

This module centralizes the constants, naming conventions and literal strings
used throughout the KuzuRecord codebase.

:module: constants
:synopsis: Centralized constants and configuration for KuzuRecord
:author: KuzuRecord Contributors
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final


# ============================================================================
# SCHEMA FIELD TYPES
# ============================================================================

class FieldType(StrEnum):
    """
    Declared schema field types.

    :class: FieldType
    :synopsis: The closed set of types a schema field may declare
    """

    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    JSON = "JSON"
    MODEL = "Model"      # Single related entity
    MODELS = "Models"    # Many related entities


RELATIONSHIP_TYPES: Final[frozenset] = frozenset({FieldType.MODEL, FieldType.MODELS})


class FieldOption(StrEnum):
    """Keys understood inside a field definition."""

    TYPE = "type"
    REQUIRED = "required"
    DEFAULT = "default"
    DESCRIPTION = "description"
    COLUMN_TYPE = "column_type"

    # String constraints
    MAX_LENGTH = "max_length"
    MIN_LENGTH = "min_length"
    PATTERN = "pattern"
    FORMAT = "format"
    ENUM = "enum"

    # Number constraints
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    EXCLUSIVE_MINIMUM = "exclusive_minimum"
    EXCLUSIVE_MAXIMUM = "exclusive_maximum"
    MULTIPLE_OF = "multiple_of"

    # Relationship metadata
    RELATED_MODEL = "related_model"
    LOCAL_FIELD = "local_field"
    FOREIGN_FIELD = "foreign_field"
    THROUGH = "through"
    THROUGH_LOCAL_FIELD = "through_local_field"
    THROUGH_FOREIGN_FIELD = "through_foreign_field"


# ============================================================================
# JSON SCHEMA CONSTANTS
# ============================================================================

class JsonSchemaConstants(StrEnum):
    """JSON-Schema keywords emitted by Schema.json_schema."""

    TYPE = "type"
    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    PROPERTIES = "properties"
    REQUIRED = "required"
    ITEMS = "items"
    REF = "$ref"
    DEFINITIONS_PREFIX = "#/definitions/"
    FORMAT = "format"
    DATE_TIME = "date-time"
    DESCRIPTION = "description"
    DEFAULT = "default"
    MAX_LENGTH = "maxLength"
    MIN_LENGTH = "minLength"
    PATTERN = "pattern"
    ENUM = "enum"
    MINIMUM = "minimum"
    MAXIMUM = "maximum"
    EXCLUSIVE_MINIMUM = "exclusiveMinimum"
    EXCLUSIVE_MAXIMUM = "exclusiveMaximum"
    MULTIPLE_OF = "multipleOf"


# ============================================================================
# KUZU DATA TYPES
# ============================================================================

class KuzuDataType(StrEnum):
    """Kuzu column types used by generated DDL."""

    STRING = "STRING"
    INT64 = "INT64"
    DOUBLE = "DOUBLE"
    BOOL = "BOOL"
    TIMESTAMP = "TIMESTAMP"
    SERIAL = "SERIAL"


FIELD_TYPE_COLUMN_TYPES: Final[dict] = {
    FieldType.STRING: KuzuDataType.STRING,
    FieldType.NUMBER: KuzuDataType.DOUBLE,
    FieldType.BOOLEAN: KuzuDataType.BOOL,
    FieldType.DATE: KuzuDataType.TIMESTAMP,
    # JSON payloads are stored serialized
    FieldType.JSON: KuzuDataType.STRING,
}


# ============================================================================
# NAMING CONVENTIONS
# ============================================================================

class ConventionConstants(StrEnum):
    """Default column names and naming-convention fragments."""

    DEFAULT_ID_COLUMN: Final[str] = "id"
    CREATED: Final[str] = "created"
    UPDATED: Final[str] = "updated"
    AT: Final[str] = "at"
    UNDERSCORE: Final[str] = "_"
    PATH_SEPARATOR: Final[str] = "."


# ============================================================================
# DDL GENERATION CONSTANTS
# ============================================================================

class DDLConstants(StrEnum):
    """DDL generation constants."""

    CREATE_NODE_TABLE: Final[str] = "CREATE NODE TABLE IF NOT EXISTS"
    PRIMARY_KEY: Final[str] = "PRIMARY KEY"
    FIELD_SEPARATOR: Final[str] = ", "


# ============================================================================
# CYPHER QUERY CONSTANTS
# ============================================================================

class CypherConstants(StrEnum):
    """Cypher keywords and aliases used by the query builder."""

    MATCH: Final[str] = "MATCH"
    WHERE: Final[str] = "WHERE"
    RETURN: Final[str] = "RETURN"
    CREATE: Final[str] = "CREATE"
    SET: Final[str] = "SET"
    DELETE: Final[str] = "DELETE"
    ORDER_BY: Final[str] = "ORDER BY"
    SKIP: Final[str] = "SKIP"
    LIMIT: Final[str] = "LIMIT"
    AND: Final[str] = "AND"
    OR: Final[str] = "OR"
    NOT: Final[str] = "NOT"
    IN: Final[str] = "IN"
    AS: Final[str] = "AS"
    IS_NULL: Final[str] = "IS NULL"
    IS_NOT_NULL: Final[str] = "IS NOT NULL"
    NULL: Final[str] = "NULL"
    ASC: Final[str] = "ASC"
    DESC: Final[str] = "DESC"
    STAR: Final[str] = "*"

    MAIN_ALIAS: Final[str] = "n"
    JOIN_ALIAS_PREFIX: Final[str] = "j"
    PARAMETER_PREFIX: Final[str] = "p"
    RETURN_ID_ALIAS: Final[str] = "kr_generated_id"


class QueryOperation(StrEnum):
    """Statement kinds the query builder can emit."""

    SELECT = "select"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


COMPARISON_OPERATORS: Final[dict] = {
    "=": "=",
    "==": "=",
    "!=": "<>",
    "<>": "<>",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "starts with": "STARTS WITH",
    "ends with": "ENDS WITH",
    "contains": "CONTAINS",
}

# Kuzu node properties that are internal and never surfaced as columns
INTERNAL_PROPERTY_PREFIX: Final[str] = "_"

# Alias under which the join-table key travels alongside related rows
THROUGH_KEY_ALIAS: Final[str] = "kr_through_key"


# ============================================================================
# ERROR MESSAGES
# ============================================================================

class ErrorMessages:
    """Error message templates."""

    MISSING_TYPE: Final[str] = "No type specified for {field_name} (nested objects are not supported)"
    UNKNOWN_TYPE: Final[str] = "Unknown type {type_name} for field {field_name}"
    INVALID_FIELD_DEFINITION: Final[str] = "Field definition for {field_name} must be a mapping, got {type_name}"
    INVALID_SCHEMA_DEFINITION: Final[str] = "Schema definition must be a mapping, got {type_name}"
    UNKNOWN_RELATIONSHIP: Final[str] = "No such relationship {name} on {model_name}"
    UNKNOWN_ENTITY: Final[str] = "Unknown table {name}"
    CROSS_REGISTRY: Final[str] = "Model {name} is not registered in the registry of {model_name}"
    NO_REGISTRY: Final[str] = "Model {model_name} is not attached to a registry"
    NO_CONNECTION: Final[str] = "Model {model_name} has no connection; load it into a Registry created with a connection config"
    NO_REGISTRY_CONNECTION: Final[str] = "Registry was created without a connection config"
    SOFT_DELETE_UNSUPPORTED: Final[str] = "{model_name} does not support soft deletes"
    VALIDATION_FAILED: Final[str] = "Validation failed for {model_name}: {count} error(s)"
    UNKNOWN_OPERATOR: Final[str] = "Unsupported comparison operator {operator!r}"
    INVALID_WHERE: Final[str] = "Unsupported where() arguments: {arguments!r}"
    INVALID_ORDER_DIRECTION: Final[str] = "Order direction must be 'asc' or 'desc', got {direction!r}"
    UNKNOWN_TABLE_REFERENCE: Final[str] = "Column {column} references table {table} which is not part of the query"
    EMPTY_UPDATE: Final[str] = "update() requires at least one property"
    MISSING_PRIMARY_KEY: Final[str] = "Cannot {operation} a {model_name} without a value for {id_column}"
    CONNECTION_CLOSED: Final[str] = "Connection is closed"
