# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
DDL generation for registered models.

Every model maps to one Kuzu node table keyed on its id column. Foreign-key
columns implied by relationship fields are added to the table that holds
them, and every many-to-many relationship contributes a join node table.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, List, Type

from .constants import DDLConstants, FIELD_TYPE_COLUMN_TYPES, FieldOption, KuzuDataType

if TYPE_CHECKING:
    from .kuzu_orm import RecordBase
    from .kuzu_registry import Registry

logger = logging.getLogger(__name__)

TableColumns = Dict[str, str]


def _reference_type(column_type: str) -> str:
    """Type of a column referring to a column of type ``column_type``."""
    return KuzuDataType.INT64 if column_type == KuzuDataType.SERIAL else column_type


def model_columns(model: Type["RecordBase"]) -> TableColumns:
    """Columns declared by the model itself, id column first."""
    scalar_fields = model.schema.scalar_fields()
    columns: TableColumns = {}

    id_definition = scalar_fields.get(model.id_column, {})
    columns[model.id_column] = id_definition.get(FieldOption.COLUMN_TYPE) or KuzuDataType.SERIAL

    for field_name, definition in scalar_fields.items():
        if field_name == model.id_column:
            continue
        columns[field_name] = definition.get(FieldOption.COLUMN_TYPE) or FIELD_TYPE_COLUMN_TYPES[definition[FieldOption.TYPE]]

    if model.config.soft_delete:
        columns.setdefault(model.deleted_at_column, KuzuDataType.TIMESTAMP)
    if model.config.timestamps:
        columns.setdefault(model.created_at_column, KuzuDataType.TIMESTAMP)
        columns.setdefault(model.updated_at_column, KuzuDataType.TIMESTAMP)
    columns.update(model.config.columns)
    return columns


def registry_tables(registry: "Registry") -> Dict[str, TableColumns]:
    """
    Columns of every table the registry's models need, in a stable order:
    model tables in registration order, then join tables by name.
    """
    tables: Dict[str, TableColumns] = {}
    for model in registry.models.values():
        tables[model.table_name] = model_columns(model)

    join_tables: Dict[str, TableColumns] = {}
    for model in registry.models.values():
        for name in model.relationship_map:
            descriptor = model.describe_relationship(name)
            related = descriptor.related_model
            owner_columns = tables[model.table_name]
            related_columns = tables[related.table_name]

            if descriptor.through:
                join_columns = join_tables.setdefault(
                    descriptor.through, {registry.join_table_id_column: KuzuDataType.SERIAL}
                )
                join_columns.setdefault(
                    descriptor.through_local_field,
                    _reference_type(owner_columns.get(descriptor.local_field, KuzuDataType.INT64)),
                )
                join_columns.setdefault(
                    descriptor.through_foreign_field,
                    _reference_type(related_columns.get(related.id_column, KuzuDataType.INT64)),
                )
            elif descriptor.many:
                related_columns.setdefault(
                    descriptor.foreign_field,
                    _reference_type(owner_columns.get(descriptor.local_field, KuzuDataType.INT64)),
                )
            else:
                owner_columns.setdefault(
                    descriptor.local_field,
                    _reference_type(related_columns.get(descriptor.foreign_field, KuzuDataType.INT64)),
                )

    for table_name in sorted(join_tables):
        # A join table may also be registered as a model
        if table_name in tables:
            for column, column_type in join_tables[table_name].items():
                tables[table_name].setdefault(column, column_type)
        else:
            tables[table_name] = join_tables[table_name]
    return tables


def create_table_statement(table_name: str, columns: TableColumns, primary_key: str) -> str:
    definitions = [f"{column} {column_type}" for column, column_type in columns.items()]
    definitions.append(f"{DDLConstants.PRIMARY_KEY}({primary_key})")
    return f"{DDLConstants.CREATE_NODE_TABLE} {table_name}({DDLConstants.FIELD_SEPARATOR.join(definitions)})"


def generate_registry_ddl(registry: "Registry") -> List[str]:
    """CREATE NODE TABLE statements for every table the registry needs."""
    primary_keys = {model.table_name: model.id_column for model in registry.models.values()}
    statements = [
        create_table_statement(table_name, columns, primary_keys.get(table_name, registry.join_table_id_column))
        for table_name, columns in registry_tables(registry).items()
    ]
    logger.debug("Generated DDL for %d table(s)", len(statements))
    return statements
