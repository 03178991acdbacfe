# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Active-record models for KuzuRecord.

``Model(schema, **options)`` returns a base class bound to a schema and table
configuration; concrete models subclass it::

    class Doctor(Model(doctor_schema)):
        pass

Classes become usable once a Registry has loaded them, which binds the shared
connection and makes relationship targets resolvable by name.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import (
    TYPE_CHECKING, Any, Callable, ClassVar, Dict, Iterable, List, Mapping, Optional, Type, TypeVar, Union,
)

from pydantic_core import to_json

from .constants import ConventionConstants, ErrorMessages, FieldOption
from .exceptions import (
    ConnectionNotConfiguredError,
    QueryError,
    UnsupportedOperationError,
    ValidationError,
)
from .inflection import guess_column_name, guess_table_name, guess_table_name_for_model
from .kuzu_config import ModelConfig
from .kuzu_loader import assign_batch, fetch_related, load_related, validate_paths
from .kuzu_query import TableQuery
from .kuzu_relationships import RelationshipDescriptor, describe_relationship
from .kuzu_schema import FieldDefinition, Schema, SchemaInput, ValidationIssue

if TYPE_CHECKING:
    from .kuzu_registry import Registry
    from .kuzu_session import KuzuConnection

logger = logging.getLogger(__name__)

RecordType = TypeVar("RecordType", bound="RecordBase")
QueryInput = Union[None, Mapping[str, Any], Callable[[TableQuery], Any]]
Fields = Union[str, Iterable[str]]

# Instance attributes kept off the property bag
_INTERNAL_ATTRIBUTES = frozenset({
    "_props", "_original", "_changes", "_persisted", "_relationships", "_related", "_errors",
})


class RecordBase:
    """
    Behaviour shared by every model class.

    Instances hold their column values in a property bag. Assigning a
    column records it in ``changes``; relationship fields are kept apart
    and never persisted.
    """

    schema: ClassVar[Schema]
    config: ClassVar[ModelConfig]
    model_name: ClassVar[str]
    table_name: ClassVar[str]
    id_column: ClassVar[str]
    deleted_at_column: ClassVar[Optional[str]]
    created_at_column: ClassVar[str]
    updated_at_column: ClassVar[str]
    relationship_map: ClassVar[Dict[str, FieldDefinition]] = {}

    registry: ClassVar[Optional["Registry"]] = None
    connection: ClassVar[Optional["KuzuConnection"]] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if getattr(cls, "schema", None) is None:
            return

        config = cls.config
        own = cls.__dict__
        # Names set in the class body win over configuration
        if "model_name" not in own:
            cls.model_name = config.model_name or cls.__name__
        if "table_name" not in own:
            cls.table_name = config.table_name or guess_table_name_for_model(cls.model_name)
        if "id_column" not in own:
            cls.id_column = config.id_column or ConventionConstants.DEFAULT_ID_COLUMN

        cls.deleted_at_column = config.deleted_at_column
        cls.created_at_column = config.created_at_column or cls.guess_column_name(
            ConventionConstants.CREATED, ConventionConstants.AT
        )
        cls.updated_at_column = config.updated_at_column or cls.guess_column_name(
            ConventionConstants.UPDATED, ConventionConstants.AT
        )
        cls.relationship_map = cls.schema.relationship_fields()
        cls.registry = None
        cls.connection = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(self, props: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        values: Dict[str, Any] = dict(props or {})
        values.update(kwargs)
        for field_name, definition in self.schema.scalar_fields().items():
            if field_name not in values and FieldOption.DEFAULT in definition:
                values[field_name] = copy.deepcopy(definition[FieldOption.DEFAULT])

        self._init_state()
        if self.config.validate_on_init:
            result = self.schema.validate(values)
            if not result:
                raise ValidationError(
                    result.errors,
                    ErrorMessages.VALIDATION_FAILED.format(model_name=self.model_name, count=len(result.errors)),
                )
        self._set_props(values)

    def _init_state(self) -> None:
        object.__setattr__(self, "_persisted", False)
        object.__setattr__(self, "_relationships", {})
        object.__setattr__(self, "_related", {})
        object.__setattr__(self, "_errors", [])

    @classmethod
    def from_row(cls: Type[RecordType], row: Mapping[str, Any]) -> RecordType:
        """Build a persisted instance from a stored row, without validation."""
        instance = cls.__new__(cls)
        instance._init_state()
        instance._set_props(cls.schema.from_storage(row))
        instance._persisted = True
        return instance

    def _set_props(self, props: Dict[str, Any]) -> None:
        object.__setattr__(self, "_props", props)
        object.__setattr__(self, "_original", copy.deepcopy(props))
        object.__setattr__(self, "_changes", {})

    # ------------------------------------------------------------------
    # Attribute access
    # ------------------------------------------------------------------

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_"):
            raise AttributeError(name)
        props = self.__dict__.get("_props", {})
        if name in props:
            return props[name]
        if name in self.relationship_map:
            return self.__dict__.get("_related", {}).get(name)
        if name in self.schema:
            return None
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _INTERNAL_ATTRIBUTES or isinstance(getattr(type(self), name, None), property):
            object.__setattr__(self, name, value)
        elif name in self.relationship_map:
            self._related[name] = value
        else:
            self._props[name] = value
            self._changes[name] = value

    def get(self, name: str, default: Any = None) -> Any:
        """Column or relationship value by name."""
        if name in self._props:
            return self._props[name]
        if name in self.relationship_map:
            return self._related.get(name, default)
        return default

    def set(self, name: str, value: Any) -> None:
        setattr(self, name, value)

    def _get_related(self, name: str) -> Any:
        return self._related.get(name)

    def _set_related(self, name: str, value: Any) -> None:
        self._related[name] = value

    @property
    def props(self) -> Dict[str, Any]:
        return dict(self._props)

    @property
    def original(self) -> Dict[str, Any]:
        return copy.deepcopy(self._original)

    @property
    def changes(self) -> Dict[str, Any]:
        return dict(self._changes)

    @property
    def persisted(self) -> bool:
        return self._persisted

    @property
    def relationships(self) -> Dict[str, Any]:
        """Loaded relationship values by name."""
        return dict(self._related)

    @property
    def errors(self) -> List[ValidationIssue]:
        """Issues reported by the last ``validate()`` call."""
        return list(self._errors)

    def __repr__(self) -> str:
        return f"<{self.model_name} {self.id_column}={self._props.get(self.id_column)!r}>"

    # ------------------------------------------------------------------
    # Naming conventions
    # ------------------------------------------------------------------

    @classmethod
    def guess_column_name(cls, table: str, column: str) -> str:
        return guess_column_name(table, column, underscored=cls.config.underscored)

    @classmethod
    def guess_table_name(cls, local_table: str, remote_table: str) -> str:
        return guess_table_name(local_table, remote_table)

    @classmethod
    def describe_relationship(cls, name: str) -> RelationshipDescriptor:
        return describe_relationship(cls, name)

    @classmethod
    def json_schema(cls) -> Dict[str, Any]:
        """JSON-Schema of the model, relationship fields as ``$ref`` entries."""
        return cls.schema.json_schema.with_refs

    # ------------------------------------------------------------------
    # Class-level queries
    # ------------------------------------------------------------------

    @classmethod
    def _require_connection(cls) -> "KuzuConnection":
        if cls.connection is None:
            raise ConnectionNotConfiguredError(ErrorMessages.NO_CONNECTION.format(model_name=cls.model_name))
        return cls.connection

    @classmethod
    def get_query(cls) -> TableQuery:
        """Query over the model's table with soft-deleted rows excluded."""
        query = cls._require_connection().table(cls.table_name)
        if cls.config.soft_delete:
            query.scope(cls.deleted_at_column, None)
        return query

    @staticmethod
    def _apply_query_input(query: TableQuery, query_input: QueryInput) -> TableQuery:
        if callable(query_input):
            query_input(query)
        elif isinstance(query_input, Mapping):
            query.where(query_input)
        return query

    @staticmethod
    def _select(query: TableQuery, fields: Fields) -> TableQuery:
        if isinstance(fields, str):
            return query.select(fields)
        return query.select(*fields)

    @classmethod
    async def find(
        cls: Type[RecordType],
        query_input: QueryInput = None,
        *,
        fields: Fields = "*",
        with_related: Iterable[str] = (),
    ) -> List[RecordType]:
        """
        Load the instances matching ``query_input``.

        A mapping filters on column equality; a callable receives the
        TableQuery and customizes it in place. ``with_related`` paths are
        resolved in order once the base rows are loaded.
        """
        with_related = [with_related] if isinstance(with_related, str) else list(with_related)
        validate_paths(cls, with_related)

        query = cls._apply_query_input(cls._select(cls.get_query(), fields), query_input)
        rows = await query
        instances = [cls.from_row(row) for row in rows]
        logger.debug("Loaded %d %s instance(s)", len(instances), cls.model_name)

        await load_related(cls, instances, with_related)
        return instances

    @classmethod
    async def find_by_id(
        cls: Type[RecordType],
        id: Any,
        *,
        fields: Fields = "*",
        with_related: Iterable[str] = (),
    ) -> Optional[RecordType]:
        with_related = [with_related] if isinstance(with_related, str) else list(with_related)
        validate_paths(cls, with_related)

        row = await cls._select(cls.get_query(), fields).where(cls.id_column, id).first()
        if row is None:
            return None
        instance = cls.from_row(row)
        await load_related(cls, [instance], with_related)
        return instance

    @classmethod
    async def create(cls: Type[RecordType], props: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> RecordType:
        return await cls(props, **kwargs).save()

    @classmethod
    async def update(cls, query_input: QueryInput, updates: Mapping[str, Any]) -> None:
        """Bulk update of every matching row. No validation is performed."""
        query = cls._apply_query_input(cls.get_query(), query_input)
        await query.update(cls.schema.to_storage(updates))

    @classmethod
    async def remove(cls: Type[RecordType], query_input: QueryInput = None) -> List[RecordType]:
        """Find the matching instances and destroy each; returns them."""
        instances = await cls.find(query_input)
        for instance in instances:
            await instance.destroy()
        return instances

    @classmethod
    async def restore(cls, id: Any) -> None:
        """Clear the soft-delete marker of the row with primary key ``id``."""
        if not cls.config.soft_delete:
            raise UnsupportedOperationError(ErrorMessages.SOFT_DELETE_UNSUPPORTED.format(model_name=cls.model_name))
        await cls._require_connection().table(cls.table_name).where(cls.id_column, id).update(
            {cls.deleted_at_column: None}
        )

    # ------------------------------------------------------------------
    # Instance persistence
    # ------------------------------------------------------------------

    def validate(self) -> bool:
        result = self.schema.validate(self._props)
        self._errors = list(result.errors)
        return result.valid

    def _primary_key(self, operation: str) -> Any:
        value = self._props.get(self.id_column)
        if value is None:
            raise QueryError(ErrorMessages.MISSING_PRIMARY_KEY.format(
                operation=operation, model_name=self.model_name, id_column=self.id_column,
            ))
        return value

    async def save(self: RecordType, validate: bool = True) -> RecordType:
        """
        Insert the record, or update its changed columns when already persisted.

        Raises:
            ValidationError: ``validate`` is set and the record is invalid
        """
        if validate and not self.validate():
            raise ValidationError(
                self._errors,
                ErrorMessages.VALIDATION_FAILED.format(model_name=self.model_name, count=len(self._errors)),
            )

        if self.config.timestamps:
            now = datetime.now()
            if not self._persisted:
                self._props[self.created_at_column] = now
                self._changes[self.created_at_column] = now
            self._props[self.updated_at_column] = now
            self._changes[self.updated_at_column] = now

        connection = self._require_connection()
        if self._persisted:
            if self._changes:
                await connection.table(self.table_name).where(
                    self.id_column, self._primary_key("update")
                ).update(self.schema.to_storage(self._changes))
        else:
            generated = await connection.table(self.table_name).insert(
                self.schema.to_storage(self._props), returning=self.id_column
            )
            if generated is not None:
                self._props[self.id_column] = generated
            self._persisted = True
            logger.debug("Inserted %s %s=%r", self.model_name, self.id_column, generated)

        self._set_props(self._props)
        return self

    async def destroy(self) -> None:
        """Soft-delete the row when configured, otherwise delete it."""
        query = self.get_query().where(self.id_column, self._primary_key("destroy"))
        if self.config.soft_delete:
            now = datetime.now()
            await query.update({self.deleted_at_column: now})
            self._props[self.deleted_at_column] = now
            self._original[self.deleted_at_column] = now
        else:
            await query.delete()
            self._persisted = False

    def reset(self) -> None:
        """Revert to the last loaded or saved values."""
        self._set_props(copy.deepcopy(self._original))

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    async def pull_related(self, name: str) -> Any:
        """Fetch one relationship for this instance and return its value."""
        cls = type(self)
        descriptor = describe_relationship(cls, name)
        batch = await fetch_related(descriptor, [self])
        self._relationships[name] = batch
        assign_batch(cls, descriptor, [self], batch)
        return self._related.get(name)

    async def load(self: RecordType, *paths: str) -> RecordType:
        await load_related(type(self), [self], paths)
        return self

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self, ignored: Optional["RecordBase"] = None) -> Dict[str, Any]:
        """
        Columns plus loaded relationships.

        ``ignored`` is left out of relationship output; nested records are
        serialized with this record as their ``ignored``, so a back-reference
        never leads back to its owner.
        """
        data: Dict[str, Any] = {}
        for name in self.relationship_map:
            value = self._related.get(name)
            if value is None or value is ignored:
                continue
            if isinstance(value, list):
                data[name] = [record.to_dict(self) for record in value if record is not ignored]
            else:
                data[name] = value.to_dict(self)
        data.update(self._props)
        return data

    def to_json(self) -> str:
        return to_json(self.to_dict()).decode()


def Model(schema: SchemaInput, **options: Any) -> Type[RecordBase]:
    """
    Create a model base class for ``schema``.

    Options are those of ModelConfig: ``table_name``, ``id_column``,
    ``model_name``, ``deleted_at_column``, ``timestamps``,
    ``created_at_column``, ``updated_at_column``, ``validate_on_init``,
    ``underscored`` and ``columns``.
    """
    if not isinstance(schema, Schema):
        schema = Schema(schema)
    config = ModelConfig(**options)
    return type(
        config.model_name or "Model",
        (RecordBase,),
        {"schema": schema, "config": config, "__module__": __name__},
    )
