# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Schema declarations, JSON-Schema emission and pydantic-backed validation.

A Schema maps field names to definitions::

    Schema({
        "name": {"type": FieldType.STRING, "required": True, "max_length": 80},
        "doctors": {"type": FieldType.MODELS},
    })

Fields typed ``Model``/``Models`` declare relationships. They are documented in
the "with refs" JSON-Schema form but never validated as part of a record.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import cached_property
from typing import Annotated, Any, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Type, Union

from pydantic import BaseModel, ConfigDict, Field, create_model
from pydantic import ValidationError as PydanticValidationError

from .constants import (
    ErrorMessages,
    FieldOption,
    FieldType,
    JsonSchemaConstants,
    RELATIONSHIP_TYPES,
)
from .exceptions import MissingTypeError, SchemaDefinitionError, UnknownTypeError
from .inflection import guess_model_name

logger = logging.getLogger(__name__)

FieldDefinition = Dict[str, Any]
SchemaInput = Union["Schema", Mapping[str, Optional[Mapping[str, Any]]]]


# -----------------------------------------------------------------------------
# Validation results
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationIssue:
    """
    One field-level validation failure.

    :class: ValidationIssue
    :synopsis: keyword / instance path / message record reported by the validator
    """
    keyword: str
    instance_path: str
    message: str

    @property
    def data_path(self) -> str:
        return self.instance_path


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[ValidationIssue] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class JsonSchemaForms:
    """The documentation form (with relationship refs) and the validation form (without)."""
    with_refs: Dict[str, Any]
    without_refs: Dict[str, Any]


# -----------------------------------------------------------------------------
# Field helpers
# -----------------------------------------------------------------------------

def _coerce_field_type(field_name: str, declared: Any) -> FieldType:
    if declared is None:
        raise MissingTypeError(ErrorMessages.MISSING_TYPE.format(field_name=field_name))
    if isinstance(declared, FieldType):
        return declared
    try:
        return FieldType(declared)
    except ValueError as e:
        raise UnknownTypeError(
            ErrorMessages.UNKNOWN_TYPE.format(type_name=declared, field_name=field_name)
        ) from e


def _drop_none(mapping: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in mapping.items() if value is not None}


def _related_model_name(definition: FieldDefinition, field_name: str) -> str:
    related = definition.get(FieldOption.RELATED_MODEL)
    if related is None:
        return guess_model_name(field_name)
    if isinstance(related, str):
        return related
    return getattr(related, "model_name", None) or related.__name__


def _property_schema(field_name: str, definition: FieldDefinition) -> Dict[str, Any]:
    """JSON-Schema for one field, mirroring the declared constraints."""
    field_type = definition[FieldOption.TYPE]
    J = JsonSchemaConstants

    if field_type is FieldType.STRING:
        pattern = definition.get(FieldOption.PATTERN)
        return _drop_none({
            J.TYPE: J.STRING,
            J.MAX_LENGTH: definition.get(FieldOption.MAX_LENGTH),
            J.MIN_LENGTH: definition.get(FieldOption.MIN_LENGTH),
            J.PATTERN: str(pattern) if pattern is not None else None,
            J.FORMAT: definition.get(FieldOption.FORMAT),
            J.ENUM: list(definition[FieldOption.ENUM]) if definition.get(FieldOption.ENUM) else None,
        })
    if field_type is FieldType.NUMBER:
        return _drop_none({
            J.TYPE: J.NUMBER,
            J.MULTIPLE_OF: definition.get(FieldOption.MULTIPLE_OF),
            J.MINIMUM: definition.get(FieldOption.MINIMUM),
            J.MAXIMUM: definition.get(FieldOption.MAXIMUM),
            J.EXCLUSIVE_MINIMUM: definition.get(FieldOption.EXCLUSIVE_MINIMUM),
            J.EXCLUSIVE_MAXIMUM: definition.get(FieldOption.EXCLUSIVE_MAXIMUM),
        })
    if field_type is FieldType.BOOLEAN:
        return {J.TYPE: J.BOOLEAN}
    if field_type is FieldType.DATE:
        return {J.TYPE: J.STRING, J.FORMAT: J.DATE_TIME}
    if field_type is FieldType.JSON:
        return {}

    ref = {J.REF: f"{J.DEFINITIONS_PREFIX}{_related_model_name(definition, field_name)}"}
    if field_type is FieldType.MODEL:
        return ref
    return {J.TYPE: J.ARRAY, J.ITEMS: ref}


def _field_annotation(definition: FieldDefinition) -> Any:
    """pydantic annotation enforcing a scalar field's type and constraints."""
    field_type = definition[FieldOption.TYPE]

    if field_type is FieldType.STRING:
        allowed = definition.get(FieldOption.ENUM)
        if allowed:
            return Literal[tuple(allowed)]
        return Annotated[str, Field(
            max_length=definition.get(FieldOption.MAX_LENGTH),
            min_length=definition.get(FieldOption.MIN_LENGTH),
            pattern=definition.get(FieldOption.PATTERN),
        )]
    if field_type is FieldType.NUMBER:
        return Annotated[float, Field(
            ge=definition.get(FieldOption.MINIMUM),
            le=definition.get(FieldOption.MAXIMUM),
            gt=definition.get(FieldOption.EXCLUSIVE_MINIMUM),
            lt=definition.get(FieldOption.EXCLUSIVE_MAXIMUM),
            multiple_of=definition.get(FieldOption.MULTIPLE_OF),
        )]
    if field_type is FieldType.BOOLEAN:
        return bool
    if field_type is FieldType.DATE:
        return datetime
    return Any


def _issue_from_pydantic(error: Mapping[str, Any]) -> ValidationIssue:
    path = "/".join(str(part) for part in error.get("loc", ()))
    return ValidationIssue(
        keyword=error["type"],
        instance_path=f"/{path}" if path else "",
        message=error["msg"],
    )


# -----------------------------------------------------------------------------
# Schema
# -----------------------------------------------------------------------------

class Schema:
    """
    Declared fields of an entity.

    ``Schema(definition, *bases)`` is shorthand for ``Schema.extending(definition, *bases)``.
    """

    Types = FieldType

    def __init__(self, definition: SchemaInput, *bases: Union[SchemaInput, Iterable[SchemaInput]]):
        if bases:
            definition = Schema._merge_definitions(definition, bases)
        elif isinstance(definition, Schema):
            definition = definition.fields

        if not isinstance(definition, Mapping):
            raise SchemaDefinitionError(
                ErrorMessages.INVALID_SCHEMA_DEFINITION.format(type_name=type(definition).__name__)
            )

        self._original: Dict[str, Any] = dict(definition)
        self._fields: Dict[str, FieldDefinition] = {}

        for field_name, field_definition in definition.items():
            # An explicit None marks the field as absent
            if field_definition is None:
                continue
            if not isinstance(field_definition, Mapping):
                raise SchemaDefinitionError(
                    ErrorMessages.INVALID_FIELD_DEFINITION.format(
                        field_name=field_name, type_name=type(field_definition).__name__
                    )
                )
            normalized = dict(field_definition)
            normalized[FieldOption.TYPE] = _coerce_field_type(field_name, field_definition.get(FieldOption.TYPE))
            self._fields[field_name] = normalized

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    @classmethod
    def extending(cls, definition: SchemaInput, *bases: Union[SchemaInput, Iterable[SchemaInput]]) -> "Schema":
        """
        Compose a schema from ``definition`` layered over ``bases``.

        ``bases`` are listed highest precedence first and may be given as
        separate arguments or as one list. Each may be a plain mapping or a
        Schema. For a field defined in several places, properties are overlaid
        from lowest to highest precedence. A property set to ``None`` at a
        higher level removes that property from the result.
        """
        return cls(cls._merge_definitions(definition, bases))

    @staticmethod
    def _merge_definitions(definition: SchemaInput, bases: Tuple[Any, ...]) -> Dict[str, FieldDefinition]:
        if len(bases) == 1 and isinstance(bases[0], (list, tuple)):
            bases = tuple(bases[0])

        builder: Dict[str, FieldDefinition] = {}

        def assign(layer: SchemaInput) -> None:
            if isinstance(layer, Schema):
                layer = layer.fields
            for field_name, field_definition in layer.items():
                if field_definition is None:
                    continue
                if field_name not in builder:
                    builder[field_name] = dict(field_definition)
                    continue
                merged = builder[field_name]
                for option, value in field_definition.items():
                    if value is not None:
                        merged[option] = value
                    else:
                        merged.pop(option, None)

        for base in reversed(bases):
            assign(base)
        assign(definition)
        return builder

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def fields(self) -> Dict[str, FieldDefinition]:
        """Copy of the normalized field definitions."""
        return {name: dict(definition) for name, definition in self._fields.items()}

    @property
    def original(self) -> Dict[str, Any]:
        return dict(self._original)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self._fields

    def __getitem__(self, field_name: str) -> FieldDefinition:
        return dict(self._fields[field_name])

    def field_type(self, field_name: str) -> Optional[FieldType]:
        definition = self._fields.get(field_name)
        return definition[FieldOption.TYPE] if definition else None

    def relationship_fields(self) -> Dict[str, FieldDefinition]:
        return {
            name: dict(definition)
            for name, definition in self._fields.items()
            if definition[FieldOption.TYPE] in RELATIONSHIP_TYPES
        }

    def scalar_fields(self) -> Dict[str, FieldDefinition]:
        return {
            name: dict(definition)
            for name, definition in self._fields.items()
            if definition[FieldOption.TYPE] not in RELATIONSHIP_TYPES
        }

    @property
    def json_schema(self) -> JsonSchemaForms:
        with_refs: Dict[str, Any] = {
            JsonSchemaConstants.TYPE: JsonSchemaConstants.OBJECT,
            JsonSchemaConstants.PROPERTIES: {},
            JsonSchemaConstants.REQUIRED: [],
        }
        without_refs: Dict[str, Any] = {
            JsonSchemaConstants.TYPE: JsonSchemaConstants.OBJECT,
            JsonSchemaConstants.PROPERTIES: {},
            JsonSchemaConstants.REQUIRED: [],
        }

        for field_name, definition in self._fields.items():
            property_schema = _property_schema(field_name, definition)
            property_schema.update(_drop_none({
                JsonSchemaConstants.DESCRIPTION: definition.get(FieldOption.DESCRIPTION),
                JsonSchemaConstants.DEFAULT: definition.get(FieldOption.DEFAULT),
            }))
            is_relationship = definition[FieldOption.TYPE] in RELATIONSHIP_TYPES

            with_refs[JsonSchemaConstants.PROPERTIES][field_name] = property_schema
            if definition.get(FieldOption.REQUIRED):
                with_refs[JsonSchemaConstants.REQUIRED].append(field_name)

            if not is_relationship:
                without_refs[JsonSchemaConstants.PROPERTIES][field_name] = dict(property_schema)
                if definition.get(FieldOption.REQUIRED):
                    without_refs[JsonSchemaConstants.REQUIRED].append(field_name)

        return JsonSchemaForms(with_refs=with_refs, without_refs=without_refs)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @cached_property
    def validator(self) -> Type[BaseModel]:
        """
        pydantic model enforcing the scalar fields.

        Field names are bound through aliases so that names colliding with
        pydantic's own attributes remain usable. Undeclared keys are allowed and
        optional fields accept null. Numbers are accepted for String fields
        and stored as their text.
        """
        field_specs: Dict[str, Any] = {}
        for index, (field_name, definition) in enumerate(self.scalar_fields().items()):
            annotation = _field_annotation(definition)
            if definition.get(FieldOption.REQUIRED):
                field_specs[f"field_{index}"] = (annotation, Field(alias=field_name))
            else:
                field_specs[f"field_{index}"] = (Optional[annotation], Field(default=None, alias=field_name))

        return create_model(
            "SchemaRecord",
            __config__=ConfigDict(extra="allow", arbitrary_types_allowed=True, coerce_numbers_to_str=True),
            **field_specs,
        )

    def validate(self, props: Mapping[str, Any]) -> ValidationResult:
        """Validate a property bag; relationship fields are ignored."""
        try:
            self.validator.model_validate(dict(props))
        except PydanticValidationError as e:
            issues = [_issue_from_pydantic(error) for error in e.errors()]
            logger.debug("Schema validation reported %d issue(s)", len(issues))
            return ValidationResult(valid=False, errors=issues)
        return ValidationResult(valid=True)

    # ------------------------------------------------------------------
    # Storage casting
    # ------------------------------------------------------------------

    def to_storage(self, props: Mapping[str, Any]) -> Dict[str, Any]:
        """Encode JSON fields as strings, numbers in String fields as text and ISO date strings as datetimes."""
        stored = dict(props)
        for field_name, definition in self._fields.items():
            value = stored.get(field_name)
            if value is None:
                continue
            if definition[FieldOption.TYPE] is FieldType.JSON:
                stored[field_name] = json.dumps(value)
            elif (
                definition[FieldOption.TYPE] is FieldType.STRING
                and isinstance(value, (int, float))
                and not isinstance(value, bool)
            ):
                stored[field_name] = str(value)
            elif definition[FieldOption.TYPE] is FieldType.DATE and isinstance(value, str):
                stored[field_name] = datetime.fromisoformat(value)
        return stored

    def from_storage(self, row: Mapping[str, Any]) -> Dict[str, Any]:
        """Decode JSON fields read back from the storage engine."""
        loaded = dict(row)
        for field_name, definition in self._fields.items():
            value = loaded.get(field_name)
            if definition[FieldOption.TYPE] is FieldType.JSON and isinstance(value, str):
                loaded[field_name] = json.loads(value)
        return loaded

    def __repr__(self) -> str:
        return f"Schema({', '.join(f'{name}:{d[FieldOption.TYPE]}' for name, d in self._fields.items())})"
