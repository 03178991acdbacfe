# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Relationship descriptors.

A descriptor is the fully resolved form of a ``Model``/``Models`` schema field:
the related class, the join columns on both sides and, for many-to-many
relationships, the join table and its two key columns. Unset columns follow the
naming conventions of ``kuzurecord.inflection``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Type

from .constants import ErrorMessages, FieldOption, FieldType
from .exceptions import UnknownEntityError, UnknownRelationshipError
from .inflection import guess_model_name

if TYPE_CHECKING:
    from .kuzu_orm import RecordBase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelationshipDescriptor:
    """
    Resolved relationship between two model classes.

    :class: RelationshipDescriptor
    :synopsis: Join columns and cardinality of one relationship field
    """
    name: str
    related_model: Type["RecordBase"]
    local_field: str
    foreign_field: str
    cardinality: FieldType
    through: Optional[str] = None
    through_local_field: Optional[str] = None
    through_foreign_field: Optional[str] = None

    @property
    def many(self) -> bool:
        return self.cardinality is FieldType.MODELS

    def mirrors(self, other: "RelationshipDescriptor") -> bool:
        """True when ``other`` walks the same join in the opposite direction."""
        if self.through or other.through:
            return (
                self.through == other.through
                and self.through_local_field == other.through_foreign_field
                and self.through_foreign_field == other.through_local_field
            )
        return self.local_field == other.foreign_field and self.foreign_field == other.local_field


def resolve_model(model: Type["RecordBase"], related: Any) -> Type["RecordBase"]:
    """Look ``related`` (a model name or class) up in ``model``'s registry."""
    registry = getattr(model, "registry", None)
    if registry is None:
        raise UnknownEntityError(
            getattr(related, "model_name", str(related)),
            ErrorMessages.NO_REGISTRY.format(model_name=model.model_name),
        )

    if isinstance(related, str):
        return registry.get(related)

    name = getattr(related, "model_name", None) or related.__name__
    if registry.models.get(name) is not related:
        raise UnknownEntityError(name, ErrorMessages.CROSS_REGISTRY.format(name=name, model_name=model.model_name))
    return related


def describe_relationship(model: Type["RecordBase"], name: str) -> RelationshipDescriptor:
    """
    Resolve the relationship field ``name`` declared on ``model``.

    Raises:
        UnknownRelationshipError: ``name`` is not a relationship field of ``model``
        UnknownEntityError: the related model is not in ``model``'s registry
    """
    definition = model.relationship_map.get(name)
    if definition is None:
        raise UnknownRelationshipError(
            model.model_name, name, ErrorMessages.UNKNOWN_RELATIONSHIP.format(name=name, model_name=model.model_name)
        )

    related = resolve_model(model, definition.get(FieldOption.RELATED_MODEL) or guess_model_name(name))
    cardinality = definition[FieldOption.TYPE]
    many = cardinality is FieldType.MODELS

    if many:
        local_field = definition.get(FieldOption.LOCAL_FIELD) or model.id_column
        foreign_field = definition.get(FieldOption.FOREIGN_FIELD) or model.guess_column_name(
            model.table_name, model.id_column
        )
    else:
        local_field = definition.get(FieldOption.LOCAL_FIELD) or model.guess_column_name(
            related.table_name, related.id_column
        )
        foreign_field = definition.get(FieldOption.FOREIGN_FIELD) or related.id_column

    through = definition.get(FieldOption.THROUGH)
    through_local_field = None
    through_foreign_field = None
    if through:
        if not isinstance(through, str):
            through = model.guess_table_name(model.table_name, related.table_name)
        through_local_field = definition.get(FieldOption.THROUGH_LOCAL_FIELD) or model.guess_column_name(
            model.table_name, model.id_column
        )
        through_foreign_field = definition.get(FieldOption.THROUGH_FOREIGN_FIELD) or model.guess_column_name(
            related.table_name, related.id_column
        )

    return RelationshipDescriptor(
        name=name,
        related_model=related,
        local_field=local_field,
        foreign_field=foreign_field,
        cardinality=cardinality,
        through=through,
        through_local_field=through_local_field,
        through_foreign_field=through_foreign_field,
    )


def find_inverse(descriptor: RelationshipDescriptor, model: Type["RecordBase"]) -> Optional[RelationshipDescriptor]:
    """
    The relationship on ``descriptor.related_model`` pointing back at ``model``
    over the same columns, if one is declared.
    """
    related = descriptor.related_model
    inverse = None
    for name in related.relationship_map:
        try:
            candidate = describe_relationship(related, name)
        except UnknownEntityError:
            continue
        if candidate.related_model is model and candidate.mirrors(descriptor):
            inverse = candidate
    if inverse is not None:
        logger.debug("Relationship %s.%s mirrors %s.%s", model.model_name, descriptor.name, related.model_name, inverse.name)
    return inverse
