# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Batched relationship loading.

For a batch of loaded instances of one model, ``load_related`` resolves dotted
relationship paths ("doctors.patients") with one query per path segment,
whatever the size of the batch. Fetched rows are assigned to their owners, the
inverse relationship (when declared) is wired back onto the fetched rows from
the same result, and the next segment is resolved against the fetched rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence, Type

from .constants import ConventionConstants, CypherConstants, THROUGH_KEY_ALIAS
from .kuzu_relationships import RelationshipDescriptor, describe_relationship, find_inverse

if TYPE_CHECKING:
    from .kuzu_orm import RecordBase

logger = logging.getLogger(__name__)


@dataclass
class RelatedBatch:
    """
    Result of one batched fetch, shared by every instance of the batch.

    ``grouped`` maps a local key value to the matching related instance
    (cardinality one) or the ordered list of matching instances (many).
    """
    rows: List["RecordBase"] = field(default_factory=list)
    grouped: Dict[Any, Any] = field(default_factory=dict)


def split_path(path: str) -> List[str]:
    return [segment for segment in path.split(ConventionConstants.PATH_SEPARATOR) if segment]


def validate_paths(model: Type["RecordBase"], paths: Iterable[str]) -> None:
    """Resolve every segment of every path; raises before any query is issued."""
    for path in paths:
        current = model
        for segment in split_path(path):
            current = describe_relationship(current, segment).related_model


def _distinct_values(instances: Sequence["RecordBase"], column: str) -> List[Any]:
    seen = set()
    values = []
    for instance in instances:
        value = instance.get(column)
        if value is None or value in seen:
            continue
        seen.add(value)
        values.append(value)
    return values


async def fetch_related(descriptor: RelationshipDescriptor, instances: Sequence["RecordBase"]) -> RelatedBatch:
    """Fetch the related rows of ``descriptor`` for the whole batch in one query."""
    related = descriptor.related_model
    values = _distinct_values(instances, descriptor.local_field)
    if not values:
        return RelatedBatch()

    query = related.get_query()
    if descriptor.through:
        key_column = f"{descriptor.through}.{descriptor.through_local_field}"
        query.join(
            descriptor.through,
            f"{related.table_name}.{related.id_column}",
            f"{descriptor.through}.{descriptor.through_foreign_field}",
        )
        query.select(CypherConstants.STAR, f"{key_column} {CypherConstants.AS} {THROUGH_KEY_ALIAS}")
        key_name = THROUGH_KEY_ALIAS
    else:
        key_column = descriptor.foreign_field
        key_name = descriptor.foreign_field

    if len(values) == 1:
        query.where(key_column, values[0])
    else:
        query.where_in(key_column, values)

    rows = await query
    logger.debug(
        "Fetched %d %s row(s) for %s over %d key(s)",
        len(rows), related.model_name, descriptor.name, len(values),
    )

    batch = RelatedBatch()
    for row in rows:
        if descriptor.through:
            key = row.pop(THROUGH_KEY_ALIAS)
        else:
            key = row.get(key_name)
        instance = related.from_row(row)
        batch.rows.append(instance)
        if descriptor.many:
            batch.grouped.setdefault(key, []).append(instance)
        else:
            if key in batch.grouped:
                logger.debug("Several %s rows match %s=%r; keeping the last", related.model_name, key_name, key)
            batch.grouped[key] = instance
    return batch


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def assign_batch(
    model: Type["RecordBase"],
    descriptor: RelationshipDescriptor,
    instances: Sequence["RecordBase"],
    batch: RelatedBatch,
) -> None:
    """Set the relationship on every owner and wire the inverse onto the fetched rows."""
    inverse = find_inverse(descriptor, model)

    for instance in instances:
        key = instance.get(descriptor.local_field)
        matched = batch.grouped.get(key) if key is not None else None
        if descriptor.many:
            instance._set_related(descriptor.name, list(matched) if matched else [])
        elif matched is not None:
            instance._set_related(descriptor.name, matched)

        if inverse is None:
            continue
        for row in _as_list(matched):
            if inverse.many:
                existing = row._get_related(inverse.name)
                if not isinstance(existing, list):
                    existing = []
                    row._set_related(inverse.name, existing)
                existing.append(instance)
            else:
                row._set_related(inverse.name, instance)

    if inverse is not None and batch.rows:
        _record_inverse_batch(inverse, instances, batch)


def _record_inverse_batch(
    inverse: RelationshipDescriptor,
    instances: Sequence["RecordBase"],
    batch: RelatedBatch,
) -> None:
    """Mark the wired back-references as loaded so a later path segment reuses them."""
    inverse_batch = RelatedBatch()
    wired_owners = set()
    for row in batch.rows:
        wired = _as_list(row._get_related(inverse.name))
        wired_owners.update(id(owner) for owner in wired)
        key = row.get(inverse.local_field)
        if key is None:
            continue
        if inverse.many:
            grouped = inverse_batch.grouped.setdefault(key, [])
            grouped.extend(owner for owner in wired if not any(owner is known for known in grouped))
        else:
            inverse_batch.grouped[key] = row._get_related(inverse.name)

    inverse_batch.rows = [instance for instance in instances if id(instance) in wired_owners]
    for row in batch.rows:
        row._relationships[inverse.name] = inverse_batch


def _cached_batch(instances: Sequence["RecordBase"], name: str) -> Optional[RelatedBatch]:
    first = instances[0]._relationships.get(name)
    if first is None:
        return None
    # Only a batch shared by the whole set covers every instance
    if all(instance._relationships.get(name) is first for instance in instances):
        return first
    return None


async def _load_segments(model: Type["RecordBase"], instances: Sequence["RecordBase"], segments: List[str]) -> None:
    if not instances or not segments:
        return

    name, remaining = segments[0], segments[1:]
    descriptor = describe_relationship(model, name)

    batch = _cached_batch(instances, name)
    if batch is None:
        batch = await fetch_related(descriptor, instances)
        for instance in instances:
            instance._relationships[name] = batch
        assign_batch(model, descriptor, instances, batch)
    else:
        logger.debug("Reusing loaded %s batch for %d %s instance(s)", name, len(instances), model.model_name)

    if remaining:
        await _load_segments(descriptor.related_model, batch.rows, remaining)


async def load_related(model: Type["RecordBase"], instances: Sequence["RecordBase"], paths: Iterable[str]) -> None:
    """
    Resolve ``paths`` for ``instances``, in order, one segment at a time.

    Raises:
        UnknownRelationshipError: a path names a relationship the model lacks
        UnknownEntityError: a relationship targets a model outside the registry
    """
    if isinstance(paths, str):
        paths = [paths]
    paths = list(paths)
    if not instances or not paths:
        return

    validate_paths(model, paths)
    for path in paths:
        await _load_segments(model, instances, split_path(path))
