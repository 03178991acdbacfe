# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for relationship descriptor resolution. No database is needed.
"""

from __future__ import annotations

import dataclasses

import pytest

from kuzurecord import FieldType, Model, Registry, Schema
from kuzurecord.exceptions import UnknownEntityError, UnknownRelationshipError
from kuzurecord.kuzu_relationships import find_inverse


class Parent(Model(Schema({
    "name": {"type": "String"},
    "children": {"type": "Models", "related_model": "Child"},
}))):
    pass


class Child(Model(Schema({
    "name": {"type": "String"},
    "parent": {"type": "Model"},
}))):
    pass


class Student(Model(Schema({
    "name": {"type": "String"},
    "courses": {"type": "Models", "through": True},
}))):
    pass


class Course(Model(Schema({
    "title": {"type": "String"},
    "students": {"type": "Models", "through": True},
}))):
    pass


@pytest.fixture
def registry() -> Registry:
    return Registry(models=[Parent, Child, Student, Course])


class TestModelNaming:
    """Class-level names derived at definition time."""

    def test_names(self):
        assert Parent.model_name == "Parent"
        assert Parent.table_name == "Parents"
        assert Child.table_name == "Children"
        assert Parent.id_column == "id"

    def test_explicit_options(self):
        class Thing(Model(Schema({"label": {"type": "String"}}), table_name="things", id_column="thingId")):
            pass

        assert Thing.table_name == "things"
        assert Thing.id_column == "thingId"

    def test_relationship_map(self):
        assert set(Parent.relationship_map) == {"children"}
        assert Parent.relationship_map["children"]["type"] is FieldType.MODELS


class TestDescriptorResolution:
    """Column inference for each relationship shape."""

    def test_has_many(self, registry: Registry):
        descriptor = Parent.describe_relationship("children")
        assert descriptor.related_model is Child
        assert descriptor.local_field == "id"
        assert descriptor.foreign_field == "parentId"
        assert descriptor.many
        assert descriptor.through is None

    def test_belongs_to(self, registry: Registry):
        descriptor = Child.describe_relationship("parent")
        assert descriptor.related_model is Parent
        assert descriptor.local_field == "parentId"
        assert descriptor.foreign_field == "id"
        assert not descriptor.many

    def test_many_to_many(self, registry: Registry):
        descriptor = Student.describe_relationship("courses")
        assert descriptor.through == "CourseStudents"
        assert descriptor.through_local_field == "studentId"
        assert descriptor.through_foreign_field == "courseId"
        assert Course.describe_relationship("students").through == "CourseStudents"

    def test_explicit_join_table(self):
        class Tag(Model(Schema({"label": {"type": "String"}}))):
            pass

        class Post(Model(Schema({"tags": {"type": "Models", "through": "PostTagLinks"}}))):
            pass

        Registry(models=[Tag, Post])
        descriptor = Post.describe_relationship("tags")
        assert descriptor.through == "PostTagLinks"
        assert descriptor.through_local_field == "postId"
        assert descriptor.through_foreign_field == "tagId"

    def test_explicit_columns(self):
        class Owner(Model(Schema({"pets": {"type": "Models", "related_model": "Pet", "foreign_field": "keeper"}}))):
            pass

        class Pet(Model(Schema({"keeper": {"type": "Number"}}))):
            pass

        Registry(models=[Owner, Pet])
        descriptor = Owner.describe_relationship("pets")
        assert descriptor.foreign_field == "keeper"
        assert descriptor.local_field == "id"

    def test_underscored_convention(self):
        class Author(Model(Schema({"books": {"type": "Models"}}), underscored=True)):
            pass

        class Book(Model(Schema({"title": {"type": "String"}}))):
            pass

        Registry(models=[Author, Book])
        assert Author.describe_relationship("books").foreign_field == "author_id"
        assert Author.created_at_column == "created_at"

    def test_related_model_as_class(self, registry: Registry):
        class Guardian(Model(Schema({"wards": {"type": "Models", "related_model": Child}}))):
            pass

        registry.load(Guardian)
        assert Guardian.describe_relationship("wards").related_model is Child

    def test_recomputation_is_idempotent(self, registry: Registry):
        assert Parent.describe_relationship("children") == Parent.describe_relationship("children")

    def test_descriptor_is_immutable(self, registry: Registry):
        descriptor = Parent.describe_relationship("children")
        with pytest.raises(dataclasses.FrozenInstanceError):
            descriptor.local_field = "other"


class TestResolutionErrors:
    """Unknown relationships and unregistered entities."""

    def test_unknown_relationship(self, registry: Registry):
        with pytest.raises(UnknownRelationshipError) as exc_info:
            Parent.describe_relationship("pets")
        assert exc_info.value.name == "pets"
        assert "No such relationship pets on Parent" in str(exc_info.value)

    def test_unregistered_entity(self):
        Registry(models=[Parent])
        with pytest.raises(UnknownEntityError):
            Parent.describe_relationship("children")

    def test_model_without_registry(self):
        class Loner(Model(Schema({"friends": {"type": "Models"}}))):
            pass

        with pytest.raises(UnknownEntityError):
            Loner.describe_relationship("friends")

    def test_cross_registry_class_reference(self, registry: Registry):
        class Outsider(Model(Schema({"name": {"type": "String"}}))):
            pass

        Registry(models=[Outsider])

        class Visitor(Model(Schema({"host": {"type": "Model", "related_model": Outsider}}))):
            pass

        registry.load(Visitor)
        with pytest.raises(UnknownEntityError):
            Visitor.describe_relationship("host")

    def test_registry_get_unknown(self, registry: Registry):
        with pytest.raises(UnknownEntityError):
            registry.get("Nurse")


class TestInverseLookup:
    """Mirror-image descriptor lookup."""

    def test_has_many_inverse(self, registry: Registry):
        inverse = find_inverse(Parent.describe_relationship("children"), Parent)
        assert inverse is not None
        assert inverse.name == "parent"

    def test_belongs_to_inverse(self, registry: Registry):
        inverse = find_inverse(Child.describe_relationship("parent"), Child)
        assert inverse is not None
        assert inverse.name == "children"

    def test_many_to_many_inverse(self, registry: Registry):
        inverse = find_inverse(Student.describe_relationship("courses"), Student)
        assert inverse is not None
        assert inverse.name == "students"

    def test_no_inverse_declared(self):
        class Shelf(Model(Schema({"books": {"type": "Models", "related_model": "Volume"}}))):
            pass

        class Volume(Model(Schema({"title": {"type": "String"}}))):
            pass

        Registry(models=[Shelf, Volume])
        assert find_inverse(Shelf.describe_relationship("books"), Shelf) is None
