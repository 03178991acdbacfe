# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for inflection and the table/column naming conventions.
"""

from __future__ import annotations

import pytest

from kuzurecord.inflection import (
    guess_column_name,
    guess_model_name,
    guess_table_name,
    guess_table_name_for_model,
    pluralize,
    singularize,
)


class TestPluralization:
    """Pluralize and singularize."""

    @pytest.mark.parametrize("singular,plural", [
        ("Doctor", "Doctors"),
        ("Patient", "Patients"),
        ("Hospital", "Hospitals"),
        ("Child", "Children"),
        ("Person", "People"),
        ("Category", "Categories"),
        ("Class", "Classes"),
        ("Box", "Boxes"),
        ("Leaf", "Leaves"),
        ("Day", "Days"),
        ("StudentCourse", "StudentCourses"),
        ("DoctorPatient", "DoctorPatients"),
    ])
    def test_round_trip(self, singular: str, plural: str):
        assert pluralize(singular) == plural
        assert singularize(plural) == singular

    def test_uncountable_words_unchanged(self):
        assert pluralize("Sheep") == "Sheep"
        assert singularize("series") == "series"

    def test_singularize_is_idempotent(self):
        assert singularize("Doctor") == "Doctor"
        assert singularize(singularize("Parents")) == "Parent"
        assert singularize("Status") == "Status"

    def test_empty_string(self):
        assert pluralize("") == ""
        assert singularize("") == ""


class TestNamingConventions:
    """Column and table name guessing."""

    def test_guess_column_name(self):
        assert guess_column_name("Parents", "id") == "parentId"
        assert guess_column_name("Hospitals", "id") == "hospitalId"
        assert guess_column_name("Doctors", "uuid") == "doctorUuid"

    def test_guess_column_name_schema_qualified(self):
        assert guess_column_name("main.Parents", "id") == "parentId"

    def test_guess_column_name_underscored(self):
        assert guess_column_name("Parents", "id", underscored=True) == "parent_id"

    def test_timestamp_column_names(self):
        assert guess_column_name("created", "at") == "createdAt"
        assert guess_column_name("updated", "at", underscored=True) == "updated_at"

    def test_guess_table_name_is_order_independent(self):
        assert guess_table_name("Doctors", "Patients") == "DoctorPatients"
        assert guess_table_name("Patients", "Doctors") == "DoctorPatients"
        assert guess_table_name("Students", "Courses") == "CourseStudents"

    def test_guess_model_name(self):
        assert guess_model_name("doctors") == "Doctor"
        assert guess_model_name("parent") == "Parent"
        assert guess_model_name("children") == "Child"

    def test_guess_table_name_for_model(self):
        assert guess_table_name_for_model("Doctor") == "Doctors"
        assert guess_table_name_for_model("Person") == "People"
