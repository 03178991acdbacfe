# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for Cypher generation by TableQuery and CypherQueryBuilder.
"""

from __future__ import annotations

import pytest

from kuzurecord import TableQuery
from kuzurecord.constants import QueryOperation
from kuzurecord.exceptions import QueryError


def _query(table: str = "Patients") -> TableQuery:
    return TableQuery(None, table)


class TestSelect:
    """MATCH / WHERE / RETURN generation."""

    def test_plain_select(self):
        cypher, params = _query().to_cypher()
        assert cypher == "MATCH (n:Patients)\nRETURN n"
        assert params == {}

    def test_mapping_where(self):
        cypher, params = _query().where({"name": "Ann", "age": 3}).to_cypher()
        assert "WHERE n.name = $p0 AND n.age = $p1" in cypher
        assert params == {"p0": "Ann", "p1": 3}

    def test_operator_where(self):
        cypher, params = _query().where("age", ">=", 18).to_cypher()
        assert "WHERE n.age >= $p0" in cypher
        assert params == {"p0": 18}

    def test_string_operator(self):
        cypher, _ = _query().where("name", "starts with", "A").to_cypher()
        assert "n.name STARTS WITH $p0" in cypher

    def test_unknown_operator(self):
        with pytest.raises(QueryError):
            _query().where("age", "~", 1)

    def test_invalid_where_arguments(self):
        with pytest.raises(QueryError):
            _query().where()

    def test_equality_with_none_is_null_check(self):
        cypher, params = _query().where("deletedAt", None).to_cypher()
        assert "WHERE n.deletedAt IS NULL" in cypher
        assert params == {}

    def test_where_in_and_not_in(self):
        cypher, params = _query().where_in("id", [1, 2]).where_not_in("age", [9]).to_cypher()
        assert "WHERE n.id IN $p0 AND NOT (n.age IN $p1)" in cypher
        assert params == {"p0": [1, 2], "p1": [9]}

    def test_null_checks(self):
        cypher, _ = _query().where_null("deletedAt").where_not_null("name").to_cypher()
        assert "n.deletedAt IS NULL AND n.name IS NOT NULL" in cypher

    def test_or_where_and_grouping(self):
        query = _query().where("age", ">", 1).where(lambda group: group.where("name", "Ann").or_where("name", "Bob"))
        cypher, params = query.to_cypher()
        assert "WHERE n.age > $p0 AND (n.name = $p1 OR n.name = $p2)" in cypher
        assert params == {"p0": 1, "p1": "Ann", "p2": "Bob"}

    def test_select_fields_and_aliases(self):
        cypher, _ = _query().select("id", "name as label").to_cypher()
        assert cypher.endswith("RETURN n.id AS id, n.name AS label")

    def test_join(self):
        query = (
            _query()
            .join("DoctorPatients", "Patients.id", "DoctorPatients.patientId")
            .select("*", "DoctorPatients.doctorId AS kr_through_key")
            .where_in("DoctorPatients.doctorId", [1, 2])
        )
        cypher, params = query.to_cypher()
        assert cypher == (
            "MATCH (n:Patients), (j0:DoctorPatients)\n"
            "WHERE n.id = j0.patientId AND j0.doctorId IN $p0\n"
            "RETURN n, j0.doctorId AS kr_through_key"
        )
        assert params == {"p0": [1, 2]}

    def test_unknown_table_reference(self):
        with pytest.raises(QueryError):
            _query().where("Doctors.id", 1).to_cypher()

    def test_order_skip_limit(self):
        cypher, _ = _query().order_by("name", "desc").offset(5).limit(10).to_cypher()
        assert cypher.endswith("ORDER BY n.name DESC\nSKIP 5\nLIMIT 10")

    def test_invalid_order_direction(self):
        with pytest.raises(QueryError):
            _query().order_by("name", "sideways")

    def test_scope_stays_ahead_of_or_chain(self):
        query = _query().scope("deletedAt", None).where("name", "Ann").or_where("name", "Bo")
        cypher, params = query.to_cypher()
        assert "WHERE n.deletedAt IS NULL AND (n.name = $p0 OR n.name = $p1)" in cypher
        assert params == {"p0": "Ann", "p1": "Bo"}

    def test_scope_with_single_filter(self):
        cypher, _ = _query().scope("deletedAt", None).where("name", "Ann").to_cypher()
        assert "WHERE n.deletedAt IS NULL AND n.name = $p0" in cypher

    def test_scope_alone(self):
        cypher, _ = _query().scope("deletedAt", None).to_cypher()
        assert cypher == "MATCH (n:Patients)\nWHERE n.deletedAt IS NULL\nRETURN n"

    def test_to_cypher_does_not_consume_state(self):
        query = _query().where("name", "Ann")
        assert query.to_cypher() == query.to_cypher()


class TestWrites:
    """CREATE / SET / DELETE generation."""

    def test_insert(self):
        cypher, params = _query().to_cypher(QueryOperation.INSERT, values={"name": "Ann", "age": None}, returning="id")
        assert cypher == "CREATE (n:Patients {name: $p0})\nRETURN n.id AS kr_generated_id"
        assert params == {"p0": "Ann"}

    def test_insert_without_properties(self):
        cypher, _ = _query().to_cypher(QueryOperation.INSERT, values={}, returning="id")
        assert cypher.startswith("CREATE (n:Patients)\n")

    def test_update(self):
        cypher, params = _query().where("id", 4).to_cypher(QueryOperation.UPDATE, values={"name": "Bo", "deletedAt": None})
        assert cypher == "MATCH (n:Patients)\nWHERE n.id = $p0\nSET n.name = $p1, n.deletedAt = NULL"
        assert params == {"p0": 4, "p1": "Bo"}

    def test_empty_update(self):
        with pytest.raises(QueryError):
            _query().to_cypher(QueryOperation.UPDATE, values={})

    def test_delete(self):
        cypher, _ = _query().where("id", 4).to_cypher(QueryOperation.DELETE)
        assert cypher == "MATCH (n:Patients)\nWHERE n.id = $p0\nDELETE n"
