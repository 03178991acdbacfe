# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Tests for DDL generation from registered models.
"""

from __future__ import annotations

import pytest

from kuzurecord import Model, Registry, Schema


def _hospital_models():
    class Hospital(Model(Schema({
        "name": {"type": "String"},
        "doctors": {"type": "Models"},
    }))):
        pass

    class Doctor(Model(Schema({
        "name": {"type": "String"},
        "hospital": {"type": "Model"},
        "patients": {"type": "Models", "through": True},
    }))):
        pass

    class Patient(Model(Schema({
        "name": {"type": "String"},
        "doctors": {"type": "Models", "through": True},
    }))):
        pass

    return Hospital, Doctor, Patient


class TestGeneratedDDL:
    """Textual DDL assertions."""

    def test_relationship_columns_and_join_table(self):
        registry = Registry(models=_hospital_models())
        assert registry.generate_ddl() == [
            "CREATE NODE TABLE IF NOT EXISTS Hospitals(id SERIAL, name STRING, PRIMARY KEY(id))",
            "CREATE NODE TABLE IF NOT EXISTS Doctors(id SERIAL, name STRING, hospitalId INT64, PRIMARY KEY(id))",
            "CREATE NODE TABLE IF NOT EXISTS Patients(id SERIAL, name STRING, PRIMARY KEY(id))",
            "CREATE NODE TABLE IF NOT EXISTS DoctorPatients(id SERIAL, doctorId INT64, patientId INT64, PRIMARY KEY(id))",
        ]

    def test_scalar_column_types(self):
        class Sample(Model(Schema({
            "title": {"type": "String"},
            "score": {"type": "Number"},
            "visits": {"type": "Number", "column_type": "INT64"},
            "flag": {"type": "Boolean"},
            "seen": {"type": "Date"},
            "payload": {"type": "JSON"},
        }))):
            pass

        (statement,) = Registry(models=[Sample]).generate_ddl()
        assert statement == (
            "CREATE NODE TABLE IF NOT EXISTS Samples(id SERIAL, title STRING, score DOUBLE, visits INT64, "
            "flag BOOL, seen TIMESTAMP, payload STRING, PRIMARY KEY(id))"
        )

    def test_soft_delete_timestamps_and_extra_columns(self):
        class Note(Model(
            Schema({"body": {"type": "String"}}),
            deleted_at_column="deletedAt",
            timestamps=True,
            columns={"legacyRef": "STRING"},
        )):
            pass

        (statement,) = Registry(models=[Note]).generate_ddl()
        assert statement == (
            "CREATE NODE TABLE IF NOT EXISTS Notes(id SERIAL, body STRING, deletedAt TIMESTAMP, "
            "createdAt TIMESTAMP, updatedAt TIMESTAMP, legacyRef STRING, PRIMARY KEY(id))"
        )

    def test_custom_id_column(self):
        class Code(Model(Schema({"code": {"type": "String", "column_type": "STRING"}}), id_column="code")):
            pass

        class Usage(Model(Schema({"code": {"type": "Model", "local_field": "codeRef"}}))):
            pass

        statements = Registry(models=[Code, Usage]).generate_ddl()
        assert statements[0] == "CREATE NODE TABLE IF NOT EXISTS Codes(code STRING, PRIMARY KEY(code))"
        # The reference column takes the referenced key's type
        assert statements[1] == "CREATE NODE TABLE IF NOT EXISTS Usages(id SERIAL, codeRef STRING, PRIMARY KEY(id))"


class TestCreateTables:
    """DDL executed against a real database."""

    @pytest.mark.asyncio
    async def test_create_tables_is_repeatable(self, make_registry):
        registry = await make_registry(*_hospital_models())
        await registry.create_tables()

        rows = await registry.connection.execute("CALL show_tables() RETURN name")
        assert {row["name"] for row in rows} >= {"Hospitals", "Doctors", "Patients", "DoctorPatients"}
