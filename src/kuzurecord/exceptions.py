# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Exception hierarchy for KuzuRecord.
"""

from __future__ import annotations

from typing import Any, List, Optional


class KuzuRecordError(Exception):
    """Base class for every error raised by KuzuRecord."""


class SchemaDefinitionError(KuzuRecordError):
    """A schema could not be constructed from its field definitions."""


class MissingTypeError(SchemaDefinitionError):
    """A field was declared without a type."""


class UnknownTypeError(SchemaDefinitionError):
    """A field declared a type outside of FieldType."""


class ValidationError(KuzuRecordError):
    """
    A record failed schema validation.

    ``errors`` holds the validator's issues in the order they were reported.
    """

    def __init__(self, errors: List[Any], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or f"{len(self.errors)} validation error(s)")

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def __getitem__(self, index: int) -> Any:
        return self.errors[index]


class UnknownRelationshipError(KuzuRecordError, LookupError):
    """A relationship name was requested that the model does not declare."""

    def __init__(self, model_name: str, name: str, message: str):
        self.model_name = model_name
        self.name = name
        super().__init__(message)


class UnknownEntityError(KuzuRecordError, LookupError):
    """A model name could not be resolved through the registry."""

    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(message)


class UnsupportedOperationError(KuzuRecordError):
    """The operation is not available for this model's configuration."""


class QueryError(KuzuRecordError):
    """A query could not be built from the requested clauses."""


class ConnectionNotConfiguredError(KuzuRecordError):
    """A model or registry was used before a connection was bound."""
