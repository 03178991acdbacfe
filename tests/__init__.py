# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Test suite for KuzuRecord.

This package contains tests for all components of KuzuRecord:
- Unit tests for schemas, naming conventions and Cypher generation
- Integration tests for models and relationship loading on a real Kuzu database
"""
