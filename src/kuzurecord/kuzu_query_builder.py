# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Query state management and Cypher query builder for table queries.

Every table is a Kuzu node table. The main table is matched under alias ``n``,
and joined tables under ``j0``, ``j1``, ... Column references are either bare
(``"name"``, resolved against the main table) or table-qualified
(``"DoctorPatients.doctorId"``).
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .constants import (
    COMPARISON_OPERATORS,
    CypherConstants,
    ErrorMessages,
    QueryOperation,
)
from .exceptions import QueryError

logger = logging.getLogger(__name__)

ColumnResolver = Callable[[str], str]
ParameterBinder = Callable[[Any], str]


# -----------------------------------------------------------------------------
# Predicates
# -----------------------------------------------------------------------------

@dataclass
class Comparison:
    """``column <operator> value``; equality against None renders as IS NULL."""
    column: str
    operator: str
    value: Any

    def to_cypher(self, resolve: ColumnResolver, bind: ParameterBinder) -> str:
        target = resolve(self.column)
        if self.value is None and self.operator in ("=", "<>"):
            check = CypherConstants.IS_NULL if self.operator == "=" else CypherConstants.IS_NOT_NULL
            return f"{target} {check}"
        return f"{target} {self.operator} {bind(self.value)}"


@dataclass
class Membership:
    """``column IN [...]``."""
    column: str
    values: List[Any]
    negated: bool = False

    def to_cypher(self, resolve: ColumnResolver, bind: ParameterBinder) -> str:
        rendered = f"{resolve(self.column)} {CypherConstants.IN} {bind(list(self.values))}"
        if self.negated:
            return f"{CypherConstants.NOT} ({rendered})"
        return rendered


@dataclass
class NullCheck:
    column: str
    negated: bool = False

    def to_cypher(self, resolve: ColumnResolver, bind: ParameterBinder) -> str:
        _ = bind  # Mark as intentionally unused
        check = CypherConstants.IS_NOT_NULL if self.negated else CypherConstants.IS_NULL
        return f"{resolve(self.column)} {check}"


@dataclass
class ColumnEquality:
    """Equality between two column references (join conditions)."""
    left: str
    right: str

    def to_cypher(self, resolve: ColumnResolver, bind: ParameterBinder) -> str:
        _ = bind  # Mark as intentionally unused
        return f"{resolve(self.left)} = {resolve(self.right)}"


# (boolean joining the predicate to the previous one, predicate)
Clause = Tuple[str, Any]


def render_clauses(clauses: Sequence[Clause], resolve: ColumnResolver, bind: ParameterBinder) -> str:
    rendered = ""
    for index, (boolean, predicate) in enumerate(clauses):
        text = predicate.to_cypher(resolve, bind)
        if isinstance(predicate, PredicateGroup) and len(predicate.clauses) > 1:
            text = f"({text})"
        rendered = text if index == 0 else f"{rendered} {boolean} {text}"
    return rendered


class WhereBuilder:
    """
    Chainable where-clause collector shared by table queries and nested groups.

    ``where`` accepts a mapping of equalities, ``(column, value)``,
    ``(column, operator, value)`` or a callable receiving a nested group.
    """

    def __init__(self) -> None:
        self._clauses: List[Clause] = []

    @property
    def clauses(self) -> List[Clause]:
        return self._clauses

    def _add(self, boolean: str, predicate: Any) -> "WhereBuilder":
        self._clauses.append((boolean, predicate))
        return self

    def _predicates_from_args(self, args: Tuple[Any, ...]) -> List[Any]:
        if len(args) == 1:
            argument = args[0]
            if callable(argument):
                group = PredicateGroup()
                argument(group)
                return [group]
            if isinstance(argument, Mapping):
                return [Comparison(column, "=", value) for column, value in argument.items()]
        elif len(args) == 2:
            return [Comparison(args[0], "=", args[1])]
        elif len(args) == 3:
            operator = COMPARISON_OPERATORS.get(str(args[1]).lower())
            if operator is None:
                raise QueryError(ErrorMessages.UNKNOWN_OPERATOR.format(operator=args[1]))
            return [Comparison(args[0], operator, args[2])]
        raise QueryError(ErrorMessages.INVALID_WHERE.format(arguments=args))

    def where(self, *args: Any) -> "WhereBuilder":
        for predicate in self._predicates_from_args(args):
            self._add(CypherConstants.AND, predicate)
        return self

    def or_where(self, *args: Any) -> "WhereBuilder":
        predicates = self._predicates_from_args(args)
        if len(predicates) > 1:
            # A mapping ORed onto the query stays a conjunction of its own
            group = PredicateGroup()
            for predicate in predicates:
                group._add(CypherConstants.AND, predicate)
            predicates = [group]
        for predicate in predicates:
            self._add(CypherConstants.OR, predicate)
        return self

    def where_in(self, column: str, values: Sequence[Any]) -> "WhereBuilder":
        return self._add(CypherConstants.AND, Membership(column, list(values)))

    def where_not_in(self, column: str, values: Sequence[Any]) -> "WhereBuilder":
        return self._add(CypherConstants.AND, Membership(column, list(values), negated=True))

    def where_null(self, column: str) -> "WhereBuilder":
        return self._add(CypherConstants.AND, NullCheck(column))

    def where_not_null(self, column: str) -> "WhereBuilder":
        return self._add(CypherConstants.AND, NullCheck(column, negated=True))


class PredicateGroup(WhereBuilder):
    """Parenthesized group of predicates produced by ``where(callable)``."""

    def to_cypher(self, resolve: ColumnResolver, bind: ParameterBinder) -> str:
        return render_clauses(self._clauses, resolve, bind)


# -----------------------------------------------------------------------------
# Query state
# -----------------------------------------------------------------------------

@dataclass
class JoinClause:
    """Inner join of another node table on column equality."""
    table: str
    left: str
    right: str
    alias: str = ""


@dataclass
class QueryState:
    """State for query building."""
    table: str
    select_fields: List[str] = field(default_factory=lambda: [CypherConstants.STAR])
    joins: List[JoinClause] = field(default_factory=list)
    # Always ANDed ahead of the filters, never joined to them by OR
    scopes: List[Any] = field(default_factory=list)
    filters: List[Clause] = field(default_factory=list)
    order_by: List[Tuple[str, str]] = field(default_factory=list)
    limit_value: Optional[int] = None
    offset_value: Optional[int] = None

    def copy(self) -> QueryState:
        return copy.deepcopy(self)


def _split_alias(expression: str) -> Tuple[str, Optional[str]]:
    lowered = expression.lower()
    marker = f" {CypherConstants.AS.lower()} "
    position = lowered.rfind(marker)
    if position == -1:
        return expression.strip(), None
    return expression[:position].strip(), expression[position + len(marker):].strip()


class CypherQueryBuilder:
    """Builds Cypher statements from a QueryState."""

    def __init__(self, state: QueryState):
        self.state = state
        self.alias_map: Dict[str, str] = {state.table: CypherConstants.MAIN_ALIAS}
        self.parameters: Dict[str, Any] = {}
        for index, join in enumerate(state.joins):
            join.alias = f"{CypherConstants.JOIN_ALIAS_PREFIX}{index}"
            self.alias_map[join.table] = join.alias

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def resolve_column(self, column: str) -> str:
        if "." in column:
            table, name = column.rsplit(".", 1)
            alias = self.alias_map.get(table)
            if alias is None:
                raise QueryError(ErrorMessages.UNKNOWN_TABLE_REFERENCE.format(column=column, table=table))
            return f"{alias}.{name}"
        return f"{CypherConstants.MAIN_ALIAS}.{column}"

    def bind_parameter(self, value: Any) -> str:
        name = f"{CypherConstants.PARAMETER_PREFIX}{len(self.parameters)}"
        self.parameters[name] = value
        return f"${name}"

    def _match_clause(self) -> str:
        patterns = [f"({CypherConstants.MAIN_ALIAS}:{self.state.table})"]
        patterns.extend(f"({join.alias}:{join.table})" for join in self.state.joins)
        return f"{CypherConstants.MATCH} {', '.join(patterns)}"

    def _where_clause(self) -> Optional[str]:
        clauses: List[Clause] = [
            (CypherConstants.AND, ColumnEquality(join.left, join.right)) for join in self.state.joins
        ]
        clauses.extend((CypherConstants.AND, predicate) for predicate in self.state.scopes)
        conditions = render_clauses(clauses, self.resolve_column, self.bind_parameter)
        filters = render_clauses(self.state.filters, self.resolve_column, self.bind_parameter)
        if filters and conditions:
            filters = f"{conditions} {CypherConstants.AND} ({filters})" if len(self.state.filters) > 1 else f"{conditions} {CypherConstants.AND} {filters}"
        elif conditions:
            filters = conditions
        if not filters:
            return None
        return f"{CypherConstants.WHERE} {filters}"

    def _return_clause(self) -> str:
        items: List[str] = []
        for expression in self.state.select_fields:
            column, alias = _split_alias(expression)
            if column == CypherConstants.STAR:
                items.append(CypherConstants.MAIN_ALIAS)
                continue
            resolved = self.resolve_column(column)
            items.append(f"{resolved} {CypherConstants.AS} {alias or column.rsplit('.', 1)[-1]}")
        return f"{CypherConstants.RETURN} {', '.join(items)}"

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def build_select(self) -> Tuple[str, Dict[str, Any]]:
        clauses = [self._match_clause()]
        where = self._where_clause()
        if where:
            clauses.append(where)
        clauses.append(self._return_clause())

        if self.state.order_by:
            order_items = [f"{self.resolve_column(column)} {direction}" for column, direction in self.state.order_by]
            clauses.append(f"{CypherConstants.ORDER_BY} {', '.join(order_items)}")
        # Kuzu requires SKIP before LIMIT
        if self.state.offset_value is not None:
            clauses.append(f"{CypherConstants.SKIP} {int(self.state.offset_value)}")
        if self.state.limit_value is not None:
            clauses.append(f"{CypherConstants.LIMIT} {int(self.state.limit_value)}")
        return "\n".join(clauses), self.parameters

    def build_insert(self, values: Mapping[str, Any], returning: Optional[str]) -> Tuple[str, Dict[str, Any]]:
        # Unset properties default to NULL in Kuzu
        assignments = [f"{column}: {self.bind_parameter(value)}" for column, value in values.items() if value is not None]
        pattern = f"{CypherConstants.MAIN_ALIAS}:{self.state.table}"
        if assignments:
            pattern = f"{pattern} {{{', '.join(assignments)}}}"
        clauses = [f"{CypherConstants.CREATE} ({pattern})"]
        if returning:
            clauses.append(
                f"{CypherConstants.RETURN} {self.resolve_column(returning)} {CypherConstants.AS} {CypherConstants.RETURN_ID_ALIAS}"
            )
        return "\n".join(clauses), self.parameters

    def build_update(self, values: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        if not values:
            raise QueryError(ErrorMessages.EMPTY_UPDATE)
        clauses = [self._match_clause()]
        where = self._where_clause()
        if where:
            clauses.append(where)
        assignments = []
        for column, value in values.items():
            rendered = CypherConstants.NULL if value is None else self.bind_parameter(value)
            assignments.append(f"{self.resolve_column(column)} = {rendered}")
        clauses.append(f"{CypherConstants.SET} {', '.join(assignments)}")
        return "\n".join(clauses), self.parameters

    def build_delete(self) -> Tuple[str, Dict[str, Any]]:
        clauses = [self._match_clause()]
        where = self._where_clause()
        if where:
            clauses.append(where)
        clauses.append(f"{CypherConstants.DELETE} {CypherConstants.MAIN_ALIAS}")
        return "\n".join(clauses), self.parameters

    def build(
        self,
        operation: Union[QueryOperation, str] = QueryOperation.SELECT,
        values: Optional[Mapping[str, Any]] = None,
        returning: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Build the Cypher statement for ``operation``."""
        operation = QueryOperation(operation)
        if operation is QueryOperation.SELECT:
            return self.build_select()
        if operation is QueryOperation.INSERT:
            return self.build_insert(values or {}, returning)
        if operation is QueryOperation.UPDATE:
            return self.build_update(values or {})
        return self.build_delete()
