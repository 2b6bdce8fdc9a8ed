"""Structured SQL building for the database_query tool.

Turns the loosely formatted strings a model sends (field lists, conditions,
JSON objects of values) into a parameterized SQL statement. Identifiers are
validated against a strict pattern and every value is bound as a ``?``
parameter, so nothing from the caller is spliced into the SQL text except
validated identifiers and keywords.

Condition syntax:
    - JSON object: ``{"status": "active", "deleted_at": null}`` (equality, null -> IS NULL)
    - Clauses: ``id>1, status=active, name='Smith, J.'``

Commas inside single or double quotes do not split clauses. Each clause is
split at the first operator following the column name, so a value may itself
contain operator text (``note=a>=b`` compares ``note`` with ``"a>=b"``).
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Final, List, Optional, Tuple

from toolhub.core.errors import ToolError

IDENTIFIER: Final = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")
_CLAUSE: Final = re.compile(
    r"^\s*([A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)?)\s*(>=|<=|!=|<>|=|>|<)(.*)$",
    re.DOTALL,
)
_ORDER_TERM: Final = re.compile(r"^\s*(\S+)(?:\s+(ASC|DESC))?\s*$", re.IGNORECASE)
_INTEGER: Final = re.compile(r"^[+-]?\d+$")
_FLOAT: Final = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")

OPERATIONS: Final = ("select", "count", "insert", "update", "delete")


class QueryBuildError(ToolError):
    """Raised when structured query arguments cannot be turned into SQL."""
    pass


@dataclass(frozen=True)
class Condition:
    """A single ``column <op> value`` comparison."""
    column: str
    operator: str
    value: Any


@dataclass(frozen=True)
class BuiltQuery:
    """A SQL statement with its bound parameters."""
    sql: str
    params: Tuple[Any, ...] = field(default_factory=tuple)


def validate_identifier(name: str, what: str = "identifier") -> str:
    """Return a stripped identifier or raise QueryBuildError."""
    name = (name or "").strip()
    if not IDENTIFIER.match(name):
        raise QueryBuildError(f"Invalid {what}: {name!r}")
    return name


def split_clauses(text: str) -> List[str]:
    """Split on commas that are not inside single or double quotes.

    Raises:
        QueryBuildError: If a quote is left open
    """
    parts: List[str] = []
    current: List[str] = []
    quote: Optional[str] = None
    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
        elif char in ("'", '"'):
            quote = char
            current.append(char)
        elif char == ",":
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if quote:
        raise QueryBuildError(f"Unterminated quote in: {text}")
    parts.append("".join(current))
    return [part.strip() for part in parts if part.strip()]


def parse_value(text: str) -> Any:
    """Convert a clause value: quoted -> string, numeric -> number, else raw string."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in ("'", '"'):
        return text[1:-1]
    if _INTEGER.match(text):
        return int(text)
    if _FLOAT.match(text):
        return float(text)
    return text


def _scalar(column: str, value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise QueryBuildError(f"Unsupported value for {column}: {value!r}")


def _json_object(text: str, what: str) -> Dict[str, Any]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise QueryBuildError(f"Invalid JSON in {what}: {e.msg}")
    if not isinstance(data, dict):
        raise QueryBuildError(f"{what} must be a JSON object")
    return data


def parse_conditions(text: Optional[str]) -> List[Condition]:
    """Parse a where_conditions string into conditions.

    Raises:
        QueryBuildError: If a clause is malformed
    """
    if text is None or not text.strip():
        return []
    text = text.strip()

    if text.startswith("{"):
        return [
            Condition(validate_identifier(column, "column"), "=", _scalar(column, value))
            for column, value in _json_object(text, "where_conditions").items()
        ]

    conditions = []
    for clause in split_clauses(text):
        match = _CLAUSE.match(clause)
        if not match:
            raise QueryBuildError(f"Invalid condition: {clause!r}")
        column, op, value = match.groups()
        conditions.append(Condition(column, "!=" if op == "<>" else op, parse_value(value)))
    return conditions


def parse_fields(text: Optional[str]) -> List[str]:
    """Parse a comma-separated column list; empty or ``*`` selects everything."""
    if text is None or not text.strip() or text.strip() == "*":
        return ["*"]
    return [validate_identifier(name, "field") for name in text.split(",")]


def parse_values(text: Optional[str]) -> Dict[str, Any]:
    """Parse the JSON object of column values used by insert and update."""
    if text is None or not text.strip():
        raise QueryBuildError("fields must be a JSON object of column values")
    values = _json_object(text.strip(), "fields")
    if not values:
        raise QueryBuildError("fields cannot be empty")
    return {
        validate_identifier(column, "column"): _scalar(column, value)
        for column, value in values.items()
    }


def parse_order_by(text: Optional[str]) -> str:
    """Normalize ``col [ASC|DESC], ...`` into SQL, validating column names."""
    terms = []
    for term in (text or "").split(","):
        if not term.strip():
            continue
        match = _ORDER_TERM.match(term)
        if not match:
            raise QueryBuildError(f"Invalid order_by term: {term.strip()!r}")
        column = validate_identifier(match.group(1), "order_by column")
        direction = (match.group(2) or "ASC").upper()
        terms.append(f"{column} {direction}")
    return ", ".join(terms)


def _where(conditions: List[Condition]) -> Tuple[str, Tuple[Any, ...]]:
    if not conditions:
        return "", ()
    parts = []
    params = []
    for condition in conditions:
        column = validate_identifier(condition.column, "column")
        if condition.value is None and condition.operator in ("=", "!="):
            parts.append(f"{column} IS {'NOT ' if condition.operator == '!=' else ''}NULL")
            continue
        parts.append(f"{column} {condition.operator} ?")
        params.append(condition.value)
    return " WHERE " + " AND ".join(parts), tuple(params)


def _limit(limit: Optional[float]) -> str:
    if limit is None:
        return ""
    if limit != int(limit) or limit < 1:
        raise QueryBuildError(f"limit must be a positive integer, got {limit}")
    return f" LIMIT {int(limit)}"


def build_select(
    table: str,
    fields: Optional[str] = None,
    where: Optional[str] = None,
    order_by: Optional[str] = None,
    limit: Optional[float] = None,
) -> BuiltQuery:
    table = validate_identifier(table, "table name")
    where_sql, params = _where(parse_conditions(where))
    order_sql = parse_order_by(order_by)
    sql = f"SELECT {', '.join(parse_fields(fields))} FROM {table}{where_sql}"
    if order_sql:
        sql += f" ORDER BY {order_sql}"
    return BuiltQuery(sql + _limit(limit), params)


def build_count(table: str, where: Optional[str] = None, group_by: Optional[str] = None) -> BuiltQuery:
    table = validate_identifier(table, "table name")
    where_sql, params = _where(parse_conditions(where))
    if group_by and group_by.strip():
        columns = [validate_identifier(name, "group_by column") for name in group_by.split(",")]
        group = ", ".join(columns)
        return BuiltQuery(
            f"SELECT {group}, COUNT(*) AS count FROM {table}{where_sql} GROUP BY {group} ORDER BY {group}",
            params,
        )
    return BuiltQuery(f"SELECT COUNT(*) AS count FROM {table}{where_sql}", params)


def build_insert(table: str, fields: Optional[str]) -> BuiltQuery:
    table = validate_identifier(table, "table name")
    values = parse_values(fields)
    placeholders = ", ".join("?" for _ in values)
    return BuiltQuery(
        f"INSERT INTO {table} ({', '.join(values)}) VALUES ({placeholders})",
        tuple(values.values()),
    )


def build_update(table: str, fields: Optional[str], where: Optional[str]) -> BuiltQuery:
    table = validate_identifier(table, "table name")
    values = parse_values(fields)
    conditions = parse_conditions(where)
    if not conditions:
        raise QueryBuildError("update requires where_conditions")
    where_sql, where_params = _where(conditions)
    assignments = ", ".join(f"{column} = ?" for column in values)
    return BuiltQuery(
        f"UPDATE {table} SET {assignments}{where_sql}",
        tuple(values.values()) + where_params,
    )


def build_delete(table: str, where: Optional[str]) -> BuiltQuery:
    table = validate_identifier(table, "table name")
    conditions = parse_conditions(where)
    if not conditions:
        raise QueryBuildError("delete requires where_conditions")
    where_sql, params = _where(conditions)
    return BuiltQuery(f"DELETE FROM {table}{where_sql}", params)


def build_structured_query(
    operation: str,
    table: Optional[str],
    fields: Optional[str] = None,
    where: Optional[str] = None,
    order_by: Optional[str] = None,
    group_by: Optional[str] = None,
    limit: Optional[float] = None,
) -> BuiltQuery:
    """Build a statement for one of the structured operations.

    Args:
        operation: select, count, insert, update or delete
        table: Table name
        fields: Column list (select) or JSON object of values (insert/update)
        where: Conditions string
        order_by: Ordering for select
        group_by: Grouping columns for count
        limit: Row limit for select

    Raises:
        QueryBuildError: If the operation or any argument is invalid
    """
    operation = (operation or "").strip().lower()
    if operation not in OPERATIONS:
        raise QueryBuildError(
            f"Unsupported structured operation: {operation!r}. "
            f"Expected one of: {', '.join(OPERATIONS)}"
        )
    if not table:
        raise QueryBuildError("table_name is required for structured queries")

    if operation == "select":
        return build_select(table, fields, where, order_by, limit)
    if operation == "count":
        return build_count(table, where, group_by)
    if operation == "insert":
        return build_insert(table, fields)
    if operation == "update":
        return build_update(table, fields, where)
    return build_delete(table, where)
