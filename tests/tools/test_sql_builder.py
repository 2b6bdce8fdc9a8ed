"""Tests for structured SQL building."""

import pytest

from toolhub.tools.sql_builder import (
    BuiltQuery,
    Condition,
    QueryBuildError,
    build_structured_query,
    parse_conditions,
    parse_fields,
    parse_order_by,
    parse_value,
    split_clauses,
    validate_identifier,
)


class TestParsing:
    """Tests for the string parsers."""

    def test_validate_identifier(self):
        assert validate_identifier(" users ") == "users"
        assert validate_identifier("u.name") == "u.name"
        for bad in ["", "1users", "users;", "name DESC", "a.b.c", "x--"]:
            with pytest.raises(QueryBuildError):
                validate_identifier(bad)

    def test_split_clauses_respects_quotes(self):
        assert split_clauses("id>1, name='Smith, J.' ,status=\"a,b\"") == [
            "id>1",
            "name='Smith, J.'",
            'status="a,b"',
        ]

    def test_split_clauses_unterminated_quote(self):
        with pytest.raises(QueryBuildError, match="Unterminated quote"):
            split_clauses("name='open")

    @pytest.mark.parametrize("text,expected", [
        ("1", 1),
        ("-42", -42),
        ("2.5", 2.5),
        ("1e3", 1000.0),
        ("'7'", "7"),
        ('"hello world"', "hello world"),
        ("active", "active"),
        ("  padded  ", "padded"),
    ])
    def test_parse_value(self, text, expected):
        value = parse_value(text)
        assert value == expected
        assert type(value) is type(expected)

    def test_parse_conditions_clauses(self):
        assert parse_conditions("id>1,status=active, age<>30, score>=9.5") == [
            Condition("id", ">", 1),
            Condition("status", "=", "active"),
            Condition("age", "!=", 30),
            Condition("score", ">=", 9.5),
        ]

    def test_parse_conditions_splits_at_first_operator(self):
        assert parse_conditions("note=a>=b") == [Condition("note", "=", "a>=b")]

    def test_parse_conditions_json(self):
        assert parse_conditions('{"email": "bob@example.com", "deleted_at": null}') == [
            Condition("email", "=", "bob@example.com"),
            Condition("deleted_at", "=", None),
        ]

    @pytest.mark.parametrize("text", [
        "id",
        "1=1",
        "id;drop=1",
        '{"a": [1, 2]}',
        '{"a": 1',
        '["a"]',
    ])
    def test_parse_conditions_invalid(self, text):
        with pytest.raises(QueryBuildError):
            parse_conditions(text)

    def test_parse_conditions_empty(self):
        assert parse_conditions(None) == []
        assert parse_conditions("  ") == []

    def test_parse_fields(self):
        assert parse_fields(None) == ["*"]
        assert parse_fields(" * ") == ["*"]
        assert parse_fields("id, name ,email") == ["id", "name", "email"]
        with pytest.raises(QueryBuildError):
            parse_fields("id, count(*)")

    def test_parse_order_by(self):
        assert parse_order_by("created_at desc, id") == "created_at DESC, id ASC"
        assert parse_order_by(None) == ""
        with pytest.raises(QueryBuildError):
            parse_order_by("id; DROP TABLE users")


class TestBuildStructuredQuery:
    """Tests for build_structured_query."""

    def test_select(self):
        query = build_structured_query(
            "select",
            "users",
            fields="id, name, email",
            where="id>1,status=active",
            order_by="id ASC",
            limit=3.0,
        )

        assert query == BuiltQuery(
            "SELECT id, name, email FROM users WHERE id > ? AND status = ? ORDER BY id ASC LIMIT 3",
            (1, "active"),
        )

    def test_select_all(self):
        assert build_structured_query("SELECT", "users").sql == "SELECT * FROM users"

    def test_select_invalid_limit(self):
        for limit in (0, -1, 2.5):
            with pytest.raises(QueryBuildError, match="limit"):
                build_structured_query("select", "users", limit=limit)

    def test_null_conditions(self):
        query = build_structured_query("select", "users", where='{"deleted_at": null}')
        assert query.sql == "SELECT * FROM users WHERE deleted_at IS NULL"
        assert query.params == ()

        query = build_structured_query("select", "users", where="deleted_at!=null")
        assert query.params == ("null",)

    def test_count(self):
        assert build_structured_query("count", "users", where="status=active") == BuiltQuery(
            "SELECT COUNT(*) AS count FROM users WHERE status = ?",
            ("active",),
        )

    def test_count_grouped(self):
        query = build_structured_query("count", "users", group_by="status")
        assert query.sql == (
            "SELECT status, COUNT(*) AS count FROM users GROUP BY status ORDER BY status"
        )

    def test_insert(self):
        query = build_structured_query(
            "insert", "users", fields='{"name": "Alice", "age": 30, "active": true}'
        )

        assert query.sql == "INSERT INTO users (name, age, active) VALUES (?, ?, ?)"
        assert query.params == ("Alice", 30, True)

    def test_insert_requires_values(self):
        with pytest.raises(QueryBuildError):
            build_structured_query("insert", "users", fields="name, email")
        with pytest.raises(QueryBuildError, match="cannot be empty"):
            build_structured_query("insert", "users", fields="{}")

    def test_update(self):
        query = build_structured_query(
            "update", "users", fields='{"status": "updated"}', where='{"email": "bob@example.com"}'
        )

        assert query.sql == "UPDATE users SET status = ? WHERE email = ?"
        assert query.params == ("updated", "bob@example.com")

    def test_update_and_delete_require_conditions(self):
        with pytest.raises(QueryBuildError, match="update requires"):
            build_structured_query("update", "users", fields='{"status": "x"}')
        with pytest.raises(QueryBuildError, match="delete requires"):
            build_structured_query("delete", "users")

    def test_delete(self):
        query = build_structured_query("delete", "users", where="id=3")
        assert query == BuiltQuery("DELETE FROM users WHERE id = ?", (3,))

    def test_injection_is_rejected(self):
        with pytest.raises(QueryBuildError, match="Invalid table name"):
            build_structured_query("select", "users; DROP TABLE users")

        query = build_structured_query("select", "users", where="name='x'' OR 1=1'")
        assert "OR" not in query.sql

    def test_unknown_operation(self):
        with pytest.raises(QueryBuildError, match="Unsupported structured operation"):
            build_structured_query("merge", "users")

    def test_missing_table(self):
        with pytest.raises(QueryBuildError, match="table_name is required"):
            build_structured_query("select", None)
