"""Tests for error classes."""

import pytest
from graphql import GraphQLError, GraphQLSyntaxError, parse

from gqlguard.exceptions import (
    AliasLimitExceeded,
    ConfigurationError,
    DepthLimitExceeded,
    LimitExceededError,
    QueryGuardError,
    QueryLoadError,
)


class TestExceptionClasses:
    """Test custom exception classes."""

    def test_queryguard_error_basic(self):
        """Test basic QueryGuardError functionality."""
        error = QueryGuardError(
            message="Test error",
            error_code="TEST_ERROR",
            context={"path": "query.graphql"},
            suggestions=["Check the path", "Verify permissions"]
        )

        assert error.message == "Test error"
        assert error.error_code == "TEST_ERROR"
        assert error.context["path"] == "query.graphql"
        assert len(error.suggestions) == 2
        assert error.correlation_id is not None

    def test_error_to_dict(self):
        """Test error serialization to dict."""
        error = QueryLoadError(
            message="Query could not be parsed",
            path="query.graphql",
            source="{ books "
        )

        error_dict = error.to_dict()
        assert error_dict["error"] == "QUERY_LOAD_ERROR"
        assert error_dict["message"] == "Query could not be parsed"
        assert error_dict["context"]["path"] == "query.graphql"
        assert error_dict["context"]["source"] == "{ books "

    def test_load_error_location(self):
        """Test that file and position are summarized in one place."""
        error = QueryLoadError("Bad query", path="query.graphql", line=3, column=7)

        assert error.where == "query.graphql, line 3, column 7"
        assert error.to_dict()["where"] == "query.graphql, line 3, column 7"
        assert "Where: query.graphql, line 3, column 7" in str(error)

    def test_syntax_error_is_wrapped(self):
        """Test wrapping a parser error with its position."""
        with pytest.raises(GraphQLSyntaxError) as exc_info:
            parse("{ books {")

        error = QueryLoadError.from_syntax_error(exc_info.value, "{ books {", path="q.graphql")

        assert error.message.startswith("Query could not be parsed: Syntax Error")
        assert error.where == "q.graphql, line 1, column 10"
        assert error.context["source"] == "{ books {"

    def test_base_error_has_no_location(self):
        """Test the base error without a known origin."""
        error = QueryGuardError("Something failed")

        assert error.where is None
        assert error.error_code == "QUERYGUARD_ERROR"
        assert "Where:" not in str(error)

    def test_long_source_is_truncated(self):
        """Test that long documents are shortened in the context."""
        error = QueryLoadError("Bad query", source="x" * 500)
        assert len(error.context["source"]) == 203

    def test_error_string_representation(self):
        """Test error string formatting."""
        error = ConfigurationError(
            message="Limit must not be negative",
            option="n",
            value=-1,
            suggestions=["Use a positive limit"]
        )

        error_str = str(error)
        assert "[CONFIGURATION_ERROR]" in error_str
        assert "Limit must not be negative" in error_str
        assert "Where: option n = -1 (int)" in error_str
        assert "1. Use a positive limit" in error_str
        assert error.correlation_id in error_str


class TestLimitErrors:
    """Test the GraphQL errors reported for violations."""

    def test_alias_error(self):
        """Test the alias violation message and extensions."""
        error = AliasLimitExceeded(2, 3)

        assert isinstance(error, GraphQLError)
        assert isinstance(error, LimitExceededError)
        assert error.message == "Aliases limit of 2 exceeded, found 3."
        assert error.extensions == {"code": "ALIAS_LIMIT_EXCEEDED", "limit": 2, "found": 3}

    def test_depth_error_with_location(self):
        """Test that the error points at the offending node."""
        document = parse("{ books { title } }")
        field = document.definitions[0].selection_set.selections[0]

        error = DepthLimitExceeded(1, 2, nodes=[field])

        assert error.message == "Query depth limit of 1 exceeded, found 2."
        assert error.locations[0].line == 1
        assert error.locations[0].column == 3
        assert error.formatted["extensions"]["code"] == "DEPTH_LIMIT_EXCEEDED"

    def test_hidden_limits(self):
        """Test the replacement message keeps the values off the wire."""
        error = DepthLimitExceeded(1, 2, error_message="Query validation error.")

        assert error.message == "Query validation error."
        assert error.extensions == {"code": "DEPTH_LIMIT_EXCEEDED"}
        assert error.limit == 1
        assert error.found == 2
