"""Errors raised by gqlguard outside of query validation, and the violations it reports."""

from typing import Optional, Dict, Any, List, Sequence
import uuid

from graphql import GraphQLError, Node


DEFAULT_ERROR_MESSAGE = "Query validation error."


class QueryGuardError(Exception):
    """
    Base exception for gqlguard failures that are not query violations.

    Subclasses describe where the problem was found (a configuration
    option, a query file) through the ``where`` property.
    """

    error_code = "QUERYGUARD_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        correlation_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}
        self.suggestions = suggestions or []
        self.correlation_id = correlation_id or str(uuid.uuid4())

    @property
    def where(self) -> Optional[str]:
        """Human readable origin of the error, None when unknown."""
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error": self.error_code,
            "message": self.message,
            "where": self.where,
            "context": self.context,
            "suggestions": self.suggestions,
            "correlation_id": self.correlation_id
        }

    def __str__(self) -> str:
        parts = [f"[{self.error_code}] {self.message}"]

        if self.where:
            parts.append(f"Where: {self.where}")

        if self.suggestions:
            parts.append("Suggestions:")
            for i, suggestion in enumerate(self.suggestions, 1):
                parts.append(f"  {i}. {suggestion}")

        parts.append(f"Correlation ID: {self.correlation_id}")

        return "\n".join(parts)


class ConfigurationError(QueryGuardError):
    """Invalid limit configuration."""

    error_code = "CONFIGURATION_ERROR"

    def __init__(
        self,
        message: str,
        option: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if option:
            context["option"] = option
        if value is not None:
            context["value"] = repr(value)
            context["value_type"] = type(value).__name__

        super().__init__(message=message, context=context, **kwargs)

    @property
    def where(self) -> Optional[str]:
        option = self.context.get("option")
        if option is None:
            return None
        if "value" not in self.context:
            return f"option {option}"
        return f"option {option} = {self.context['value']} ({self.context['value_type']})"


class QueryLoadError(QueryGuardError):
    """A query or schema document could not be read or parsed."""

    error_code = "QUERY_LOAD_ERROR"

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        source: Optional[str] = None,
        line: Optional[int] = None,
        column: Optional[int] = None,
        **kwargs
    ):
        context = kwargs.pop("context", {})
        if path:
            context["path"] = path
        if line is not None:
            context["line"] = line
            context["column"] = column
        if source:
            # Truncate long documents
            context["source"] = source[:200] + "..." if len(source) > 200 else source

        super().__init__(message=message, context=context, **kwargs)

    @classmethod
    def from_syntax_error(
        cls,
        error: GraphQLError,
        source: str,
        path: Optional[str] = None
    ) -> "QueryLoadError":
        """Wrap a GraphQL syntax error, keeping the position it points at."""
        location = error.locations[0] if error.locations else None
        return cls(
            f"Query could not be parsed: {error.message}",
            path=path,
            source=source,
            line=location.line if location else None,
            column=location.column if location else None,
            suggestions=["Check the query for unbalanced braces or missing field names"]
        )

    @property
    def where(self) -> Optional[str]:
        parts = []
        if "path" in self.context:
            parts.append(self.context["path"])
        if "line" in self.context:
            parts.append(f"line {self.context['line']}, column {self.context['column']}")
        return ", ".join(parts) or None


class LimitExceededError(GraphQLError):
    """A query violated one of the configured limits."""

    code = "LIMIT_EXCEEDED"

    def __init__(
        self,
        message: str,
        limit: int,
        found: int,
        nodes: Optional[Sequence[Node]] = None,
        expose_limits: bool = True
    ):
        extensions: Dict[str, Any] = {"code": self.code}
        if expose_limits:
            extensions["limit"] = limit
            extensions["found"] = found
        super().__init__(message, nodes, extensions=extensions)
        self.limit = limit
        self.found = found


class AliasLimitExceeded(LimitExceededError):
    """Too many aliases in a query document."""

    code = "ALIAS_LIMIT_EXCEEDED"

    def __init__(self, limit: int, found: int, error_message: Optional[str] = None, **kwargs):
        message = error_message or f"Aliases limit of {limit} exceeded, found {found}."
        super().__init__(message, limit, found, expose_limits=error_message is None, **kwargs)


class DepthLimitExceeded(LimitExceededError):
    """An operation nests selection sets too deeply."""

    code = "DEPTH_LIMIT_EXCEEDED"

    def __init__(self, limit: int, found: int, error_message: Optional[str] = None, **kwargs):
        message = error_message or f"Query depth limit of {limit} exceeded, found {found}."
        super().__init__(message, limit, found, expose_limits=error_message is None, **kwargs)
