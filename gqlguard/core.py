"""Core gqlguard implementation."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union
import logging
import threading

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    GraphQLSyntaxError,
    parse,
    specified_rules,
    validate,
)

from .config import MaxAliasesConfig, MaxDepthConfig
from .exceptions import DEFAULT_ERROR_MESSAGE, ConfigurationError, QueryLoadError
from .validation import (
    MaxAliasesLimiter,
    MaxDepthLimiter,
    create_max_aliases_rule,
    create_max_depth_rule,
    validate_aliases,
    validate_depth,
)

logger = logging.getLogger(__name__)

DocumentOrSource = Union[DocumentNode, str]


class QueryGuard:
    """Applies the alias and depth limits to GraphQL documents."""

    def __init__(self,
                 max_aliases: Optional[int] = None,
                 allow_aliases: Sequence[str] = (),
                 max_depth: Optional[int] = None,
                 flatten_fragments: bool = False,
                 ignore_introspection: bool = False,
                 expose_limits: bool = True,
                 error_message: str = DEFAULT_ERROR_MESSAGE,
                 propagate_on_rejection: bool = True,
                 on_accept: Sequence[Callable] = (),
                 on_reject: Sequence[Callable] = ()):
        """
        Initialize the guard.

        Args:
            max_aliases: Maximum number of aliases per document (None for unlimited)
            allow_aliases: Aliases that are never counted
            max_depth: Maximum allowed query depth (None for unlimited)
            flatten_fragments: Whether fragments add no depth level
            ignore_introspection: Whether to skip pure introspection operations
            expose_limits: Whether error messages include limit and measured value
            error_message: Message used when limits are not exposed
            propagate_on_rejection: Whether violations are reported to the client
            on_accept: Callbacks run when a document passes a limit
            on_reject: Callbacks run for every violation
        """
        shared = dict(
            expose_limits=expose_limits,
            error_message=error_message,
            propagate_on_rejection=propagate_on_rejection,
            on_accept=tuple(on_accept),
            on_reject=tuple(on_reject),
        )
        self.aliases_config = MaxAliasesConfig(n=max_aliases, allow_list=frozenset(allow_aliases), **shared)
        self.depth_config = MaxDepthConfig(
            n=max_depth,
            flatten_fragments=flatten_fragments,
            ignore_introspection=ignore_introspection,
            **shared
        )

        self._lock = threading.Lock()
        self._stats = {"checked": 0, "rejected": 0, "alias_rejections": 0, "depth_rejections": 0}

    @classmethod
    def from_configs(cls,
                     aliases: Optional[MaxAliasesConfig] = None,
                     depth: Optional[MaxDepthConfig] = None) -> "QueryGuard":
        """Create a guard from existing config objects."""
        guard = cls()
        if aliases is not None:
            guard.aliases_config = aliases
        if depth is not None:
            guard.depth_config = depth
        return guard

    def parse(self, document: DocumentOrSource) -> DocumentNode:
        """
        Parse a query unless it already is a document.

        Raises:
            QueryLoadError: If the query text is not valid GraphQL
        """
        if isinstance(document, DocumentNode):
            return document

        try:
            return parse(document)
        except GraphQLSyntaxError as e:
            raise QueryLoadError.from_syntax_error(e, document) from e

    def check(self, document: DocumentOrSource) -> List[GraphQLError]:
        """
        Apply both limits without a schema.

        Args:
            document: Parsed document or query text

        Returns:
            Alias violations followed by depth violations
        """
        node = self.parse(document)
        alias_errors = validate_aliases(node, self.aliases_config)
        depth_errors = validate_depth(node, self.depth_config)
        self._record(alias_errors, depth_errors)
        return alias_errors + depth_errors

    def validate(self, schema: Any, document: DocumentOrSource) -> List[GraphQLError]:
        """
        Run the standard validation rules together with both limits.

        Args:
            schema: GraphQLSchema or strawberry.Schema
            document: Parsed document or query text

        Returns:
            All validation errors, framework errors included

        Raises:
            ConfigurationError: If schema is neither kind of schema
        """
        graphql_schema = self._graphql_schema(schema)
        node = self.parse(document)
        errors = validate(graphql_schema, node, rules=[*specified_rules, *self.rules()])

        codes = [(error.extensions or {}).get("code") for error in errors]
        with self._lock:
            self._stats["checked"] += 1
            self._stats["alias_rejections"] += codes.count("ALIAS_LIMIT_EXCEEDED")
            self._stats["depth_rejections"] += codes.count("DEPTH_LIMIT_EXCEEDED")
            if "ALIAS_LIMIT_EXCEEDED" in codes or "DEPTH_LIMIT_EXCEEDED" in codes:
                self._stats["rejected"] += 1
        return errors

    def rules(self) -> List[type]:
        """Validation rule classes for graphql.validate()."""
        return [
            create_max_aliases_rule(**self._options(self.aliases_config)),
            create_max_depth_rule(**self._options(self.depth_config)),
        ]

    def extensions(self) -> List[Any]:
        """Strawberry schema extensions enforcing both limits."""
        return [
            MaxAliasesLimiter(**self._options(self.aliases_config)),
            MaxDepthLimiter(**self._options(self.depth_config)),
        ]

    def get_stats(self) -> Dict[str, int]:
        """Get counts of checked and rejected documents."""
        with self._lock:
            return dict(self._stats)

    def reset_stats(self) -> None:
        """Reset the checked/rejected counters."""
        with self._lock:
            for key in self._stats:
                self._stats[key] = 0

    def _record(self, alias_errors: List[GraphQLError], depth_errors: List[GraphQLError]) -> None:
        with self._lock:
            self._stats["checked"] += 1
            self._stats["alias_rejections"] += len(alias_errors)
            self._stats["depth_rejections"] += len(depth_errors)
            if alias_errors or depth_errors:
                self._stats["rejected"] += 1

    @staticmethod
    def _options(config: Any) -> Dict[str, Any]:
        return dict(vars(config))

    @staticmethod
    def _graphql_schema(schema: Any) -> GraphQLSchema:
        if isinstance(schema, GraphQLSchema):
            return schema
        # strawberry.Schema has no public accessor for the graphql-core schema it wraps
        wrapped = getattr(schema, "_schema", None)
        if isinstance(wrapped, GraphQLSchema):
            return wrapped
        raise ConfigurationError(
            f"Expected a GraphQLSchema or strawberry.Schema, got {type(schema).__name__}",
            option="schema",
            suggestions=["Build the schema with graphql.build_schema() or strawberry.Schema()"]
        )
