"""Limit on the number of field aliases in a query document."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Type
import logging

from graphql import (
    ASTValidationRule,
    DocumentNode,
    FieldNode,
    FragmentSpreadNode,
    GraphQLError,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
    SKIP,
    VisitorAction,
)

from ..config import MaxAliasesConfig
from ..exceptions import AliasLimitExceeded
from .fragments import FragmentIndex, VisitedPath, build_fragment_index, resolve_fragment
from .reporting import settle

logger = logging.getLogger(__name__)


@dataclass
class AliasCount:
    """Result of counting aliases; exceeded_at is the field that crossed the limit."""
    count: int = 0
    exceeded_at: Optional[FieldNode] = None


class AliasCounter:
    """
    Counts aliased fields across all operations of a document.

    Operations are walked in definition order and selections in source
    order, so the count at which the limit is first crossed is reproducible.
    Fragment spreads are expanded every time they are used; a spread of a
    fragment already being expanded is skipped.
    """

    def __init__(
        self,
        fragments: FragmentIndex,
        allow_list: Iterable[str] = (),
        limit: Optional[int] = None
    ):
        self.fragments = fragments
        self.allow_list = frozenset(allow_list)
        self.limit = limit
        self.result = AliasCount()
        self._path = VisitedPath()
        self._fragment_counts: Dict[str, int] = {}
        self._skipped = 0

    def count_document(self, document: DocumentNode) -> AliasCount:
        for definition in document.definitions:
            if isinstance(definition, OperationDefinitionNode):
                if self._count_selection_set(definition.selection_set):
                    break
        return self.result

    def is_counted(self, field: FieldNode) -> bool:
        """Whether a field carries an alias that is not allow-listed."""
        if field.alias is None:
            return False
        alias = field.alias.value
        return alias != field.name.value and alias not in self.allow_list

    def _count_selection_set(self, selection_set: Optional[SelectionSetNode]) -> bool:
        """Count aliases below a selection set; True once the limit is exceeded."""
        if selection_set is None:
            return False

        for selection in selection_set.selections:
            if isinstance(selection, FieldNode):
                if self.is_counted(selection):
                    self.result.count += 1
                    if self.limit is not None and self.result.count > self.limit:
                        self.result.exceeded_at = selection
                        return True
                if self._count_selection_set(selection.selection_set):
                    return True

            elif isinstance(selection, InlineFragmentNode):
                if self._count_selection_set(selection.selection_set):
                    return True

            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                with self._path.visiting(name) as entered:
                    if not entered:
                        # NoFragmentCyclesRule reports the cycle
                        self._skipped += 1
                        continue
                    if self._count_fragment(name):
                        return True

        return False

    def _count_fragment(self, name: str) -> bool:
        cached = self._fragment_counts.get(name)
        if cached is not None and (self.limit is None or self.result.count + cached <= self.limit):
            self.result.count += cached
            return False

        fragment = resolve_fragment(self.fragments, name)
        if fragment is None:
            return False

        before, skipped = self.result.count, self._skipped
        if self._count_selection_set(fragment.selection_set):
            return True
        # Only memoize results that no cycle cut short
        if self._skipped == skipped:
            self._fragment_counts[name] = self.result.count - before
        return False


def count_aliases(
    document: DocumentNode,
    allow_list: Iterable[str] = (),
    limit: Optional[int] = None
) -> AliasCount:
    """
    Count the aliases of a document.

    Args:
        document: Parsed GraphQL document
        allow_list: Alias names that are never counted
        limit: Stop counting as soon as the count exceeds this value

    Returns:
        The count and, if the limit was exceeded, the offending field
    """
    counter = AliasCounter(build_fragment_index(document), allow_list, limit)
    return counter.count_document(document)


def validate_aliases(
    document: DocumentNode,
    config: Optional[MaxAliasesConfig] = None,
    **options: Any
) -> List[GraphQLError]:
    """
    Check a document against the alias limit.

    Args:
        document: Parsed GraphQL document
        config: Alias limit configuration; built from options if omitted
        **options: Options for MaxAliasesConfig when no config is given

    Returns:
        A list with at most one AliasLimitExceeded error
    """
    if config is None:
        config = MaxAliasesConfig.from_options(options)

    errors: List[GraphQLError] = []
    if config.enabled:
        result = count_aliases(document, config.allow_list, config.n)
        logger.debug(f"Counted {result.count} aliases (limit {config.n})")
        if result.exceeded_at is not None:
            errors.append(AliasLimitExceeded(
                config.n,
                result.count,
                error_message=config.hidden_message(),
                nodes=[result.exceeded_at]
            ))

    return settle(config, document, errors)


class MaxAliasesRule(ASTValidationRule):
    """
    Validation rule rejecting documents with too many aliases.

    Use create_max_aliases_rule() to get a configured subclass; the base
    class carries the unlimited default configuration.
    """

    config = MaxAliasesConfig()

    def enter_document(self, node: DocumentNode, *_args: Any) -> VisitorAction:
        for error in validate_aliases(node, self.config):
            self.report_error(error)
        return SKIP


def create_max_aliases_rule(
    n: Optional[int] = None,
    allow_list: Iterable[str] = (),
    **options: Any
) -> Type[MaxAliasesRule]:
    """
    Create a MaxAliasesRule class for graphql.validate().

    Args:
        n: Maximum number of aliases, None for unlimited
        allow_list: Aliases that are not counted
        **options: Further MaxAliasesConfig options

    Returns:
        MaxAliasesRule subclass configured with the given options
    """
    rule_config = MaxAliasesConfig.from_options(dict(options, n=n, allow_list=allow_list))

    class ConfiguredMaxAliasesRule(MaxAliasesRule):
        config = rule_config

    return ConfiguredMaxAliasesRule
