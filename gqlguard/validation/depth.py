"""Limit on the nesting depth of query operations."""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Type
import logging

from graphql import (
    ASTValidationRule,
    DocumentNode,
    FieldNode,
    FragmentSpreadNode,
    GraphQLError,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionNode,
    SelectionSetNode,
    SKIP,
    VisitorAction,
)

from ..config import MaxDepthConfig
from ..exceptions import DepthLimitExceeded
from .fragments import FragmentIndex, VisitedPath, build_fragment_index, resolve_fragment
from .reporting import settle

logger = logging.getLogger(__name__)

INTROSPECTION_FIELDS = frozenset({"__schema", "__type"})
META_FIELDS = INTROSPECTION_FIELDS | {"__typename"}


class DepthMeasurer:
    """
    Measures how deeply the selection sets of an operation nest.

    The operation root is depth 0 and every field sits one level below the
    selection set that contains it, so ``{ books { author { name } } }`` has
    depth 3. An inline fragment adds one level of its own and a named fragment
    spread adds two, one for the spread and one for the fragment definition.
    With flatten_fragments set neither adds a level.
    """

    def __init__(self, fragments: FragmentIndex, flatten_fragments: bool = False):
        self.fragments = fragments
        self.flatten_fragments = flatten_fragments
        self._path = VisitedPath()
        self._fragment_depths: Dict[str, int] = {}
        self._skipped = 0

    @property
    def fragment_step(self) -> int:
        return 0 if self.flatten_fragments else 1

    def measure(self, operation: OperationDefinitionNode) -> Tuple[int, Optional[SelectionNode]]:
        """
        Measure an operation.

        Returns:
            The maximum depth and the first top-level selection reaching it
        """
        deepest, culprit = 0, None
        for selection in operation.selection_set.selections:
            depth = self._measure_selection(selection)
            if depth > deepest:
                deepest, culprit = depth, selection
        return deepest, culprit

    def _measure_selection_set(self, selection_set: Optional[SelectionSetNode]) -> int:
        if selection_set is None:
            return 0
        return max(
            (self._measure_selection(selection) for selection in selection_set.selections),
            default=0
        )

    def _measure_selection(self, selection: SelectionNode) -> int:
        """Depth of a selection relative to the selection set containing it."""
        if isinstance(selection, FieldNode):
            return 1 + self._measure_selection_set(selection.selection_set)

        if isinstance(selection, InlineFragmentNode):
            return self.fragment_step + self._measure_selection_set(selection.selection_set)

        if isinstance(selection, FragmentSpreadNode):
            name = selection.name.value
            with self._path.visiting(name) as entered:
                if not entered:
                    # NoFragmentCyclesRule reports the cycle
                    self._skipped += 1
                    return 0
                if resolve_fragment(self.fragments, name) is None:
                    return self.fragment_step
                return 2 * self.fragment_step + self._fragment_depth(name)

        return 0

    def _fragment_depth(self, name: str) -> int:
        if name in self._fragment_depths:
            return self._fragment_depths[name]

        fragment = resolve_fragment(self.fragments, name)
        if fragment is None:
            return 0

        skipped = self._skipped
        depth = self._measure_selection_set(fragment.selection_set)
        # Only memoize results that no cycle cut short
        if self._skipped == skipped:
            self._fragment_depths[name] = depth
        return depth


def measure_depth(
    operation: OperationDefinitionNode,
    fragments: Optional[FragmentIndex] = None,
    flatten_fragments: bool = False
) -> int:
    """
    Compute the maximum nesting depth of an operation.

    Args:
        operation: Operation to measure
        fragments: Fragment index of the operation's document
        flatten_fragments: Whether fragments add no depth level

    Returns:
        Maximum depth, 0 for an empty selection set
    """
    measurer = DepthMeasurer(fragments or {}, flatten_fragments)
    depth, _ = measurer.measure(operation)
    return depth


def is_introspection_operation(
    operation: OperationDefinitionNode,
    fragments: Optional[FragmentIndex] = None
) -> bool:
    """
    Whether an operation only selects introspection meta-fields.

    __typename is allowed alongside __schema and __type but does not make
    an operation introspective on its own.
    """
    names = list(_root_field_names(operation.selection_set, fragments or {}, VisitedPath()))
    return (
        bool(names)
        and all(name in META_FIELDS for name in names)
        and any(name in INTROSPECTION_FIELDS for name in names)
    )


def _root_field_names(
    selection_set: Optional[SelectionSetNode],
    fragments: FragmentIndex,
    path: VisitedPath
) -> Iterator[str]:
    """Names of the fields selected at the level of a selection set."""
    if selection_set is None:
        return
    for selection in selection_set.selections:
        if isinstance(selection, FieldNode):
            yield selection.name.value
        elif isinstance(selection, InlineFragmentNode):
            yield from _root_field_names(selection.selection_set, fragments, path)
        elif isinstance(selection, FragmentSpreadNode):
            name = selection.name.value
            with path.visiting(name) as entered:
                fragment = resolve_fragment(fragments, name) if entered else None
                if fragment is not None:
                    yield from _root_field_names(fragment.selection_set, fragments, path)


def validate_depth(
    document: DocumentNode,
    config: Optional[MaxDepthConfig] = None,
    **options: Any
) -> List[GraphQLError]:
    """
    Check every operation of a document against the depth limit.

    Operations are measured in document order and checking stops at the
    first operation that is too deep.

    Args:
        document: Parsed GraphQL document
        config: Depth limit configuration; built from options if omitted
        **options: Options for MaxDepthConfig when no config is given

    Returns:
        A list with at most one DepthLimitExceeded error
    """
    if config is None:
        config = MaxDepthConfig.from_options(options)

    errors: List[GraphQLError] = []
    if config.enabled:
        fragments = build_fragment_index(document)
        measurer = DepthMeasurer(fragments, config.flatten_fragments)

        for definition in document.definitions:
            if not isinstance(definition, OperationDefinitionNode):
                continue

            name = definition.name.value if definition.name else "<anonymous>"
            if config.ignore_introspection and is_introspection_operation(definition, fragments):
                logger.debug(f"Skipping introspection operation {name}")
                continue

            depth, culprit = measurer.measure(definition)
            logger.debug(f"Operation {name} has depth {depth} (limit {config.n})")
            if config.exceeded_by(depth):
                errors.append(DepthLimitExceeded(
                    config.n,
                    depth,
                    error_message=config.hidden_message(),
                    nodes=[culprit or definition]
                ))
                break

    return settle(config, document, errors)


class MaxDepthRule(ASTValidationRule):
    """
    Validation rule rejecting operations that nest too deeply.

    Use create_max_depth_rule() to get a configured subclass; the base
    class carries the unlimited default configuration.
    """

    config = MaxDepthConfig()

    def enter_document(self, node: DocumentNode, *_args: Any) -> VisitorAction:
        for error in validate_depth(node, self.config):
            self.report_error(error)
        return SKIP


def create_max_depth_rule(
    n: Optional[int] = None,
    flatten_fragments: bool = False,
    ignore_introspection: bool = False,
    **options: Any
) -> Type[MaxDepthRule]:
    """
    Create a MaxDepthRule class for graphql.validate().

    Args:
        n: Maximum allowed depth, None for unlimited
        flatten_fragments: Whether fragments add no depth level
        ignore_introspection: Whether to skip pure introspection operations
        **options: Further MaxDepthConfig options

    Returns:
        MaxDepthRule subclass configured with the given options
    """
    rule_config = MaxDepthConfig.from_options(dict(
        options,
        n=n,
        flatten_fragments=flatten_fragments,
        ignore_introspection=ignore_introspection
    ))

    class ConfiguredMaxDepthRule(MaxDepthRule):
        config = rule_config

    return ConfiguredMaxDepthRule
