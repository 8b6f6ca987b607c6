"""Alias and depth limiting extensions for Strawberry GraphQL."""

from typing import Any, Iterable, Optional

from strawberry.extensions import AddValidationRules

from .aliases import create_max_aliases_rule
from .depth import create_max_depth_rule


class MaxAliasesLimiter(AddValidationRules):
    """
    Extension that limits the number of aliases in GraphQL queries.

    This prevents alias amplification, where one request asks for the same
    expensive field many times under different names.
    """

    def __init__(
        self,
        *,
        n: Optional[int] = None,
        allow_list: Iterable[str] = (),
        **options: Any
    ):
        """
        Initialize the alias limit extension.

        Args:
            n: Maximum number of aliases, None for unlimited
            allow_list: Aliases that are not counted
            **options: Further MaxAliasesConfig options
        """
        self.rule = create_max_aliases_rule(n, allow_list, **options)
        super().__init__([self.rule])

    @property
    def config(self):
        return self.rule.config


class MaxDepthLimiter(AddValidationRules):
    """
    Extension that limits the depth of GraphQL queries.

    This prevents deeply nested queries from consuming too many resources.
    """

    def __init__(
        self,
        *,
        n: Optional[int] = None,
        flatten_fragments: bool = False,
        ignore_introspection: bool = False,
        **options: Any
    ):
        """
        Initialize the depth limit extension.

        Args:
            n: Maximum allowed query depth, None for unlimited
            flatten_fragments: Whether fragments add no depth level
            ignore_introspection: Whether to ignore introspection queries
            **options: Further MaxDepthConfig options
        """
        self.rule = create_max_depth_rule(
            n,
            flatten_fragments=flatten_fragments,
            ignore_introspection=ignore_introspection,
            **options
        )
        super().__init__([self.rule])

    @property
    def config(self):
        return self.rule.config


def create_max_aliases_extension(n: Optional[int] = None, **options: Any) -> type:
    """
    Create an alias limit extension class with the given options.

    Args:
        n: Maximum number of aliases
        **options: Further MaxAliasesLimiter options

    Returns:
        MaxAliasesLimiter class configured with the options
    """
    class ConfiguredMaxAliasesLimiter(MaxAliasesLimiter):
        def __init__(self, **kwargs):
            # Ignore strawberry's execution_context kwarg
            super().__init__(n=n, **options)

    return ConfiguredMaxAliasesLimiter


def create_max_depth_extension(n: Optional[int] = None, **options: Any) -> type:
    """
    Create a depth limit extension class with the given options.

    Args:
        n: Maximum allowed query depth
        **options: Further MaxDepthLimiter options

    Returns:
        MaxDepthLimiter class configured with the options
    """
    class ConfiguredMaxDepthLimiter(MaxDepthLimiter):
        def __init__(self, **kwargs):
            # Ignore strawberry's execution_context kwarg
            super().__init__(n=n, **options)

    return ConfiguredMaxDepthLimiter
