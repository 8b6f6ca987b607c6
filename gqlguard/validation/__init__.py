"""GraphQL query validation utilities."""

from .fragments import FragmentIndex, VisitedPath, build_fragment_index, resolve_fragment
from .aliases import (
    AliasCount,
    AliasCounter,
    MaxAliasesRule,
    count_aliases,
    create_max_aliases_rule,
    validate_aliases,
)
from .depth import (
    DepthMeasurer,
    MaxDepthRule,
    create_max_depth_rule,
    is_introspection_operation,
    measure_depth,
    validate_depth,
)
from .extensions import (
    MaxAliasesLimiter,
    MaxDepthLimiter,
    create_max_aliases_extension,
    create_max_depth_extension,
)

__all__ = [
    'FragmentIndex',
    'VisitedPath',
    'build_fragment_index',
    'resolve_fragment',
    'AliasCount',
    'AliasCounter',
    'MaxAliasesRule',
    'count_aliases',
    'create_max_aliases_rule',
    'validate_aliases',
    'DepthMeasurer',
    'MaxDepthRule',
    'create_max_depth_rule',
    'is_introspection_operation',
    'measure_depth',
    'validate_depth',
    'MaxAliasesLimiter',
    'MaxDepthLimiter',
    'create_max_aliases_extension',
    'create_max_depth_extension',
]
