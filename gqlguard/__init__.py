"""gqlguard - alias and depth limits for GraphQL queries."""

from .core import QueryGuard
from .config import MaxAliasesConfig, MaxDepthConfig
from .exceptions import AliasLimitExceeded, DepthLimitExceeded
from .validation import MaxAliasesLimiter, MaxDepthLimiter, validate_aliases, validate_depth

__version__ = "0.1.0"
__all__ = [
    "QueryGuard",
    "MaxAliasesConfig",
    "MaxDepthConfig",
    "AliasLimitExceeded",
    "DepthLimitExceeded",
    "MaxAliasesLimiter",
    "MaxDepthLimiter",
    "validate_aliases",
    "validate_depth",
]
