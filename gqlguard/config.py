"""Configuration for the alias and depth limits."""

from dataclasses import dataclass, field, fields
from typing import Any, Callable, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Type, TypeVar

from .exceptions import ConfigurationError, DEFAULT_ERROR_MESSAGE


AcceptCallback = Callable[[Any, Any], None]
RejectCallback = Callable[[Any, Any], None]

C = TypeVar("C", bound="LimitConfig")

# camelCase option names accepted alongside the snake_case field names
OPTION_ALIASES = {
    "allowList": "allow_list",
    "flattenFragments": "flatten_fragments",
    "ignoreIntrospection": "ignore_introspection",
    "exposeLimits": "expose_limits",
    "errorMessage": "error_message",
    "propagateOnRejection": "propagate_on_rejection",
    "onAccept": "on_accept",
    "onReject": "on_reject",
}


@dataclass(frozen=True)
class LimitConfig:
    """
    Options shared by both limits.

    Attributes:
        n: Maximum allowed value, None for unlimited
        expose_limits: Include the limit and measured value in error messages
        error_message: Message reported instead when limits are hidden
        propagate_on_rejection: Report violations to the client
        on_accept: Callbacks invoked as (config, document) when a document passes
        on_reject: Callbacks invoked as (config, error) for every violation
    """
    n: Optional[int] = None
    expose_limits: bool = True
    error_message: str = DEFAULT_ERROR_MESSAGE
    propagate_on_rejection: bool = True
    on_accept: Tuple[AcceptCallback, ...] = ()
    on_reject: Tuple[RejectCallback, ...] = ()

    def __post_init__(self):
        if self.n is not None:
            if isinstance(self.n, bool) or not isinstance(self.n, int):
                raise ConfigurationError(
                    "Limit must be an integer or None",
                    option="n",
                    value=self.n,
                    suggestions=["Pass n=None to disable the limit"]
                )
            if self.n < 0:
                raise ConfigurationError(
                    "Limit must not be negative",
                    option="n",
                    value=self.n
                )
        object.__setattr__(self, "on_accept", _callbacks("on_accept", self.on_accept))
        object.__setattr__(self, "on_reject", _callbacks("on_reject", self.on_reject))

    @property
    def enabled(self) -> bool:
        """Whether a finite limit is configured."""
        return self.n is not None

    def exceeded_by(self, value: int) -> bool:
        return self.n is not None and value > self.n

    def hidden_message(self) -> Optional[str]:
        """Replacement message for violations, None when limits are exposed."""
        return None if self.expose_limits else self.error_message

    @classmethod
    def from_options(cls: Type[C], options: Optional[Mapping[str, Any]] = None) -> C:
        """
        Build a config from a mapping of options.

        Both snake_case names and the camelCase names used by other GraphQL
        servers (allowList, flattenFragments, ...) are accepted.

        Args:
            options: Option mapping, None or empty for defaults

        Returns:
            Config instance

        Raises:
            ConfigurationError: If an option is unknown or invalid
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in (options or {}).items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(
                    f"Unknown option '{key}' for {cls.__name__}",
                    option=key,
                    suggestions=[f"Valid options: {', '.join(sorted(known))}"]
                )
            kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class MaxAliasesConfig(LimitConfig):
    """Alias limit options; aliases in allow_list are never counted."""
    allow_list: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        super().__post_init__()
        if isinstance(self.allow_list, str):
            raise ConfigurationError(
                "allow_list must be a collection of alias names, not a string",
                option="allow_list",
                value=self.allow_list
            )
        allow_list = frozenset(self.allow_list or ())
        for alias in allow_list:
            if not isinstance(alias, str):
                raise ConfigurationError(
                    "allow_list entries must be strings",
                    option="allow_list",
                    value=alias
                )
        object.__setattr__(self, "allow_list", allow_list)


@dataclass(frozen=True)
class MaxDepthConfig(LimitConfig):
    """
    Depth limit options.

    Attributes:
        flatten_fragments: Fragment spreads and inline fragments add no depth level
        ignore_introspection: Skip operations made only of introspection fields
    """
    flatten_fragments: bool = False
    ignore_introspection: bool = False


def _callbacks(option: str, value: Any) -> Tuple[Callable, ...]:
    if value is None:
        return ()
    if callable(value):
        value = (value,)
    callbacks = tuple(value) if isinstance(value, Iterable) else (value,)
    for callback in callbacks:
        if not callable(callback):
            raise ConfigurationError(
                f"{option} entries must be callable",
                option=option,
                value=callback
            )
    return callbacks
