"""ContextVar-based configuration for tagmask.

Provides thread-local configuration using Python's ContextVars (PEP 567).
Explicit keyword arguments to lex()/substitute_tags() always win over the
active config.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so callers formatting many files in parallel need no locks.

Usage:
    from tagmask.config import TagmaskConfig, config_context

    with config_context(TagmaskConfig(el_enabled=False)):
        transformed, tags = substitute_tags(source)

"""

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True, slots=True)
class TagmaskConfig:
    """Immutable tagmask configuration.

    Attributes:
        el_enabled: Whether ${...} and #{...} are recognized at the start of a
            file. A page directive's isELIgnored attribute can still flip it.
        line_comments: Replace a single-line comment, directive, declaration
            or scriptlet that ends its line with a // comment instead of a
            block comment.
        excerpt_length: Number of characters of remaining input quoted in lex
            error messages.

    """

    el_enabled: bool = True
    line_comments: bool = True
    excerpt_length: int = 20

    @classmethod
    def from_dict(cls, config_dict: dict) -> "TagmaskConfig":
        """Create TagmaskConfig from dictionary.

        Only includes keys that are valid TagmaskConfig fields; unknown keys
        are silently ignored, so a merged tool configuration can be passed
        straight through.

        Args:
            config_dict: Dictionary with config values.

        Returns:
            New TagmaskConfig instance with values from dict.

        Example:
            >>> TagmaskConfig.from_dict({"el_enabled": False, "other": 1}).el_enabled
            False

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered)


_DEFAULT_CONFIG: TagmaskConfig = TagmaskConfig()

_config: ContextVar[TagmaskConfig] = ContextVar(
    "tagmask_config",
    default=_DEFAULT_CONFIG,
)


def get_config() -> TagmaskConfig:
    """Get current configuration (thread-local)."""
    return _config.get()


def set_config(config: TagmaskConfig) -> None:
    """Set configuration for current context.

    Args:
        config: TagmaskConfig instance to use for this context.

    """
    _config.set(config)


def reset_config() -> None:
    """Reset to default configuration."""
    _config.set(_DEFAULT_CONFIG)


@contextmanager
def config_context(config: TagmaskConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Args:
        config: TagmaskConfig to use within the context.

    Yields:
        None

    Thread Safety:
        Only affects the current thread's context. Properly restores previous
        config even if an exception is raised.

    """
    previous = _config.get()
    _config.set(config)
    try:
        yield
    finally:
        _config.set(previous)


__all__ = [
    "TagmaskConfig",
    "get_config",
    "set_config",
    "reset_config",
    "config_context",
]
