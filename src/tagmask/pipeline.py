"""Format one template source with a formatter that only knows plain code.

The formatter is any callable from text to text; it sees the substituted
source and never a raw template construct. File selection, formatter
configuration and reporting belong to the caller.

Usage:
    >>> result = format_source("var a = ${value};", lambda text: text)
    >>> result.changed
    False

"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from tagmask.config import TagmaskConfig
from tagmask.substitution.registry import TagRegistry
from tagmask.substitution.restore import restore_tags
from tagmask.substitution.substitute import substitute_tags
from tagmask.utils.logger import get_logger

logger = get_logger(__name__)

Formatter = Callable[[str], str]


@dataclass(frozen=True, slots=True)
class FormatResult:
    """Outcome of formatting one source.

    Attributes:
        source: Text before formatting
        output: Formatted text with every construct restored
        tags: Registry used for the round trip
    """

    source: str
    output: str
    tags: TagRegistry

    @property
    def changed(self) -> bool:
        """True if formatting altered the source."""
        return self.output != self.source


def format_source(
    source: str,
    formatter: Formatter,
    *,
    source_file: str | None = None,
    config: TagmaskConfig | None = None,
) -> FormatResult:
    """Substitute, format, restore.

    Args:
        source: JSP source text
        formatter: Callable that formats plain script or style text
        source_file: Optional source file path for error messages
        config: Settings to use instead of the active TagmaskConfig

    Returns:
        FormatResult with the restored output

    Raises:
        LexError: If the source cannot be tokenized
        SubstitutionError: If the source cannot be safely substituted
        RestoreError: If the formatter lost or reordered placeholders
    """
    transformed, tags = substitute_tags(source, source_file=source_file, config=config)
    output = restore_tags(formatter(transformed), tags)
    logger.debug(
        "Formatted %s: %d tags, %s",
        source_file or "<string>",
        len(tags),
        "changed" if output != source else "unchanged",
    )
    return FormatResult(source, output, tags)


def check_source(
    source: str,
    formatter: Formatter,
    *,
    source_file: str | None = None,
    config: TagmaskConfig | None = None,
) -> bool:
    """Return True if source is already formatted."""
    return not format_source(
        source, formatter, source_file=source_file, config=config
    ).changed
