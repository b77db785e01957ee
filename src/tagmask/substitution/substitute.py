"""Replace template constructs with same-shape placeholders.

Thread Safety:
Stateless between calls; each call owns its lexer, registry and output.

"""

from __future__ import annotations

from tagmask.config import TagmaskConfig, config_context, get_config
from tagmask.errors import SubstitutionError
from tagmask.lexer.core import lex
from tagmask.location import SourceLocation
from tagmask.stringbuilder import StringBuilder
from tagmask.substitution.placeholders import (
    IDENTIFIER_PREFIXES,
    LINE_COMMENT_TYPES,
    PLACEHOLDER_KINDS,
    SENTINEL_PATTERN,
    PlaceholderKind,
    close_tag_placeholder,
    comment_placeholder,
    ends_line,
    identifier_placeholder,
    open_tag_placeholder,
    opens_block,
)
from tagmask.substitution.registry import TagRegistry
from tagmask.tokens import Token, TokenType
from tagmask.utils.logger import get_logger

logger = get_logger(__name__)


def substitute_tags(
    source: str,
    *,
    source_file: str | None = None,
    config: TagmaskConfig | None = None,
) -> tuple[str, TagRegistry]:
    """Replace every template construct in source with a placeholder.

    Args:
        source: JSP source text
        source_file: Optional source file path for error messages
        config: Settings to use instead of the active TagmaskConfig

    Returns:
        (transformed text, registry of original construct texts)

    Raises:
        LexError: If the source cannot be tokenized
        SubstitutionError: If template text already contains placeholder
            text, or a construct is too short for any placeholder

    Example:
        >>> transformed, tags = substitute_tags("alert(${expr1}, ${expr2})")
        >>> transformed
        'alert(ʾEL_0__ʿ, ʾEL_1__ʿ)'
        >>> tags.originals
        ['${expr1}', '${expr2}']
    """
    if config is None:
        config = get_config()

    with config_context(config):
        tokens = lex(source, source_file=source_file)

    registry = TagRegistry()
    sb = StringBuilder()
    # One entry per open custom tag: whether its placeholder opened a brace
    braced: list[bool] = []
    for token in tokens:
        if token.type is TokenType.TEMPLATE_TEXT:
            _check_template_text(source, token, source_file)
            sb.append(token.value)
            continue
        index = registry.record(token.value, token.type)
        sb.append(_placeholder_for(source, token, index, config, braced))

    logger.debug("Substituted %d tags in %d characters", len(registry), sb.length)
    return sb.build(), registry


def _placeholder_for(
    source: str, token: Token, index: int, config: TagmaskConfig, braced: list[bool]
) -> str:
    kind = PLACEHOLDER_KINDS[token.type]
    if kind is PlaceholderKind.IDENTIFIER:
        return identifier_placeholder(token.value, IDENTIFIER_PREFIXES[token.type], index)
    if kind is PlaceholderKind.OPEN:
        placeholder = open_tag_placeholder(token.value)
        braced.append(opens_block(placeholder))
        return placeholder
    if kind is PlaceholderKind.CLOSE:
        return close_tag_placeholder(token.value, braced=braced.pop())
    line_comment = (
        config.line_comments
        and token.type in LINE_COMMENT_TYPES
        and ends_line(source, token.end_offset)
    )
    return comment_placeholder(token.value, line_comment=line_comment)


def _check_template_text(source: str, token: Token, source_file: str | None) -> None:
    """Refuse sources that restoration could not tell apart from placeholders."""
    found = SENTINEL_PATTERN.search(token.value)
    if found is None:
        return
    location = SourceLocation.from_offset(source, token.offset + found.start(), source_file)
    raise SubstitutionError(
        f"{location} Source already contains placeholder text {found.group()!r}"
    )
