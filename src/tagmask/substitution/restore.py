"""Put original construct text back in place of placeholders.

Restoration is positional: the N-th placeholder found in the text is
replaced by record N. The family of each placeholder and, for identifiers,
the embedded ordinal are cross-checked so that a formatter that dropped or
duplicated a placeholder produces an error instead of shifted output.
Open and close placeholders are recomputed from their records, so a brace
or comment the pattern took from neighbouring text goes back to that text.

Thread Safety:
Stateless; safe to call concurrently with different registries.

"""

from __future__ import annotations

import re

from tagmask.errors import RestoreError
from tagmask.stringbuilder import StringBuilder
from tagmask.substitution.placeholders import (
    CONDITION_PATTERN,
    ORDINAL_PATTERN,
    PLACEHOLDER_PATTERN,
    PlaceholderKind,
    open_tag_placeholder,
    opens_block,
)
from tagmask.substitution.registry import TagRegistry
from tagmask.utils.logger import get_logger

logger = get_logger(__name__)


def restore_tags(text: str, registry: TagRegistry) -> str:
    """Replace each placeholder in text with the construct it stands for.

    Args:
        text: Output of substitute_tags(), possibly reformatted
        registry: Registry returned alongside the substituted text

    Returns:
        Text with every original construct back in place

    Raises:
        RestoreError: If placeholders and records do not line up
    """
    sb = StringBuilder()
    cursor = 0
    count = len(registry)
    index = 0
    # One entry per open custom tag: whether its placeholder opened a brace
    braced: list[bool] = []

    found = PLACEHOLDER_PATTERN.search(text)
    while found is not None:
        if index >= count:
            raise RestoreError(
                f"Found more placeholders than the {count} recorded tags: "
                f"{found.group()!r}"
            )
        record = registry[index]
        kind = PlaceholderKind(found.lastgroup)
        if kind is not record.placeholder_kind:
            raise RestoreError(
                f"Placeholder {index} is a {kind.value} placeholder but "
                f"{record.original!r} needs a {record.placeholder_kind.value} placeholder"
            )

        start, end = found.span()
        if kind is PlaceholderKind.IDENTIFIER:
            ordinal = ORDINAL_PATTERN.match(found.group())
            if ordinal is not None and int(ordinal.group(1)) != index:
                raise RestoreError(
                    f"Placeholder {found.group()!r} found at position {index}"
                )
        elif kind is PlaceholderKind.OPEN:
            expected = open_tag_placeholder(record.original)
            braced.append(opens_block(expected))
            start, end = _open_span(found, expected)
        elif kind is PlaceholderKind.CLOSE and braced and not braced.pop():
            start = _comment_start(found)

        sb.append(text[cursor:start])
        sb.append(record.original)
        cursor = end
        index += 1
        found = PLACEHOLDER_PATTERN.search(text, end)

    if index != count:
        raise RestoreError(f"Expected {count} placeholders but found {index}")

    sb.append(text[cursor:])
    logger.debug("Restored %d tags into %d characters", count, sb.length)
    return sb.build()


def _open_span(found: re.Match[str], expected: str) -> tuple[int, int]:
    """Span of found that belongs to an open placeholder shaped like expected.

    A brace-neutral placeholder leaves any brace before it to the text, and a
    one-line conditional leaves any comment after it to the next placeholder.
    """
    start, end = found.span()
    if not opens_block(expected):
        return _comment_start(found), end
    if "/*" not in expected:
        condition = CONDITION_PATTERN.match(found.group())
        if condition is not None:
            end = start + condition.end()
    return start, end


def _comment_start(found: re.Match[str]) -> int:
    """Offset of the comment in found, skipping a brace in front of it."""
    if found.group().startswith(("{", "}")):
        return found.start() + found.group().index("/*")
    return found.start()
