"""Same-shape placeholders for template constructs.

Each placeholder has exactly the length of the construct it replaces, and the
same line breaks at the same places, so a formatter sees code of the real
shape. Placeholders are built from a fixed head, a run of sentinel filler
characters and a fixed tail; the sentinels are identifier-start letters that
are very unlikely to appear in real sources, which is what lets restoration
find placeholders again after formatting.

Families:
    comment: /*╳╳╳*/ or //╳╳╳ for comments, directives, declarations,
        scriptlets and tags without a body.
    identifier: ʾEL_3___ʿ for expressions, EL and the portlet namespace,
        so they stay valid operands.
    open: if (ʃʃʃ) { for a custom tag with a body, keeping the body one
        brace level deeper. Tags too short for that get /*ʃ*/, which
        leaves the brace depth alone.
    close: }/*ʅʅʅ*/ for the matching end tag, or /*ʅʅ*/ when its opener
        was brace-neutral.

Every placeholder carries at least one sentinel, so ordinary script text
never looks like one.

Multi-line constructs keep the indentation of their continuation lines.
When the first or last line is too short to hold a head or tail, characters
are moved between lines; the total length and the number of lines never
change.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from tagmask.errors import UnderlengthPlaceholderError
from tagmask.stringbuilder import StringBuilder
from tagmask.tokens import TokenType

# BOX DRAWINGS LIGHT DIAGONAL CROSS
COMMENT_FILLER = "\u2573"

# LATIN SMALL LETTER ESH
BLOCK_OPEN = "\u0283"

# LATIN SMALL LETTER SQUAT REVERSED ESH
BLOCK_CLOSE = "\u0285"

# MODIFIER LETTER RIGHT HALF RING / LEFT HALF RING
IDENTIFIER_START = "\u02be"
IDENTIFIER_END = "\u02bf"


class PlaceholderKind(Enum):
    """Placeholder family; restoration checks it against the record."""

    COMMENT = "comment"
    IDENTIFIER = "identifier"
    OPEN = "open"
    CLOSE = "close"


PLACEHOLDER_KINDS: dict[TokenType, PlaceholderKind] = {
    TokenType.JSP_COMMENT: PlaceholderKind.COMMENT,
    TokenType.JSP_DIRECTIVE: PlaceholderKind.COMMENT,
    TokenType.JSP_DECLARATION: PlaceholderKind.COMMENT,
    TokenType.JSP_SCRIPTLET: PlaceholderKind.COMMENT,
    TokenType.CUSTOM_ACTION_SELF_CLOSING: PlaceholderKind.COMMENT,
    TokenType.JSP_EXPRESSION: PlaceholderKind.IDENTIFIER,
    TokenType.EL_EXPRESSION: PlaceholderKind.IDENTIFIER,
    TokenType.PORTLET_NAMESPACE: PlaceholderKind.IDENTIFIER,
    TokenType.CUSTOM_ACTION_START: PlaceholderKind.OPEN,
    TokenType.CUSTOM_ACTION_END: PlaceholderKind.CLOSE,
}

# Constructs that may become a // comment when nothing follows them on their line
LINE_COMMENT_TYPES = frozenset(
    {
        TokenType.JSP_COMMENT,
        TokenType.JSP_DIRECTIVE,
        TokenType.JSP_DECLARATION,
        TokenType.JSP_SCRIPTLET,
    }
)

IDENTIFIER_PREFIXES: dict[TokenType, str] = {
    TokenType.JSP_EXPRESSION: "JSP_EXPR",
    TokenType.EL_EXPRESSION: "EL",
    TokenType.PORTLET_NAMESPACE: "PORTLET_NAMESPACE",
}

_C = re.escape(COMMENT_FILLER)
_O = re.escape(BLOCK_OPEN)
_X = re.escape(BLOCK_CLOSE)
_IS = re.escape(IDENTIFIER_START)
_IE = re.escape(IDENTIFIER_END)

# One alternative per family, tried at each position left to right. Spacing
# around the fixed parts is allowed because formatters normalize it. A brace
# in front of an open or close comment is optional, and restore_tags() hands
# it back to the surrounding text when the tag's placeholder had none.
PLACEHOLDER_PATTERN = re.compile(
    rf"(?P<open>if\s*\({_O}+\)\s*\{{(?:\s*/\*[{_O}\s]*{_O}[{_O}\s]*\*/)?"
    rf"|(?:\{{\s*)?/\*[{_O}\s]*{_O}[{_O}\s]*\*/)"
    rf"|(?P<close>(?:\}}\s*)?/\*[{_X}\s]*{_X}[{_X}\s]*\*/)"
    rf"|(?P<comment>/\*[{_C}\s]*{_C}[{_C}\s]*\*/|//{_C}+)"
    rf"|(?P<identifier>{_IS}[A-Za-z0-9_]*{_IE}(?:\s*/\*[{_IE}\s]*{_IE}[{_IE}\s]*\*/)?)"
)

# Ordinal embedded in an identifier placeholder, if any
ORDINAL_PATTERN = re.compile(rf"{_IS}(?:[A-Z]+(?:_[A-Z]+)*_)?(\d+)")

# Conditional part of an open placeholder, without any trailing comment
CONDITION_PATTERN = re.compile(rf"if\s*\({_O}+\)\s*\{{")

SENTINEL_PATTERN = re.compile(f"[{_C}{_O}{_X}{_IS}{_IE}]")

_LINE_BREAK = re.compile(r"(\r\n|\r|\n)")
_INDENT = re.compile(r"[ \t]*")
_REST_OF_LINE = re.compile(r"[^\r\n]*")


@dataclass(frozen=True, slots=True)
class Shape:
    """One candidate layout: head, then filler repeated, then tail.

    Attributes:
        head: Fixed text at the very start
        filler: Character repeated to pad to length
        tail: Fixed text at the very end
        min_fill: Fewest filler characters for the result to be recognizable
    """

    head: str
    filler: str
    tail: str = ""
    min_fill: int = 1


def reshape(original: str, shape: Shape) -> str | None:
    """Lay out shape over the lines of original.

    Returns:
        Text of the same length and line structure as original, or None if
        original is too short for the shape
    """
    parts = _LINE_BREAK.split(original)
    lines = parts[0::2]
    breaks = parts[1::2]

    indents = [""]
    for line in lines[1:]:
        indents.append(_INDENT.match(line).group())  # type: ignore[union-attr]
    slots = [len(line) - len(indent) for line, indent in zip(lines, indents)]

    fill = sum(slots) - len(shape.head) - len(shape.tail)
    if fill < shape.min_fill:
        return None
    if len(slots) > 1 and not _rebalance(slots, len(shape.head), len(shape.tail)):
        return None

    body = shape.head + shape.filler * fill + shape.tail
    sb = StringBuilder()
    cursor = 0
    for index, slot in enumerate(slots):
        if index:
            sb.append(breaks[index - 1])
        sb.append(indents[index])
        sb.append(body[cursor : cursor + slot])
        cursor += slot
    return sb.build()


def _rebalance(slots: list[int], head: int, tail: int) -> bool:
    """Move slots so the first line holds the head and the last the tail."""
    last = len(slots) - 1

    for i in range(1, len(slots)):
        if slots[0] >= head:
            break
        floor = tail if i == last else 0
        take = max(0, min(head - slots[0], slots[i] - floor))
        slots[i] -= take
        slots[0] += take

    for j in range(last - 1, -1, -1):
        if slots[last] >= tail:
            break
        floor = head if j == 0 else 0
        take = max(0, min(tail - slots[last], slots[j] - floor))
        slots[j] -= take
        slots[last] += take

    return slots[0] >= head and slots[last] >= tail


def first_fit(original: str, shapes: tuple[Shape, ...]) -> str:
    """Reshape original with the first shape that fits.

    Raises:
        UnderlengthPlaceholderError: If no shape fits
    """
    for shape in shapes:
        placeholder = reshape(original, shape)
        if placeholder is not None:
            return placeholder
    raise UnderlengthPlaceholderError(original)


# =========================================================================
# Builders, one per family
# =========================================================================


def comment_placeholder(original: str, *, line_comment: bool = False) -> str:
    """/*╳╳╳*/, or //╳╳╳ when line_comment is set and original is one line.

    Example:
        >>> comment_placeholder("<%-- x --%>")
        '/*╳╳╳╳╳╳╳*/'
    """
    if line_comment and _LINE_BREAK.search(original) is None:
        return first_fit(original, (Shape("//", COMMENT_FILLER),))
    return first_fit(original, (Shape("/*", COMMENT_FILLER, "*/"),))


def identifier_placeholder(original: str, prefix: str, ordinal: int) -> str:
    """Identifier embedding prefix and ordinal, dropping them if too long.

    Example:
        >>> identifier_placeholder("${expr1}", "EL", 0)
        'ʾEL_0__ʿ'
    """
    if _LINE_BREAK.search(original) is None:
        shapes = (
            Shape(f"{IDENTIFIER_START}{prefix}_{ordinal}", "_", IDENTIFIER_END, 0),
            Shape(f"{IDENTIFIER_START}{ordinal}", "_", IDENTIFIER_END, 0),
            Shape(IDENTIFIER_START, "_", IDENTIFIER_END),
        )
    else:
        shapes = tuple(
            Shape(f"{IDENTIFIER_START}{label}{IDENTIFIER_END}/*", IDENTIFIER_END, "*/")
            for label in (f"{prefix}_{ordinal}", str(ordinal), "")
        )
    return first_fit(original, shapes)


def open_tag_placeholder(original: str) -> str:
    """Conditional opener for a custom tag with a body.

    Tags too short for a conditional get a brace-neutral comment instead;
    see opens_block().

    Example:
        >>> open_tag_placeholder("<this:tag>")
        'if (ʃʃʃ) {'
        >>> open_tag_placeholder("<a:b>")
        '/*ʃ*/'
    """
    if _LINE_BREAK.search(original) is None:
        shapes = (
            Shape("if (", BLOCK_OPEN, ") {"),
            Shape("if(", BLOCK_OPEN, "){"),
            Shape("/*", BLOCK_OPEN, "*/"),
        )
    else:
        shapes = (
            Shape(f"if ({BLOCK_OPEN}) {{/*", BLOCK_OPEN, "*/"),
            Shape("{/*", BLOCK_OPEN, "*/"),
            Shape("/*", BLOCK_OPEN, "*/"),
        )
    return first_fit(original, shapes)


def opens_block(placeholder: str) -> bool:
    """True if an open placeholder starts a brace block its close must end."""
    return not placeholder.startswith("/*")


def close_tag_placeholder(original: str, *, braced: bool = True) -> str:
    """Closing brace plus comment for a custom end tag.

    Without braced, only the comment, matching a brace-neutral opener.

    Example:
        >>> close_tag_placeholder("</this:tag>")
        '}/*ʅʅʅʅʅʅ*/'
        >>> close_tag_placeholder("</a:b>", braced=False)
        '/*ʅʅ*/'
    """
    if braced:
        return first_fit(original, (Shape("}/*", BLOCK_CLOSE, "*/"),))
    return first_fit(original, (Shape("/*", BLOCK_CLOSE, "*/"),))


def ends_line(source: str, end: int) -> bool:
    """True if only spaces or tabs follow end on its line."""
    rest = _REST_OF_LINE.match(source, end).group()  # type: ignore[union-attr]
    return not rest.strip(" \t")
