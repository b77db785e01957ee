"""Token and TokenType definitions for the tagmask lexer.

The lexer produces an ordered stream of Token objects that the substitution
layer consumes. Concatenating the values of every token reproduces the source.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.
TokenType is an enum (inherently immutable).

"""

from dataclasses import dataclass
from enum import Enum, auto


class TokenType(Enum):
    """Token types produced by the lexer.

    Organized by category:
    - Plain template text (everything the formatter can read as-is)
    - JSP scripting constructs delimited by <% ... %> variants
    - Expression Language interpolations
    - Custom actions (prefix:name tags)

    """

    TEMPLATE_TEXT = auto()

    # JSP constructs
    JSP_COMMENT = auto()  # <%-- ... --%>
    JSP_DIRECTIVE = auto()  # <%@ ... %>
    JSP_DECLARATION = auto()  # <%! ... %>
    JSP_EXPRESSION = auto()  # <%= ... %>
    JSP_SCRIPTLET = auto()  # <% ... %>

    # Expression Language
    EL_EXPRESSION = auto()  # ${...} or #{...}

    PORTLET_NAMESPACE = auto()  # <portlet:namespace />

    # Custom actions
    CUSTOM_ACTION_START = auto()  # <a:b ...> with a body
    CUSTOM_ACTION_END = auto()  # </a:b>
    CUSTOM_ACTION_SELF_CLOSING = auto()  # <a:b ... /> or <a:b ...></a:b>


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the lexer.

    Attributes:
        type: The token type (from TokenType enum)
        value: The raw string value from source
        offset: Absolute start position in source

    """

    type: TokenType
    value: str
    offset: int

    @property
    def end_offset(self) -> int:
        """Absolute end position in source (exclusive)."""
        return self.offset + len(self.value)

    @property
    def is_multiline(self) -> bool:
        """True if the token spans a line break."""
        return "\n" in self.value or "\r" in self.value

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.type.name}, {val!r}, @{self.offset})"
