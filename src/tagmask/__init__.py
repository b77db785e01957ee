"""
tagmask: Reversible placeholders for JSP templates

Lets a formatter that only understands plain script or style code work on
files that embed JSP: directives, scriptlets, expressions, EL ${...}/#{...}
interpolations and custom tag actions are replaced by placeholders of the
same length and line shape, and put back after formatting.

Quick Start:
    >>> from tagmask import restore_tags, substitute_tags
    >>> transformed, tags = substitute_tags("alert(${expr1}, ${expr2})")
    >>> transformed
    'alert(ʾEL_0__ʿ, ʾEL_1__ʿ)'
    >>> restore_tags(transformed, tags)
    'alert(${expr1}, ${expr2})'

    >>> # Or run a formatter between the two steps
    >>> from tagmask import format_source
    >>> format_source(source, my_formatter).output

Tokens only:
    >>> from tagmask import lex
    >>> [token.type.name for token in lex("<%= a %>b")]
    ['JSP_EXPRESSION', 'TEMPLATE_TEXT']
"""

from tagmask.config import (
    TagmaskConfig,
    config_context,
    get_config,
    reset_config,
    set_config,
)
from tagmask.errors import (
    DuplicateAttributeError,
    GrammarDefinitionError,
    GrammarMismatchError,
    LexError,
    MismatchedEndTagError,
    RestoreError,
    SubstitutionError,
    TagmaskError,
    UnderlengthPlaceholderError,
    UnterminatedConstructError,
)
from tagmask.lexer import Lexer, lex
from tagmask.location import SourceLocation
from tagmask.pipeline import FormatResult, check_source, format_source
from tagmask.substitution import TagRecord, TagRegistry, restore_tags, substitute_tags
from tagmask.tokens import Token, TokenType

__version__ = "0.1.0"

__all__ = [
    # Main API
    "lex",
    "substitute_tags",
    "restore_tags",
    "format_source",
    "check_source",
    # Core classes
    "Lexer",
    "Token",
    "TokenType",
    "TagRecord",
    "TagRegistry",
    "FormatResult",
    "SourceLocation",
    # Configuration
    "TagmaskConfig",
    "get_config",
    "set_config",
    "reset_config",
    "config_context",
    # Errors
    "TagmaskError",
    "GrammarDefinitionError",
    "LexError",
    "GrammarMismatchError",
    "UnterminatedConstructError",
    "DuplicateAttributeError",
    "MismatchedEndTagError",
    "SubstitutionError",
    "UnderlengthPlaceholderError",
    "RestoreError",
    # Version
    "__version__",
]
