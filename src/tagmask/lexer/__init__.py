"""Grammar-driven lexer for JSP templates.

Splits a source into template text and the constructs a generic formatter
cannot read: JSP comments, directives, declarations, expressions and
scriptlets, EL expressions, and custom-action tags.

Usage:
    >>> from tagmask.lexer import lex
    >>> [token.type.name for token in lex('<c:if test="${x}">y</c:if>')]
    ['CUSTOM_ACTION_START', 'TEMPLATE_TEXT', 'CUSTOM_ACTION_END']

"""

from tagmask.lexer.core import Lexer, lex

__all__ = ["Lexer", "lex"]
