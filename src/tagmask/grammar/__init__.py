"""Grammar toolkit and the JSP/EL grammar.

The combinators in matchers know nothing about JSP; jsp assembles them into
the rules the lexer drives.
"""

from tagmask.grammar.jsp import (
    ATTRIBUTE_NAMES,
    EL_ENABLED,
    TAG_NAME,
    build_end_tag_matcher,
    build_jsp_grammar,
    default_grammar,
)
from tagmask.grammar.matchers import (
    Literal,
    MatchContext,
    Matcher,
    Maybe,
    NamedRef,
    OneOf,
    Pattern,
    Repeat,
    Sequence,
    Until,
    When,
)
from tagmask.grammar.metadata import MetadataStore
from tagmask.grammar.registry import Grammar, GrammarBuilder

__all__ = [
    "ATTRIBUTE_NAMES",
    "EL_ENABLED",
    "TAG_NAME",
    "Grammar",
    "GrammarBuilder",
    "Literal",
    "MatchContext",
    "Matcher",
    "Maybe",
    "MetadataStore",
    "NamedRef",
    "OneOf",
    "Pattern",
    "Repeat",
    "Sequence",
    "Until",
    "When",
    "build_end_tag_matcher",
    "build_jsp_grammar",
    "default_grammar",
]
