"""JSP and Expression Language lexical grammar.

Rules follow the JSP 2.x syntax reference and, for names, the XML 1.0 Name
production. Only what is needed to find construct boundaries is modelled:
EL bodies are opaque up to their balancing brace, scriptlet bodies are
opaque up to %>, and custom-tag attributes are checked for shape and
uniqueness only.

Metadata keys (see MetadataStore):
    el_enabled: Whether ${...}/#{...} are expressions. Flipped for the rest
        of the file by <%@ page isELIgnored="true|false" %>.
    attribute_names: Names already seen on the tag being matched.
    tag_name: Qualified name captured from the last custom-action start.

"""

from __future__ import annotations

from tagmask.errors import DuplicateAttributeError, GrammarMismatchError, LexError
from tagmask.grammar import charsets
from tagmask.grammar.matchers import (
    Literal,
    Matcher,
    Maybe,
    OneOf,
    Pattern,
    Repeat,
    Sequence,
    Until,
    When,
)
from tagmask.grammar.metadata import MetadataStore
from tagmask.grammar.registry import Grammar, GrammarBuilder

EL_ENABLED = "el_enabled"
ATTRIBUTE_NAMES = "attribute_names"
TAG_NAME = "tag_name"

PAGE_DIRECTIVE_ATTRIBUTES = (
    "language",
    "extends",
    "import",
    "session",
    "buffer",
    "autoFlush",
    "isThreadSafe",
    "info",
    "errorPage",
    "isErrorPage",
    "contentType",
    "pageEncoding",
    "isELIgnored",
    "deferredSyntaxAllowedAsLiteral",
    "trimDirectiveWhitespaces",
)

# The page directive may carry several import attributes
REPEATABLE_PAGE_ATTRIBUTES = frozenset({"import"})

TAGLIB_DIRECTIVE_ATTRIBUTES = ("prefix", "uri", "tagdir")

_NC_NAME = f"[{charsets.NC_NAME_START_CHAR}][{charsets.NC_NAME_CHAR}]*"
_QNAME = f"{_NC_NAME}:{_NC_NAME}"


# =========================================================================
# Predicates and hooks
# =========================================================================


def el_enabled(store: MetadataStore) -> bool:
    """True while ${...} and #{...} are recognized as EL expressions."""
    return bool(store.get(EL_ENABLED, True))


def _reset_attribute_names(store: MetadataStore) -> None:
    store.set(ATTRIBUTE_NAMES, frozenset())


def _record_attribute_name(name: str, store: MetadataStore) -> LexError | None:
    seen: frozenset[str] = store.get(ATTRIBUTE_NAMES, frozenset())
    if name in seen:
        return DuplicateAttributeError(name)
    store.set(ATTRIBUTE_NAMES, seen | {name})
    return None


def _record_page_attribute_name(name: str, store: MetadataStore) -> LexError | None:
    if name in REPEATABLE_PAGE_ATTRIBUTES:
        return None
    return _record_attribute_name(name, store)


def _check_taglib_attributes(_text: str, store: MetadataStore) -> LexError | None:
    seen: frozenset[str] = store.get(ATTRIBUTE_NAMES, frozenset())
    if "prefix" not in seen:
        return GrammarMismatchError('taglib directive attribute "prefix"')
    if ("uri" in seen) == ("tagdir" in seen):
        return GrammarMismatchError('exactly one of taglib directive attributes "uri" | "tagdir"')
    return None


def _capture_tag_name(name: str, store: MetadataStore) -> None:
    store.set(TAG_NAME, name)


def _disable_el(_text: str, store: MetadataStore) -> None:
    store.set(EL_ENABLED, False)


def _enable_el(_text: str, store: MetadataStore) -> None:
    store.set(EL_ENABLED, True)


# =========================================================================
# Grammar
# =========================================================================


def build_jsp_grammar() -> Grammar:
    """Build the JSP/EL grammar.

    Returns:
        A new immutable Grammar. Prefer default_grammar(), which caches one.
    """
    g = GrammarBuilder()
    ref = g.ref

    # -- XML character classes ------------------------------------------------
    g.define("CHAR", Pattern(f"[{charsets.CHAR}]"))
    g.define("SPACE", Pattern(f"[{charsets.SPACE}]+"))
    g.define("LETTER", Pattern(f"[{charsets.LETTER}]"))
    g.define("DIGIT", Pattern(f"[{charsets.DIGIT}]"))
    g.define("COMBINING_CHAR", Pattern(f"[{charsets.COMBINING_CHAR}]"))
    g.define("EXTENDER", Pattern(f"[{charsets.EXTENDER}]"))
    g.define("NAME_START_CHAR", Pattern(f"[{charsets.NAME_START_CHAR}]"))
    g.define("NAME_CHAR", Pattern(f"[{charsets.NAME_CHAR}]"))
    g.define("NAME", Pattern(f"[{charsets.NAME_START_CHAR}][{charsets.NAME_CHAR}]*"))
    g.define("NC_NAME", Pattern(_NC_NAME))
    g.define("QNAME", Sequence(ref("NC_NAME"), ":", ref("NC_NAME")))
    g.define("EQ", Sequence(Maybe(ref("SPACE")), "=", Maybe(ref("SPACE"))))

    # -- Delimiters -------------------------------------------------------------
    g.define("JSP_COMMENT_START", Literal("<%--"))
    g.define("JSP_COMMENT_END", Literal("--%>"))
    g.define("JSP_DIRECTIVE_START", Literal("<%@"))
    g.define("JSP_DECLARATION_START", Literal("<%!"))
    g.define("JSP_EXPRESSION_START", Literal("<%="))
    g.define("JSP_SCRIPTLET_START", Literal("<%"))
    g.define("JSP_END", Literal("%>"))
    g.define("EL_EXPRESSION_START", When(el_enabled, OneOf("${", "#{")))

    # -- Scripting elements -----------------------------------------------------
    g.define(
        "JSP_COMMENT",
        Sequence(ref("JSP_COMMENT_START"), Until(ref("CHAR"), "--%>")),
    )
    g.define(
        "JSP_DECLARATION",
        Sequence(ref("JSP_DECLARATION_START"), Until(ref("CHAR"), "%>")),
    )
    g.define(
        "JSP_EXPRESSION",
        Sequence(ref("JSP_EXPRESSION_START"), Until(ref("CHAR"), "%>")),
    )
    g.define(
        "JSP_SCRIPTLET",
        Sequence(ref("JSP_SCRIPTLET_START"), Until(ref("CHAR"), "%>")),
    )

    # -- Expression Language ----------------------------------------------------
    # String literals and nested braces (set/map literals) are skipped whole so
    # a "}" inside them does not end the expression. EL never nests.
    g.define(
        "EL_STRING",
        OneOf(
            Sequence('"', Until(OneOf("\\\\", '\\"', ref("CHAR")), '"')),
            Sequence("'", Until(OneOf("\\\\", "\\'", ref("CHAR")), "'")),
        ),
    )
    g.define("EL_BRACES", Sequence("{", Until(ref("EL_BODY_CHAR"), "}")))
    g.define(
        "EL_BODY_CHAR",
        OneOf(
            ref("EL_STRING"),
            ref("EL_BRACES"),
            Pattern("(?![$#]\\{)[^{}'\"]"),
        ),
    )
    g.define("EL_BODY", Until(ref("EL_BODY_CHAR"), "}"))
    g.define(
        "EL_EXPRESSION",
        When(el_enabled, Sequence(ref("EL_EXPRESSION_START"), ref("EL_BODY"))),
    )

    # -- Attribute values -------------------------------------------------------
    g.define(
        "QUOTED_CHAR",
        OneOf(
            "&apos;",
            "&quot;",
            "\\\\",
            '\\"',
            "\\'",
            "\\$",
            "\\#",
            ref("EL_EXPRESSION"),
            ref("JSP_EXPRESSION"),
            ref("CHAR"),
        ),
    )
    g.define("ATTRIBUTE_VALUE_DOUBLE", Sequence('"', Until(ref("QUOTED_CHAR"), '"')))
    g.define("ATTRIBUTE_VALUE_SINGLE", Sequence("'", Until(ref("QUOTED_CHAR"), "'")))
    g.define(
        "RUNTIME_ATTRIBUTE_VALUE",
        OneOf(
            Sequence('"', ref("JSP_EXPRESSION"), '"'),
            Sequence("'", ref("JSP_EXPRESSION"), "'"),
        ),
    )
    g.define(
        "ATTRIBUTE_VALUE",
        OneOf(
            ref("RUNTIME_ATTRIBUTE_VALUE"),
            ref("ATTRIBUTE_VALUE_DOUBLE"),
            ref("ATTRIBUTE_VALUE_SINGLE"),
        ),
    )

    # -- Directives -------------------------------------------------------------
    g.define(
        "INCLUDE_DIRECTIVE",
        Sequence("include", ref("SPACE"), "file", ref("EQ"), ref("ATTRIBUTE_VALUE")),
    )

    g.define(
        "IS_EL_IGNORED_VALUE",
        OneOf(
            OneOf('"true"', "'true'").on_match(_disable_el),
            OneOf('"false"', "'false'").on_match(_enable_el),
        ),
    )
    g.define(
        "PAGE_ATTRIBUTE_NAME",
        OneOf(*PAGE_DIRECTIVE_ATTRIBUTES).on_match(_record_page_attribute_name),
    )
    g.define(
        "PAGE_ATTRIBUTE",
        OneOf(
            Sequence(
                ref("SPACE"),
                Literal("isELIgnored").on_match(_record_page_attribute_name),
                ref("EQ"),
                ref("IS_EL_IGNORED_VALUE"),
            ),
            Sequence(
                ref("SPACE"),
                ref("PAGE_ATTRIBUTE_NAME"),
                ref("EQ"),
                ref("ATTRIBUTE_VALUE"),
            ),
        ),
    )
    g.define(
        "PAGE_DIRECTIVE",
        Sequence("page", Repeat(ref("PAGE_ATTRIBUTE"))).on_enter(_reset_attribute_names),
    )

    g.define(
        "TAGLIB_ATTRIBUTE_NAME",
        OneOf(*TAGLIB_DIRECTIVE_ATTRIBUTES).on_match(_record_attribute_name),
    )
    g.define(
        "TAGLIB_ATTRIBUTE",
        Sequence(
            ref("SPACE"),
            ref("TAGLIB_ATTRIBUTE_NAME"),
            ref("EQ"),
            ref("ATTRIBUTE_VALUE"),
        ),
    )
    g.define(
        "TAGLIB_DIRECTIVE",
        Sequence("taglib", Repeat(ref("TAGLIB_ATTRIBUTE")))
        .on_enter(_reset_attribute_names)
        .on_match(_check_taglib_attributes),
    )

    g.define(
        "JSP_DIRECTIVE",
        Sequence(
            ref("JSP_DIRECTIVE_START"),
            Maybe(ref("SPACE")),
            OneOf(
                ref("INCLUDE_DIRECTIVE"),
                ref("PAGE_DIRECTIVE"),
                ref("TAGLIB_DIRECTIVE"),
            ),
            Maybe(ref("SPACE")),
            ref("JSP_END"),
        ),
    )

    # -- Custom actions ---------------------------------------------------------
    g.define("PORTLET_NAMESPACE", Pattern(f"<portlet:namespace[{charsets.SPACE}]*/>"))

    g.define(
        "ATTRIBUTE_NAME",
        Pattern(f"[{charsets.NAME_START_CHAR}][{charsets.NAME_CHAR}]*").on_match(
            _record_attribute_name
        ),
    )
    g.define(
        "ATTRIBUTE",
        Sequence(
            ref("SPACE"),
            ref("ATTRIBUTE_NAME"),
            ref("EQ"),
            ref("ATTRIBUTE_VALUE"),
        ),
    )
    g.define("ATTRIBUTES", Repeat(ref("ATTRIBUTE")))
    g.define("CUSTOM_ACTION_NAME", Sequence(ref("QNAME")).on_match(_capture_tag_name))
    g.define("CUSTOM_ACTION_START_DELIMITER", Pattern(f"<(?={_QNAME})"))
    g.define(
        "CUSTOM_ACTION_PREFIX",
        Sequence(
            ref("CUSTOM_ACTION_START_DELIMITER"),
            ref("CUSTOM_ACTION_NAME"),
            Maybe(ref("ATTRIBUTES")),
            Maybe(ref("SPACE")),
        ).on_enter(_reset_attribute_names),
    )
    g.define("CUSTOM_ACTION_EMPTY_END", Literal("/>"))
    g.define("CUSTOM_ACTION_TAG_END", Literal(">"))
    g.define("CUSTOM_ACTION_END_DELIMITER", Pattern(f"</(?={_QNAME})"))
    g.define(
        "CUSTOM_ACTION_END",
        Sequence(
            ref("CUSTOM_ACTION_END_DELIMITER"),
            ref("QNAME"),
            Maybe(ref("SPACE")),
            ">",
        ),
    )

    # -- Template text ----------------------------------------------------------
    # Everything up to the next construct. Escaped \${ and \#{ stay text.
    g.define(
        "TEMPLATE_CHUNK",
        OneOf(
            Pattern("[^<$#\\\\]+"),
            "\\$",
            "\\#",
            "\\",
            Pattern(f"<(?!%|/?{_QNAME})"),
            When(el_enabled, Pattern("[$#](?!\\{)"), Pattern("[$#]")),
        ),
    )
    g.define("TEMPLATE_TEXT", Repeat(ref("TEMPLATE_CHUNK")))

    return g.build()


def build_end_tag_matcher(grammar: Grammar, tag_name: str) -> Matcher:
    """Build the matcher for the end tag of one captured custom action.

    End tags must repeat the exact qualified name of their start tag, which
    no context-free rule can express, so the lexer builds one of these per
    open tag.
    """
    return Sequence("</", Literal(tag_name), Maybe(grammar["SPACE"]), ">").named(
        f"</{tag_name}>"
    )


_DEFAULT_GRAMMAR: Grammar | None = None


def default_grammar() -> Grammar:
    """Get the JSP grammar (cached singleton).

    Thread Safety:
        Returns a cached immutable grammar. Safe for concurrent access.
    """
    global _DEFAULT_GRAMMAR
    if _DEFAULT_GRAMMAR is None:
        _DEFAULT_GRAMMAR = build_jsp_grammar()
    return _DEFAULT_GRAMMAR
