"""Grammar-driven JSP lexer.

At every position the lexer tries each construct in a fixed order, first
by its opening delimiter and then, once the delimiter is seen, by the full
rule. A construct that starts but cannot be completed is an error; there is
no fallback to a later alternative. Whatever matches nothing else is
template text.

Custom-action end tags are checked against a stack of open start tags, so
the token stream is balanced by the time it reaches the substitution layer.

Thread Safety:
Lexer instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator

from tagmask.config import get_config
from tagmask.errors import (
    GrammarMismatchError,
    LexError,
    MismatchedEndTagError,
    UnterminatedConstructError,
)
from tagmask.grammar.jsp import EL_ENABLED, TAG_NAME, build_end_tag_matcher, default_grammar
from tagmask.grammar.matchers import MatchContext, Matcher
from tagmask.grammar.metadata import MetadataStore
from tagmask.grammar.registry import Grammar
from tagmask.location import SourceLocation
from tagmask.tokens import Token, TokenType
from tagmask.utils.logger import get_logger

logger = get_logger(__name__)

# (token type, delimiter rule, full rule), in the order they are tried
_DELIMITED_CONSTRUCTS: tuple[tuple[TokenType, str, str], ...] = (
    (TokenType.JSP_COMMENT, "JSP_COMMENT_START", "JSP_COMMENT"),
    (TokenType.JSP_DIRECTIVE, "JSP_DIRECTIVE_START", "JSP_DIRECTIVE"),
    (TokenType.JSP_DECLARATION, "JSP_DECLARATION_START", "JSP_DECLARATION"),
    (TokenType.JSP_EXPRESSION, "JSP_EXPRESSION_START", "JSP_EXPRESSION"),
    (TokenType.JSP_SCRIPTLET, "JSP_SCRIPTLET_START", "JSP_SCRIPTLET"),
    (TokenType.EL_EXPRESSION, "EL_EXPRESSION_START", "EL_EXPRESSION"),
    (TokenType.PORTLET_NAMESPACE, "PORTLET_NAMESPACE", "PORTLET_NAMESPACE"),
)


class _OpenTag:
    __slots__ = ("name", "closer", "offset")

    def __init__(self, name: str, closer: Matcher, offset: int) -> None:
        self.name = name
        self.closer = closer
        self.offset = offset


class Lexer:
    """Tokenizer for JSP templates.

    Usage:
            >>> lexer = Lexer("<p>${name}</p>")
            >>> for token in lexer.tokenize():
            ...     print(token)
            Token(TEMPLATE_TEXT, '<p>', @0)
            Token(EL_EXPRESSION, '${name}', @3)
            Token(TEMPLATE_TEXT, '</p>', @10)

    Thread Safety:
        Lexer instances are single-use. Create one per source string.
        All state is instance-local; no shared mutable state.

    """

    __slots__ = (
        "_source",
        "_source_len",  # Cached len(source)
        "_pos",
        "_source_file",
        "_grammar",
        "_ctx",
        "_constructs",  # Resolved _DELIMITED_CONSTRUCTS
        "_open_tags",  # Stack of custom actions awaiting their end tag
        "_excerpt_length",
    )

    def __init__(
        self,
        source: str,
        *,
        source_file: str | None = None,
        el_enabled: bool | None = None,
        grammar: Grammar | None = None,
    ) -> None:
        """Initialize lexer with source text.

        Args:
            source: JSP source text
            source_file: Optional source file path for error messages
            el_enabled: Whether EL is recognized at the start of the file;
                defaults to the active TagmaskConfig
            grammar: Grammar to drive; defaults to the JSP grammar
        """
        config = get_config()
        if el_enabled is None:
            el_enabled = config.el_enabled

        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._source_file = source_file
        self._grammar = grammar if grammar is not None else default_grammar()
        self._ctx = MatchContext(source, MetadataStore({EL_ENABLED: el_enabled}))
        self._constructs = tuple(
            (token_type, self._grammar[delimiter], self._grammar[rule])
            for token_type, delimiter, rule in _DELIMITED_CONSTRUCTS
        )
        self._open_tags: list[_OpenTag] = []
        self._excerpt_length = config.excerpt_length

    def tokenize(self) -> Iterator[Token]:
        """Tokenize source into token stream.

        Yields:
            Token objects one at a time

        Raises:
            LexError: At the first construct that cannot be delimited
        """
        for result in self._results():
            if isinstance(result, LexError):
                raise result
            yield result

    def try_tokenize(self) -> list[Token] | LexError:
        """Tokenize the whole source, returning the first error instead of raising."""
        tokens: list[Token] = []
        for result in self._results():
            if isinstance(result, LexError):
                logger.debug("Lexing stopped after %d tokens: %s", len(tokens), result)
                return result
            tokens.append(result)
        logger.debug("Lexed %d tokens from %d characters", len(tokens), self._source_len)
        return tokens

    def _results(self) -> Iterator[Token | LexError]:
        while self._pos < self._source_len:
            result = self._step()
            yield result
            if isinstance(result, LexError):
                return

        if self._open_tags:
            tag = self._open_tags[-1]
            yield self._locate(
                MismatchedEndTagError(tag.name, f"Missing end tag </{tag.name}>"),
                tag.offset,
            )

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _step(self) -> Token | LexError:
        """Consume one token at the current position."""
        ctx = self._ctx
        pos = self._pos
        ctx.reset_diagnostics()

        for token_type, delimiter, rule in self._constructs:
            if delimiter.match_at(ctx, pos) is None:
                if ctx.fatal is not None:
                    return self._failure(delimiter.description, pos)
                continue
            end = rule.match_at(ctx, pos)
            if end is None:
                return self._failure(rule.description, pos)
            return self._emit(token_type, end)

        result = self._scan_custom_action_end(pos)
        if result is not None:
            return result

        result = self._scan_custom_action_start(pos)
        if result is not None:
            return result

        text = self._grammar["TEMPLATE_TEXT"]
        end = text.match_at(ctx, pos)
        if end is None:
            return self._failure(text.description, pos)
        return self._emit(TokenType.TEMPLATE_TEXT, end)

    def _scan_custom_action_end(self, pos: int) -> Token | LexError | None:
        """Match </prefix:name>; None when no end tag starts here."""
        ctx = self._ctx
        grammar = self._grammar

        if self._open_tags:
            end = self._open_tags[-1].closer.match_at(ctx, pos)
            if end is not None:
                self._open_tags.pop()
                return self._emit(TokenType.CUSTOM_ACTION_END, end)

        if grammar["CUSTOM_ACTION_END_DELIMITER"].match_at(ctx, pos) is None:
            return None

        rule = grammar["CUSTOM_ACTION_END"]
        if rule.match_at(ctx, pos) is None:
            return self._failure(rule.description, pos)

        name_end = grammar["QNAME"].match_at(ctx, pos + 2)
        name = self._source[pos + 2 : name_end]
        if self._open_tags:
            expected = self._open_tags[-1].name
            message = f"Expected end tag </{expected}> but found </{name}>"
        else:
            message = f"Unexpected end tag </{name}> with no open tag"
        return self._locate(MismatchedEndTagError(name, message), pos)

    def _scan_custom_action_start(self, pos: int) -> Token | LexError | None:
        """Match <prefix:name ...> or <prefix:name ... />; None when no tag starts here."""
        ctx = self._ctx
        grammar = self._grammar

        if grammar["CUSTOM_ACTION_START_DELIMITER"].match_at(ctx, pos) is None:
            return None

        prefix = grammar["CUSTOM_ACTION_PREFIX"]
        end = prefix.match_at(ctx, pos)
        if end is None:
            return self._failure(prefix.description, pos)
        name = ctx.store.get(TAG_NAME)
        ctx.store.delete(TAG_NAME)

        empty_end = grammar["CUSTOM_ACTION_EMPTY_END"].match_at(ctx, end)
        if empty_end is not None:
            return self._emit(TokenType.CUSTOM_ACTION_SELF_CLOSING, empty_end)

        tag_end = grammar["CUSTOM_ACTION_TAG_END"].match_at(ctx, end)
        if tag_end is None:
            return self._failure('"/>" | ">"', end)

        closer = build_end_tag_matcher(grammar, name)

        # <a:b></a:b> is equivalent to <a:b/>
        close_end = closer.match_at(ctx, tag_end)
        if close_end is not None:
            return self._emit(TokenType.CUSTOM_ACTION_SELF_CLOSING, close_end)

        self._open_tags.append(_OpenTag(name, closer, pos))
        return self._emit(TokenType.CUSTOM_ACTION_START, tag_end)

    # =========================================================================
    # Token and error construction
    # =========================================================================

    def _emit(self, token_type: TokenType, end: int) -> Token:
        """Consume source up to end as one token."""
        value = self._source[self._pos : end]
        self._pos = end
        remaining = self._source_len - end
        return Token(token_type, value, self._source_len - remaining - len(value))

    def _failure(self, expected: str, offset: int) -> LexError:
        """Explain why matching stopped at offset.

        A fatal error recorded by a grammar hook wins; running out of input
        inside a construct comes next; otherwise it is a plain mismatch.
        """
        ctx = self._ctx
        if ctx.fatal is not None:
            error, error_offset = ctx.fatal
            return self._locate(error, error_offset)
        if ctx.unterminated is not None:
            terminator, _ = ctx.unterminated
            return self._locate(UnterminatedConstructError(terminator), offset)
        return self._locate(GrammarMismatchError(expected), offset)

    def _locate(self, error: LexError, offset: int) -> LexError:
        location = SourceLocation.from_offset(self._source, offset, self._source_file)
        return error.locate(
            excerpt=self._source[location.offset : location.offset + self._excerpt_length],
            offset=location.offset,
            lineno=location.lineno,
            col_offset=location.col_offset,
            source_file=self._source_file,
        )


def lex(
    source: str,
    *,
    source_file: str | None = None,
    el_enabled: bool | None = None,
) -> list[Token]:
    """Tokenize a JSP source.

    Args:
        source: JSP source text
        source_file: Optional source file path for error messages
        el_enabled: Whether EL is recognized; defaults to the active config

    Returns:
        Every token, in order. Concatenating their values gives back source.

    Raises:
        LexError: At the first construct that cannot be delimited
    """
    return list(Lexer(source, source_file=source_file, el_enabled=el_enabled).tokenize())
