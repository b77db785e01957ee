"""Matcher combinators over a text cursor.

A matcher is tried at an offset of an immutable source string and either
returns the end offset of what it consumed or None. Failure never moves the
cursor: callers simply keep their own offset.

Combinators know nothing about JSP. The grammar in tagmask.grammar.jsp is
built entirely out of these pieces.

Error Handling:
    Matchers never raise for bad input. A hook that detects a fatal condition
    (a duplicate attribute, say) returns a LexError; the context records it and
    every enclosing matcher returns None on its next check. The lexer then
    reports the recorded error. Running out of input inside Until is not
    fatal by itself (an enclosing OneOf may still succeed) but leaves a note
    the lexer uses to explain an otherwise plain mismatch.

Thread Safety:
    Matchers are configured at grammar construction and then only read.
    MatchContext is single-use per lex run.

"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from typing import TYPE_CHECKING

from tagmask.errors import GrammarDefinitionError, LexError
from tagmask.grammar.metadata import MetadataStore

if TYPE_CHECKING:
    from tagmask.grammar.registry import Binding

EnterHook = Callable[[MetadataStore], None]
MatchHook = Callable[[str, MetadataStore], "LexError | None"]
Predicate = Callable[[MetadataStore], bool]


class MatchContext:
    """Per-run matching state: source, metadata and failure diagnostics.

    Attributes:
        source: Full source text
        length: Cached len(source)
        store: Transactional metadata consulted by hooks and When
        fatal: First fatal error reported by a hook, with its offset
        unterminated: Description of the last terminator that input ran out
            before, with the offset where that construct started

    """

    __slots__ = ("source", "length", "store", "fatal", "unterminated")

    def __init__(self, source: str, store: MetadataStore | None = None) -> None:
        self.source = source
        self.length = len(source)
        self.store = store if store is not None else MetadataStore()
        self.fatal: tuple[LexError, int] | None = None
        self.unterminated: tuple[str, int] | None = None

    def fail(self, error: LexError, offset: int) -> None:
        """Record a fatal error. The first one wins."""
        if self.fatal is None:
            self.fatal = (error, offset)

    def note_unterminated(self, terminator: str, offset: int) -> None:
        self.unterminated = (terminator, offset)

    def reset_diagnostics(self) -> None:
        """Forget the unterminated note (fatal errors are never cleared)."""
        self.unterminated = None


class Matcher:
    """Base class for all matchers.

    Subclasses implement _match(ctx, pos) and, unless they are primitives
    without hooks, get a staging layer in the metadata store around every
    attempt: committed on success, discarded on failure.

    """

    __slots__ = ("_name", "_enter_hooks", "_match_hooks")

    # Composite matchers always stage writes made by their children
    _composite = False

    def __init__(self) -> None:
        self._name: str | None = None
        self._enter_hooks: tuple[EnterHook, ...] = ()
        self._match_hooks: tuple[MatchHook, ...] = ()

    # =========================================================================
    # Configuration (grammar construction time only)
    # =========================================================================

    def named(self, name: str) -> Matcher:
        """Override the derived description used in failure messages."""
        self._name = name
        return self

    def on_enter(self, hook: EnterHook) -> Matcher:
        """Run hook(store) each time this matcher is attempted."""
        self._enter_hooks += (hook,)
        return self

    def on_match(self, hook: MatchHook) -> Matcher:
        """Run hook(text, store) after each confirmed match.

        A hook that returns a LexError turns the match into a fatal failure.
        """
        self._match_hooks += (hook,)
        return self

    def until(self, terminator: Matcher | str) -> Until:
        """Repeat this matcher until terminator matches."""
        return Until(self, terminator)

    # =========================================================================
    # Matching
    # =========================================================================

    @property
    def description(self) -> str:
        """Human-readable form, for failure messages only."""
        if self._name is not None:
            return self._name
        return self._describe()

    def _describe(self) -> str:
        raise NotImplementedError

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        raise NotImplementedError

    def match_at(self, ctx: MatchContext, pos: int) -> int | None:
        """Try to match at pos.

        Returns:
            End offset of the match, or None on failure
        """
        if ctx.fatal is not None:
            return None
        if not (self._composite or self._enter_hooks or self._match_hooks):
            return self._match(ctx, pos)

        store = ctx.store
        store.begin()
        for enter in self._enter_hooks:
            enter(store)
        end = self._match(ctx, pos)
        if end is not None and ctx.fatal is None and self._match_hooks:
            text = ctx.source[pos:end]
            for hook in self._match_hooks:
                error = hook(text, store)
                if error is not None:
                    ctx.fail(error, pos)
                    break
        if end is None or ctx.fatal is not None:
            store.rollback()
            return None
        store.commit()
        return end

    def attempt(
        self, text: str, pos: int = 0, store: MetadataStore | None = None
    ) -> str | None:
        """Match against text starting at pos.

        Convenience entry point for tests and one-off checks; the lexer uses
        match_at() with a shared context.

        Returns:
            The matched text, or None

        Raises:
            LexError: If a hook reported a fatal condition
        """
        ctx = MatchContext(text, store)
        end = self.match_at(ctx, pos)
        if ctx.fatal is not None:
            raise ctx.fatal[0]
        return None if end is None else text[pos:end]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description}>"


def as_matcher(value: Matcher | str) -> Matcher:
    """Turn a plain string into a Literal; pass matchers through."""
    if isinstance(value, Matcher):
        return value
    return Literal(value)


def _wrap(description: str) -> str:
    return f"({description})" if " " in description else description


class Literal(Matcher):
    """Matches a fixed, non-empty string."""

    __slots__ = ("_text",)

    def __init__(self, text: str) -> None:
        super().__init__()
        if not text:
            raise GrammarDefinitionError("Literal matcher needs a non-empty string")
        self._text = text

    def _describe(self) -> str:
        return json.dumps(self._text, ensure_ascii=False)

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        if ctx.source.startswith(self._text, pos):
            return pos + len(self._text)
        return None


class Pattern(Matcher):
    """Matches a regular expression anchored at the cursor.

    A zero-width regex match counts as failure.
    """

    __slots__ = ("_regex",)

    def __init__(self, pattern: str | re.Pattern[str], flags: int = 0) -> None:
        super().__init__()
        self._regex = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern, flags)

    def _describe(self) -> str:
        return f"/{self._regex.pattern}/"

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        found = self._regex.match(ctx.source, pos)
        if found is None or found.end() == pos:
            return None
        return found.end()


class Sequence(Matcher):
    """Matches every child in order."""

    __slots__ = ("_children",)
    _composite = True

    def __init__(self, *children: Matcher | str) -> None:
        super().__init__()
        self._children = tuple(as_matcher(child) for child in children)

    def _describe(self) -> str:
        return " ".join(_wrap(child.description) for child in self._children)

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        for child in self._children:
            end = child.match_at(ctx, pos)
            if end is None:
                return None
            pos = end
        return pos


class OneOf(Matcher):
    """Matches the first child that succeeds, in declaration order."""

    __slots__ = ("_children",)
    _composite = True

    def __init__(self, *children: Matcher | str) -> None:
        super().__init__()
        self._children = tuple(as_matcher(child) for child in children)

    def _describe(self) -> str:
        return " | ".join(child.description for child in self._children)

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        for child in self._children:
            end = child.match_at(ctx, pos)
            if end is not None:
                return end
            if ctx.fatal is not None:
                return None
        return None


class Maybe(Matcher):
    """Optional match: a zero-width success when the child fails.

    Conceptually equivalent to the "?" regex special character.
    """

    __slots__ = ("_child",)
    _composite = True

    def __init__(self, child: Matcher | str) -> None:
        super().__init__()
        self._child = as_matcher(child)

    def _describe(self) -> str:
        return f"{_wrap(self._child.description)}?"

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        end = self._child.match_at(ctx, pos)
        if end is None:
            return None if ctx.fatal is not None else pos
        return end


class Repeat(Matcher):
    """One or more greedy matches of the child, never backtracking.

    Conceptually equivalent to the "+" regex special character. Compose with
    Maybe for zero-or-more. Stops when the child makes no progress.
    """

    __slots__ = ("_child",)
    _composite = True

    def __init__(self, child: Matcher | str) -> None:
        super().__init__()
        self._child = as_matcher(child)

    def _describe(self) -> str:
        return f"{_wrap(self._child.description)}+"

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        child = self._child
        end = child.match_at(ctx, pos)
        if end is None or end == pos:
            return None
        while True:
            following = child.match_at(ctx, end)
            if following is None or following == end:
                break
            end = following
        if ctx.fatal is not None:
            return None
        return end


class Until(Matcher):
    """Repeats a body matcher until a terminator matches.

    The terminator is tried first at every step and its text is part of the
    match. Fails when the body stops matching, and fails (leaving an
    unterminated note on the context) when input runs out first.
    """

    __slots__ = ("_body", "_terminator")
    _composite = True

    def __init__(self, body: Matcher | str, terminator: Matcher | str) -> None:
        super().__init__()
        self._body = as_matcher(body)
        self._terminator = as_matcher(terminator)

    @property
    def terminator(self) -> Matcher:
        return self._terminator

    def _describe(self) -> str:
        return f"{_wrap(self._body.description)}* {_wrap(self._terminator.description)}"

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        start = pos
        body = self._body
        terminator = self._terminator
        length = ctx.length
        while True:
            end = terminator.match_at(ctx, pos)
            if end is not None:
                return end
            if ctx.fatal is not None:
                return None
            if pos >= length:
                ctx.note_unterminated(terminator.description, start)
                return None
            following = body.match_at(ctx, pos)
            if following is None or following == pos:
                return None
            pos = following


class When(Matcher):
    """Chooses between two matchers with a predicate over the metadata store.

    The predicate is evaluated on every attempt, so a directive earlier in
    the file can switch a rule on or off for the rest of it.
    """

    __slots__ = ("_predicate", "_then", "_otherwise")

    def __init__(
        self,
        predicate: Predicate,
        then: Matcher | str,
        otherwise: Matcher | str | None = None,
    ) -> None:
        super().__init__()
        self._predicate = predicate
        self._then = as_matcher(then)
        self._otherwise = None if otherwise is None else as_matcher(otherwise)

    def _describe(self) -> str:
        condition = getattr(self._predicate, "__name__", "predicate")
        described = f"{_wrap(self._then.description)} when {condition}"
        if self._otherwise is not None:
            described += f" else {_wrap(self._otherwise.description)}"
        return described

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        if self._predicate(ctx.store):
            return self._then.match_at(ctx, pos)
        if self._otherwise is not None:
            return self._otherwise.match_at(ctx, pos)
        return None


class NamedRef(Matcher):
    """Indirect reference to a grammar rule, resolved on every attempt.

    Created by GrammarBuilder.ref(); allows rules to refer to rules defined
    later, and to themselves.
    """

    __slots__ = ("_binding",)

    def __init__(self, binding: Binding) -> None:
        super().__init__()
        self._binding = binding

    @property
    def target(self) -> Matcher:
        matcher = self._binding.matcher
        if matcher is None:
            raise GrammarDefinitionError(f"Rule {self._binding.name!r} is not defined")
        return matcher

    def _describe(self) -> str:
        return self._binding.name

    def _match(self, ctx: MatchContext, pos: int) -> int | None:
        return self.target.match_at(ctx, pos)


__all__ = [
    "Literal",
    "MatchContext",
    "Matcher",
    "Maybe",
    "NamedRef",
    "OneOf",
    "Pattern",
    "Repeat",
    "Sequence",
    "Until",
    "When",
    "as_matcher",
]
