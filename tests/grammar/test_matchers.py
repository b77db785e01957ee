"""Tests for the matcher combinators.

Each combinator is tested in isolation over small hand-written grammars; the
JSP grammar itself is covered in test_jsp_grammar.py.
"""

import pytest

from tagmask.errors import DuplicateAttributeError, GrammarDefinitionError
from tagmask.grammar.matchers import (
    Literal,
    MatchContext,
    Maybe,
    OneOf,
    Pattern,
    Repeat,
    Sequence,
    Until,
    When,
    as_matcher,
)
from tagmask.grammar.metadata import MetadataStore
from tagmask.grammar.registry import GrammarBuilder


class TestLiteral:
    """Fixed-string matching."""

    def test_matches_prefix(self) -> None:
        assert Literal("<%").attempt("<% x %>") == "<%"

    def test_fails_without_consuming(self) -> None:
        ctx = MatchContext("abc")
        assert Literal("x").match_at(ctx, 0) is None

    def test_matches_at_offset(self) -> None:
        assert Literal("b").attempt("abc", 1) == "b"

    def test_empty_literal_rejected(self) -> None:
        with pytest.raises(GrammarDefinitionError):
            Literal("")

    def test_description_is_quoted(self) -> None:
        assert Literal("%>").description == '"%>"'

    def test_as_matcher_wraps_strings(self) -> None:
        matcher = as_matcher("abc")
        assert isinstance(matcher, Literal)
        assert as_matcher(matcher) is matcher


class TestPattern:
    """Anchored regex matching."""

    def test_anchored_at_cursor(self) -> None:
        assert Pattern("[a-z]+").attempt("abc123") == "abc"
        assert Pattern("[a-z]+").attempt("1abc") is None

    def test_zero_width_match_is_failure(self) -> None:
        assert Pattern("a*").attempt("bbb") is None

    def test_lookahead_respects_full_source(self) -> None:
        assert Pattern("a(?=b)").attempt("ab") == "a"
        assert Pattern("a(?=b)").attempt("ac") is None

    def test_description(self) -> None:
        assert Pattern("[0-9]").description == "/[0-9]/"


class TestSequence:
    """All children in order."""

    def test_all_children_match(self) -> None:
        matcher = Sequence("<", Pattern("[a-z]+"), ">")
        assert matcher.attempt("<abc>rest") == "<abc>"

    def test_short_circuits_on_failure(self) -> None:
        matcher = Sequence("<", Pattern("[a-z]+"), ">")
        assert matcher.attempt("<abc") is None

    def test_description_joins_children(self) -> None:
        assert Sequence("a", "b").description == '"a" "b"'


class TestOneOf:
    """First success in declaration order."""

    def test_first_match_wins(self) -> None:
        matcher = OneOf("<%", "<%=")
        assert matcher.attempt("<%= x") == "<%"

    def test_order_encodes_precedence(self) -> None:
        matcher = OneOf("<%=", "<%")
        assert matcher.attempt("<%= x") == "<%="

    def test_no_match(self) -> None:
        assert OneOf("a", "b").attempt("c") is None

    def test_description(self) -> None:
        assert OneOf("a", "b").description == '"a" | "b"'


class TestMaybe:
    """Optional matching."""

    def test_zero_width_success(self) -> None:
        matcher = Sequence("a", Maybe(" "), "b")
        assert matcher.attempt("ab") == "ab"
        assert matcher.attempt("a b") == "a b"

    def test_attempt_of_absent_optional_is_empty(self) -> None:
        assert Maybe("x").attempt("y") == ""

    def test_description(self) -> None:
        assert Maybe("a").description == '"a"?'


class TestRepeat:
    """One or more, greedy."""

    def test_requires_one_match(self) -> None:
        assert Repeat("ab").attempt("x") is None

    def test_greedy(self) -> None:
        assert Repeat("ab").attempt("abababx") == "ababab"

    def test_never_backtracks(self) -> None:
        matcher = Sequence(Repeat(Pattern("[a-z]")), "z")
        assert matcher.attempt("abz") is None

    def test_stops_without_progress(self) -> None:
        assert Repeat(Maybe("a")).attempt("b") is None

    def test_zero_or_more_with_maybe(self) -> None:
        matcher = Sequence("<", Maybe(Repeat(" ")), ">")
        assert matcher.attempt("<>") == "<>"
        assert matcher.attempt("<   >") == "<   >"


class TestUntil:
    """Consume up to and including a terminator."""

    def test_includes_terminator(self) -> None:
        matcher = Sequence("<%", Until(Pattern("(?s)."), "%>"))
        assert matcher.attempt("<% a %> b") == "<% a %>"

    def test_terminator_tried_first(self) -> None:
        assert Until(Pattern("."), "x").attempt("x") == "x"

    def test_stops_at_first_terminator(self) -> None:
        assert Until(Pattern("."), "%>").attempt("a%>b%>") == "a%>"

    def test_unterminated_fails_with_note(self) -> None:
        ctx = MatchContext("<% foo()")
        matcher = Sequence("<%", Until(Pattern("(?s)."), "%>"))

        assert matcher.match_at(ctx, 0) is None
        assert ctx.unterminated == ('"%>"', 2)

    def test_body_failure_is_plain_failure(self) -> None:
        ctx = MatchContext("ab1%>")
        assert Until(Pattern("[a-z]"), "%>").match_at(ctx, 0) is None
        assert ctx.unterminated is None

    def test_method_form(self) -> None:
        matcher = Pattern(".").until("!")
        assert isinstance(matcher, Until)
        assert matcher.terminator.description == '"!"'
        assert matcher.attempt("hey!") == "hey!"


class TestWhen:
    """Predicate-selected alternatives."""

    def test_then_branch(self) -> None:
        matcher = When(lambda store: store.get("on", False), "${")
        assert matcher.attempt("${x}", store=MetadataStore({"on": True})) == "${"

    def test_fails_without_otherwise(self) -> None:
        matcher = When(lambda store: store.get("on", False), "${")
        assert matcher.attempt("${x}", store=MetadataStore({"on": False})) is None

    def test_otherwise_branch(self) -> None:
        matcher = When(lambda store: store.get("on", False), "${", "$")
        assert matcher.attempt("${x}", store=MetadataStore()) == "$"

    def test_predicate_evaluated_per_attempt(self) -> None:
        store = MetadataStore({"on": True})
        matcher = When(lambda s: s.get("on"), "a")
        assert matcher.attempt("a", store=store) == "a"
        store.set("on", False)
        assert matcher.attempt("a", store=store) is None


class TestHooks:
    """on_enter/on_match and staged metadata."""

    def test_on_match_receives_matched_text(self) -> None:
        seen: list[str] = []
        matcher = Pattern("[a-z]+").on_match(lambda text, store: seen.append(text))

        matcher.attempt("abc1")
        assert seen == ["abc"]

    def test_on_match_not_called_on_failure(self) -> None:
        seen: list[str] = []
        matcher = Pattern("[a-z]+").on_match(lambda text, store: seen.append(text))

        matcher.attempt("123")
        assert seen == []

    def test_on_enter_runs_every_attempt(self) -> None:
        calls: list[int] = []
        matcher = Literal("a").on_enter(lambda store: calls.append(1))

        matcher.attempt("b")
        matcher.attempt("a")
        assert len(calls) == 2

    def test_writes_committed_on_success(self) -> None:
        store = MetadataStore()
        matcher = Literal("a").on_match(lambda text, s: s.set("seen", text))

        matcher.attempt("a", store=store)
        assert store.get("seen") == "a"
        assert store.depth == 0

    def test_abandoned_branch_does_not_leak(self) -> None:
        store = MetadataStore()
        leaky = Sequence(
            Literal("a").on_match(lambda text, s: s.set("branch", "first")),
            "x",
        )
        matcher = OneOf(leaky, "ab")

        assert matcher.attempt("ab", store=store) == "ab"
        assert "branch" not in store
        assert store.depth == 0

    def test_enter_writes_rolled_back_on_failure(self) -> None:
        store = MetadataStore({"names": frozenset({"x"})})
        matcher = Sequence("<", "never").on_enter(lambda s: s.set("names", frozenset()))

        matcher.attempt("<a", store=store)
        assert store.get("names") == frozenset({"x"})

    def test_hook_error_is_fatal(self) -> None:
        def reject(text: str, store: MetadataStore) -> DuplicateAttributeError:
            return DuplicateAttributeError(text)

        matcher = OneOf(Literal("a").on_match(reject), "a")

        with pytest.raises(DuplicateAttributeError, match="'a'"):
            matcher.attempt("a")

    def test_fatal_error_stops_enclosing_matchers(self) -> None:
        def reject(text: str, store: MetadataStore) -> DuplicateAttributeError:
            return DuplicateAttributeError(text)

        ctx = MatchContext("ab")
        matcher = Sequence(Maybe(Literal("a").on_match(reject)), Maybe("b"))

        assert matcher.match_at(ctx, 0) is None
        assert ctx.fatal is not None
        error, offset = ctx.fatal
        assert error.attribute == "a"
        assert offset == 0


class TestDescriptions:
    """Failure-message descriptions."""

    def test_named_overrides(self) -> None:
        assert Sequence("a", "b").named("PAIR").description == "PAIR"

    def test_nested_descriptions_are_grouped(self) -> None:
        matcher = Repeat(Sequence("a", "b"))
        assert matcher.description == '("a" "b")+'

    def test_repr(self) -> None:
        assert repr(Literal("a")) == '<Literal "a">'


class TestRecursion:
    """NamedRef resolves through the grammar, so rules can recurse."""

    def test_self_recursive_rule(self) -> None:
        builder = GrammarBuilder()
        builder.define(
            "NESTED",
            Sequence("{", Maybe(Repeat(OneOf(builder.ref("NESTED"), Pattern("[^{}]")))), "}"),
        )
        grammar = builder.build()

        assert grammar["NESTED"].attempt("{a{b{c}}d}e") == "{a{b{c}}d}"
        assert grammar["NESTED"].attempt("{a{b}") is None

    def test_ref_description_is_rule_name(self) -> None:
        builder = GrammarBuilder()
        ref = builder.ref("LATER")
        builder.define("LATER", "x")
        builder.build()

        assert ref.description == "LATER"
        assert ref.target.description == "LATER"
