"""Named grammar rules with two-phase construction.

Rules are declared first (each name gets a Binding handle that NamedRef
points at), then bound to matchers in any order. Because references go
through the handle, a rule may mention rules defined after it, or itself.

Thread Safety:
Grammar is immutable after build(). Safe to share.
Use GrammarBuilder for mutable construction.

Example:
    >>> builder = GrammarBuilder()
    >>> builder.declare("VALUE")
    >>> builder.define("PAIR", Sequence("(", builder.ref("VALUE"), ")"))
    >>> builder.define("VALUE", OneOf(builder.ref("PAIR"), "x"))
    >>> grammar = builder.build()
    >>> grammar["VALUE"].attempt("((x))")
    '((x))'
"""

from __future__ import annotations

from tagmask.errors import GrammarDefinitionError
from tagmask.grammar.matchers import Matcher, NamedRef, as_matcher


class Binding:
    """Handle for one rule name; filled in when the rule is defined."""

    __slots__ = ("name", "matcher")

    def __init__(self, name: str) -> None:
        self.name = name
        self.matcher: Matcher | None = None

    def __repr__(self) -> str:
        state = "bound" if self.matcher is not None else "unbound"
        return f"Binding({self.name!r}, {state})"


class Grammar:
    """Immutable set of named rules.

    Thread Safety:
        Immutable after creation. Safe to share across threads.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: dict[str, Matcher]) -> None:
        """Initialize grammar with pre-built rules.

        Use GrammarBuilder to create instances.
        """
        self._rules = rules

    def __getitem__(self, name: str) -> Matcher:
        try:
            return self._rules[name]
        except KeyError:
            raise KeyError(f"Unknown grammar rule {name!r}") from None

    def get(self, name: str) -> Matcher | None:
        return self._rules.get(name)

    @property
    def names(self) -> frozenset[str]:
        """Get all rule names."""
        return frozenset(self._rules)

    def __contains__(self, name: str) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)


class GrammarBuilder:
    """Mutable builder for Grammar.

    Example:
        >>> builder = GrammarBuilder()
        >>> builder.define("SPACE", Pattern(r"[ \\t]+"))
        >>> grammar = builder.build()
    """

    __slots__ = ("_bindings",)

    def __init__(self) -> None:
        """Initialize empty builder."""
        self._bindings: dict[str, Binding] = {}

    def declare(self, *names: str) -> GrammarBuilder:
        """Reserve rule names so they can be referenced before definition.

        Returns:
            Self for chaining
        """
        for name in names:
            self._bindings.setdefault(name, Binding(name))
        return self

    def ref(self, name: str) -> NamedRef:
        """Reference a rule by name, declaring it if needed."""
        self.declare(name)
        return NamedRef(self._bindings[name])

    def define(self, name: str, matcher: Matcher | str) -> Matcher:
        """Bind a rule name to a matcher.

        The matcher's description becomes the rule name unless it already
        has an explicit one.

        Returns:
            The bound matcher, for use in later definitions

        Raises:
            GrammarDefinitionError: If the name is already bound
        """
        self.declare(name)
        binding = self._bindings[name]
        if binding.matcher is not None:
            raise GrammarDefinitionError(f"Rule {name!r} is already defined")
        matcher = as_matcher(matcher)
        if matcher._name is None:
            matcher.named(name)
        binding.matcher = matcher
        return matcher

    def build(self) -> Grammar:
        """Build immutable grammar from the defined rules.

        Raises:
            GrammarDefinitionError: If any declared or referenced rule was
                never defined
        """
        unbound = sorted(name for name, b in self._bindings.items() if b.matcher is None)
        if unbound:
            raise GrammarDefinitionError(f"Undefined grammar rules: {', '.join(unbound)}")
        return Grammar({name: b.matcher for name, b in self._bindings.items()})  # type: ignore[misc]

    def __len__(self) -> int:
        """Number of declared rules."""
        return len(self._bindings)
