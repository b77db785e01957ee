"""Ordered record of substituted constructs.

The registry index is the only key restoration uses: the N-th placeholder in
formatted text stands for record N.

Thread Safety:
TagRegistry instances are local to one substitute/restore cycle.
TagRecord is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from tagmask.substitution.placeholders import PLACEHOLDER_KINDS, PlaceholderKind
from tagmask.tokens import TokenType


@dataclass(frozen=True, slots=True)
class TagRecord:
    """Original text of one substituted construct.

    Attributes:
        original: Exact source text of the construct
        type: Token type the lexer gave it
    """

    original: str
    type: TokenType

    @property
    def placeholder_kind(self) -> PlaceholderKind:
        """Placeholder family used for this record."""
        return PLACEHOLDER_KINDS[self.type]


@dataclass(slots=True)
class TagRegistry:
    """Append-only list of TagRecords in emission order.

    Usage:
        registry = TagRegistry()
        index = registry.record("${name}", TokenType.EL_EXPRESSION)
        registry[index].original  # "${name}"

    """

    records: list[TagRecord] = field(default_factory=list)

    def record(self, original: str, token_type: TokenType) -> int:
        """Append a record.

        Returns:
            Its index, which is also the ordinal embedded in identifier
            placeholders
        """
        self.records.append(TagRecord(original, token_type))
        return len(self.records) - 1

    @property
    def originals(self) -> list[str]:
        """Original texts, in order."""
        return [record.original for record in self.records]

    def __getitem__(self, index: int) -> TagRecord:
        return self.records[index]

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[TagRecord]:
        return iter(self.records)
