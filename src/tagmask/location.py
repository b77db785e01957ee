"""Source location tracking for error messages.

Tokens only carry an absolute offset; line and column are derived on demand
when an error message or a debugging aid needs them.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Source location for error messages and debugging.

    All positions are 1-indexed (lineno and col_offset start at 1).

    Attributes:
        lineno: Line number (1-indexed)
        col_offset: Column offset (1-indexed)
        offset: Absolute offset in the source string
        source_file: Source file path (optional)

    Examples:
        >>> SourceLocation.from_offset("a\\nbc", 3)
        SourceLocation(lineno=2, col_offset=2, offset=3, source_file=None)

    """

    lineno: int
    col_offset: int
    offset: int = 0
    source_file: str | None = None

    def __str__(self) -> str:
        """Format location for error messages.

        Returns:
            Formatted string like "view.jsp:10:5" or "10:5"
        """
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    @classmethod
    def from_offset(
        cls, source: str, offset: int, source_file: str | None = None
    ) -> SourceLocation:
        """Compute the location of an absolute offset in source.

        Uses str.count/str.rfind so the cost is a single C-level scan of the
        prefix.

        Args:
            source: Full source text
            offset: Absolute offset (clamped to the source bounds)
            source_file: Optional path for display

        Returns:
            SourceLocation for the offset
        """
        offset = max(0, min(offset, len(source)))
        lineno = source.count("\n", 0, offset) + 1
        col_offset = offset - (source.rfind("\n", 0, offset) + 1) + 1
        return cls(
            lineno=lineno,
            col_offset=col_offset,
            offset=offset,
            source_file=source_file,
        )
