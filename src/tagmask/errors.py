"""Exception classes for tagmask.

Every failure inside the core is local to one file and non-recoverable:
the lexer stops at the first construct it cannot delimit, and restoration
refuses to guess when placeholders and records disagree.
"""

from __future__ import annotations

import json


class TagmaskError(Exception):
    """Base exception for all tagmask errors.

    Subclass this for specific error categories.
    """

    pass


class GrammarDefinitionError(TagmaskError):
    """Error while building a grammar.

    Raised for duplicate or unbound rule names. Indicates a bug in a grammar
    definition, never bad input.
    """

    pass


class LexError(TagmaskError):
    """Error while tokenizing a template source.

    Carries the excerpt of remaining input where matching stopped. Grammar
    hooks create errors without a location; the lexer attaches one with
    locate() before raising.
    """

    def __init__(
        self,
        message: str,
        excerpt: str = "",
        offset: int | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize lex error with optional location.

        Args:
            message: Error description
            excerpt: Start of the unmatched input (already truncated)
            offset: Absolute offset where matching stopped
            lineno: Line number where error occurred (1-indexed)
            col_offset: Column offset where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.excerpt = excerpt
        self.offset = offset
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file
        super().__init__(message)

    def locate(
        self,
        *,
        excerpt: str,
        offset: int,
        lineno: int,
        col_offset: int,
        source_file: str | None = None,
    ) -> LexError:
        """Attach the position where matching stopped.

        Returns:
            self, so the call can sit in a raise statement
        """
        self.excerpt = excerpt
        self.offset = offset
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file
        return self

    def __str__(self) -> str:
        location = ""
        if self.source_file:
            location = f"{self.source_file}:"
        if self.lineno is not None:
            location += f"{self.lineno}:"
            if self.col_offset is not None:
                location += f"{self.col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        quoted = json.dumps(self.excerpt, ensure_ascii=False)
        return f"{location}{self.message} at: {quoted}"


class GrammarMismatchError(LexError):
    """No production matched at the current position."""

    def __init__(
        self,
        expected: str,
        excerpt: str = "",
        *,
        offset: int | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        self.expected = expected
        super().__init__(
            f"Failed to match {expected}",
            excerpt,
            offset=offset,
            lineno=lineno,
            col_offset=col_offset,
            source_file=source_file,
        )


class UnterminatedConstructError(LexError):
    """Input ended before a construct's terminator was found."""

    def __init__(
        self,
        terminator: str,
        excerpt: str = "",
        *,
        offset: int | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        self.terminator = terminator
        super().__init__(
            f"Unexpected end-of-input trying to match {terminator}",
            excerpt,
            offset=offset,
            lineno=lineno,
            col_offset=col_offset,
            source_file=source_file,
        )


class DuplicateAttributeError(LexError):
    """The same attribute name appears twice on one tag."""

    def __init__(
        self,
        attribute: str,
        excerpt: str = "",
        *,
        offset: int | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        self.attribute = attribute
        super().__init__(
            f"Duplicate attribute {attribute!r}",
            excerpt,
            offset=offset,
            lineno=lineno,
            col_offset=col_offset,
            source_file=source_file,
        )


class MismatchedEndTagError(LexError):
    """A custom tag end does not close the innermost open tag."""

    def __init__(
        self,
        tag_name: str,
        message: str,
        excerpt: str = "",
        *,
        offset: int | None = None,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        self.tag_name = tag_name
        super().__init__(
            message,
            excerpt,
            offset=offset,
            lineno=lineno,
            col_offset=col_offset,
            source_file=source_file,
        )


class SubstitutionError(TagmaskError):
    """Error while replacing template constructs with placeholders."""

    pass


class UnderlengthPlaceholderError(SubstitutionError):
    """A construct is too short to hold a recognizable placeholder.

    Points at a grammar or placeholder-table bug rather than bad input.
    """

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Invalid (underlength) tag: {tag!r}")


class RestoreError(TagmaskError):
    """Placeholders in formatted text do not line up with the tag registry."""

    pass
