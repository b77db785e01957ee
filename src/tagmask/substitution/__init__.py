"""Reversible substitution of template constructs.

substitute_tags() turns a JSP source into text a plain script or style
formatter can read; restore_tags() undoes it on the formatter's output.

Usage:
    >>> from tagmask.substitution import restore_tags, substitute_tags
    >>> transformed, tags = substitute_tags("<a:b>text</a:b>")
    >>> transformed
    '/*ʃ*/text/*ʅʅ*/'
    >>> restore_tags(transformed, tags)
    '<a:b>text</a:b>'

"""

from tagmask.substitution.placeholders import PLACEHOLDER_PATTERN, PlaceholderKind
from tagmask.substitution.registry import TagRecord, TagRegistry
from tagmask.substitution.restore import restore_tags
from tagmask.substitution.substitute import substitute_tags

__all__ = [
    "PLACEHOLDER_PATTERN",
    "PlaceholderKind",
    "TagRecord",
    "TagRegistry",
    "restore_tags",
    "substitute_tags",
]
