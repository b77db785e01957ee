"""Logger names for tagmask.

Every module logs under the "tagmask" hierarchy, so one call enables the
lexer, substitution and restore messages together:

    import logging
    logging.getLogger("tagmask").setLevel(logging.DEBUG)

Messages are debug-level summaries of each pass, e.g. "Lexed 12 tokens from
412 characters", "Substituted 3 tags in 412 characters" and "Restored 3 tags into
418 characters". tagmask installs no handlers; configuring output is left to
the application.
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the "tagmask." namespace.

    Args:
        name: Logger name (typically __name__)

    Example:
        >>> get_logger("tagmask.lexer.core").name
        'tagmask.lexer.core'
        >>> get_logger("jsp_check").name
        'tagmask.jsp_check'
    """
    if not (name == "tagmask" or name.startswith("tagmask.")):
        name = f"tagmask.{name}"
    return logging.getLogger(name)
