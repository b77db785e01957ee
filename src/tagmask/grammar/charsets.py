"""Character classes for JSP/XML lexical productions.

Ranges are the XML 1.0 (Fifth Edition) Name production, section 2.3,
split into the letter/digit/combining/extender groups the grammar refers
to. Each constant is the *body* of a regex character class so classes can
be combined (e.g. f"[{LETTER}{DIGIT}]").

Reference: https://www.w3.org/TR/xml/#NT-Name

Usage:
    from tagmask.grammar.charsets import NAME_START_CHAR, NAME_CHAR

    NAME_RE = re.compile(f"[{NAME_START_CHAR}][{NAME_CHAR}]*")
"""

# NameStartChar minus ":" and "_"
LETTER = (
    "A-Za-z"
    "\u00c0-\u00d6"
    "\u00d8-\u00f6"
    "\u00f8-\u02ff"
    "\u0370-\u037d"
    "\u037f-\u1fff"
    "\u200c-\u200d"
    "\u2070-\u218f"
    "\u2c00-\u2fef"
    "\u3001-\ud7ff"
    "\uf900-\ufdcf"
    "\ufdf0-\ufffd"
    "\U00010000-\U000effff"
)

DIGIT = "0-9"

# NameChar additions that may not start a name
COMBINING_CHAR = "\u0300-\u036f\u203f-\u2040"

EXTENDER = "\u00b7"

NAME_START_CHAR = f":_{LETTER}"

NAME_CHAR = f"{NAME_START_CHAR}\\-.{DIGIT}{COMBINING_CHAR}{EXTENDER}"

# Namespaces in XML: names without a colon, used on each side of prefix:name
NC_NAME_START_CHAR = f"_{LETTER}"

NC_NAME_CHAR = f"{NC_NAME_START_CHAR}\\-.{DIGIT}{COMBINING_CHAR}{EXTENDER}"

# XML 1.0 section 2.2: any Unicode character, excluding the surrogate
# blocks, FFFE, and FFFF
CHAR = "\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff"

# XML 1.0 section 2.3
SPACE = "\x20\t\r\n"
