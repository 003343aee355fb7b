"""
Character-level constants shared by the formula lexer.

Exports:
    - EOF_CHAR: sentinel returned by the cursor once the source is exhausted
    - ESCAPE_CHARACTER_MAP: escape sequence table for quoted/template strings
    - is_* predicates used to classify source characters
"""

EOF_CHAR: str = "\0"

ESCAPE_CHARACTER_MAP: dict[str, str] = {
    "n": "\n",
    "f": "\f",
    "t": "\t",
    "r": "\r",
    "'": "'",
    '"': '"',
    "`": "`",
    "\\": "\\",
}

QUOTES: frozenset[str] = frozenset({"'", '"', "`"})
INLINE_WHITESPACE: frozenset[str] = frozenset({" ", "\t"})


def is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def is_number_continuation(c: str) -> bool:
    return c == "_" or is_digit(c)


def is_hex_digit(c: str) -> bool:
    return is_digit(c) or "a" <= c <= "f" or "A" <= c <= "F"


def is_octal_digit(c: str) -> bool:
    return "0" <= c <= "7"


def is_binary_digit(c: str) -> bool:
    return c in ("0", "1")


def is_name_start(c: str) -> bool:
    return c == "_" or "a" <= c <= "z" or "A" <= c <= "Z"


def is_name_continuation(c: str) -> bool:
    return is_name_start(c) or is_digit(c)
