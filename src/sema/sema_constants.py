"""
Lexical vocabulary of the SEMA language.

The tokenizer walks `LEXICAL_PATTERNS` in order. Generic patterns (identifiers,
numbers) come first so that an equal-length match from a later, more specific
pattern (keywords, primitive names, boolean connectives) replaces them. Do not
reorder this table.

Exports:
    - PRIMITIVES, BOOL_OPS, REL_OPS, KEYWORDS
    - LEXICAL_PATTERNS: ordered (regex, category) pairs; a category of None
      means "the lexeme is its own category".
    - ANY_TYPE, ARITHMETIC_PRIMITIVES
    - BUILTIN_SIGNATURES: parameter/return primitive names of the built-ins
"""

import re

ANY_TYPE = "ANY"

PRIMITIVES: tuple[str, ...] = ("int", "float", "bool", "none")

ARITHMETIC_PRIMITIVES: frozenset[str] = frozenset({"int", "float", "bool"})

BOOL_OPS: tuple[str, ...] = ("and", "or", "xor", "nor", "nand")

REL_OPS: tuple[str, ...] = (">=", "<=", "==", "<", ">", "!=")

KEYWORDS: tuple[str, ...] = (
    "if",
    "then",
    "else",
    "fi",
    "while",
    "do",
    "done",
    "let",
    "fun",
    "begin",
    "end",
    "return",
    "<-",
    "->",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ";",
    ":",
    ",",
)


def alternation(words: tuple[str, ...]) -> str:
    """Builds a regex alternation that prefers the longest alternative.

    Python's `re` takes the first alternative that matches, so `do|done`
    would never produce `done`.
    """
    ordered = sorted(words, key=len, reverse=True)
    return "|".join(re.escape(w) for w in ordered)


LEXICAL_PATTERNS: list[tuple[str, str | None]] = [
    (r"[a-zA-Z]+", "id"),
    (r"[0-9]+", "num"),
    (r"[0-9]+\.[0-9]+", "float"),
    (r"[+\-]", "addop"),
    (r"[*/]", "mulop"),
    (alternation(PRIMITIVES), "primitive"),
    (alternation(BOOL_OPS), "boolop"),
    (alternation(REL_OPS), "relop"),
    (alternation(KEYWORDS), None),
]

ERROR_CATEGORY = "Error"
EOF_CATEGORY = "EOF"

# name -> ((param id, param primitive), ...), return primitive
BUILTIN_SIGNATURES: dict[str, tuple[tuple[tuple[str, str], ...], str]] = {
    "print": ((("x", ANY_TYPE),), "none"),
    "readInt": ((), "int"),
    "readFloat": ((), "float"),
    "readBool": ((), "bool"),
}
