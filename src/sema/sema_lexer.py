"""
Lexical analyzer for the SEMA language.

Source text is split into whitespace-delimited words. Each word is consumed
left to right: every pattern in `LEXICAL_PATTERNS` is anchored at the current
position, the longest match wins, and on equal length the pattern listed later
wins. That tie-break is what turns the identifier `int` into a `primitive` and
the identifier `if` into the keyword `if`.

Classes:
    Token: A lexeme with its category and source position.
    Lexer: Converts source text into a sequence of tokens.

Functions:
    tokenize(text): Convenience wrapper returning a list of tokens.

Behavior:
    - Never raises. A character no pattern accepts becomes a one-character
      token of category `Error`; the parser reports it as a `LexError`.
    - Stateless: the same text always produces the same tokens.

Example:
    >>> [str(t) for t in tokenize("let x: int <- 4;")]
    ['(let, let)', '(id, x)', '(:, :)', '(primitive, int)', '(<-, <-)', '(num, 4)', '(;, ;)']
"""

import re
from collections.abc import Iterator
from typing import Any

from sema.sema_constants import ERROR_CATEGORY, LEXICAL_PATTERNS

_WORD = re.compile(r"\S+")


class Token:
    """Represents a single lexical token.

    Attributes:
        category (str): Structural category (`id`, `num`, ...), the lexeme
            itself for keywords and punctuation, or `Error`.
        lexeme (str): The matched source text.
        line (int): 1-based line number of the first character.
        col (int): 1-based column number of the first character.
    """

    def __init__(self, category: str, lexeme: str, line: int = 0, col: int = 0):
        self.category = category
        self.lexeme = lexeme
        self.line = line
        self.col = col

    def __repr__(self) -> str:
        return f"Token({self.category}, {self.lexeme})"

    def __str__(self) -> str:
        return f"({self.category}, {self.lexeme})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.category == other.category
            and self.lexeme == other.lexeme
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.category, self.lexeme, self.line, self.col))


class Lexer:
    """Maximal-munch tokenizer driven by an ordered pattern table.

    Attributes:
        text (str): The source text to tokenize.
        patterns (list[tuple[re.Pattern[str], str | None]]): Compiled pattern
            table; a None category means the lexeme is its own category.
    """

    def __init__(
        self,
        text: str,
        patterns: list[tuple[str, str | None]] | None = None,
    ) -> None:
        self.text = text
        self.patterns = [
            (re.compile(regex), category)
            for regex, category in (patterns or LEXICAL_PATTERNS)
        ]

    def longest_match(self, word: str, pos: int) -> tuple[str, str]:
        """Returns `(category, lexeme)` for the longest pattern match at `pos`.

        Falls back to a one-character `Error` token when nothing matches.
        """
        best = (ERROR_CATEGORY, word[pos])
        matched = False
        for regex, category in self.patterns:
            m = regex.match(word, pos)
            if m is None or m.end() == pos:
                continue
            lexeme = m.group()
            # later patterns win ties
            if not matched or len(lexeme) >= len(best[1]):
                best = (category or lexeme, lexeme)
                matched = True
        return best

    def tokens(self) -> Iterator[Token]:
        """Yields the tokens of the whole text in source order."""
        for line_no, line in enumerate(self.text.split("\n"), start=1):
            for word_match in _WORD.finditer(line):
                word = word_match.group()
                pos = 0
                while pos < len(word):
                    category, lexeme = self.longest_match(word, pos)
                    yield Token(
                        category, lexeme, line_no, word_match.start() + pos + 1
                    )
                    pos += len(lexeme)


def tokenize(text: str) -> list[Token]:
    """Tokenizes `text` into a list of tokens."""
    return list(Lexer(text).tokens())


__all__ = ["Lexer", "Token", "tokenize"]
