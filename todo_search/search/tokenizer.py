"""Turn a raw query string into a flat list of typed tokens.

The tokenizer never raises: every character of the input ends up in some
token (or is whitespace). Structural problems such as a dangling ``path:``
or an unbalanced parenthesis are left for the parser to report.
"""

from __future__ import annotations

import re

from todo_search.search.tokens import Token, TokenType

_KEYWORDS: dict[str, TokenType] = {
    "AND": TokenType.AND,
    "OR": TokenType.OR,
    "NOT": TokenType.NOT,
}

# ``identifier:`` with no space before the colon
_PREFIX_RE = re.compile(r"([A-Za-z]+):")

# Characters that end a bare word or value
_BOUNDARY = frozenset('()"')

RANGE_OPERATOR = ".."


def _unquote(text: str) -> str:
    """Strip one pair of surrounding double quotes and unescape ``\\"``."""
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        return text[1:-1].replace('\\"', '"')
    return text


def is_quoted(text: str) -> bool:
    """Return True if *text* is wrapped in double quotes."""
    text = text.strip()
    return len(text) >= 2 and text.startswith('"') and text.endswith('"')


def split_property_text(inner: str) -> tuple[str, str | None]:
    """Split raw bracket contents into key and value at the first unquoted colon.

    Quotes are preserved so callers can tell whether either side was
    quoted. Returns ``(key, None)`` when there is no colon.
    """
    in_quote = False
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and in_quote:
            i += 2
            continue
        if ch == '"':
            in_quote = not in_quote
        elif ch == ":" and not in_quote:
            return inner[:i].strip(), inner[i + 1 :].strip()
        i += 1
    return inner.strip(), None


class _Tokenizer:
    """Single-use cursor over one query string."""

    def __init__(self, query: str) -> None:
        self.query = query
        self.pos = 0
        self.tokens: list[Token] = []

    def run(self) -> list[Token]:
        query = self.query
        while self.pos < len(query):
            ch = query[self.pos]
            if ch.isspace():
                self.pos += 1
            elif ch == "(":
                self._emit(TokenType.LPAREN, "(", self.pos, self.pos + 1)
            elif ch == ")":
                self._emit(TokenType.RPAREN, ")", self.pos, self.pos + 1)
            elif ch == '"':
                self._read_phrase(TokenType.PHRASE)
            elif ch == "[" and self._read_property():
                continue
            elif ch == "-" and self._read_dash_negation():
                continue
            elif self._read_prefix():
                continue
            else:
                self._read_word()
        return self.tokens

    def _emit(self, token_type: TokenType, value: str, start: int, end: int) -> None:
        self.tokens.append(Token(token_type, value, self.query[start:end], start))
        self.pos = end

    def _scan_bare(self, start: int) -> int:
        """Return the end offset of a bare run starting at *start*."""
        end = start
        while end < len(self.query):
            ch = self.query[end]
            if ch.isspace() or ch in _BOUNDARY:
                break
            end += 1
        return end

    def _scan_phrase(self, start: int) -> int:
        """Return the end offset of a quoted run starting at *start*.

        An unterminated quote runs to the end of the input.
        """
        end = start + 1
        while end < len(self.query):
            ch = self.query[end]
            if ch == "\\" and end + 1 < len(self.query):
                end += 2
                continue
            if ch == '"':
                return end + 1
            end += 1
        return len(self.query)

    def _read_phrase(self, token_type: TokenType) -> None:
        start = self.pos
        end = self._scan_phrase(start)
        raw = self.query[start:end]
        if raw.endswith('"') and len(raw) >= 2:
            value = raw[1:-1]
        else:
            value = raw[1:]
        self._emit(token_type, value.replace('\\"', '"'), start, end)

    def _read_word(self) -> None:
        start = self.pos
        end = self._scan_bare(start)
        word = self.query[start:end]
        token_type = _KEYWORDS.get(word.upper(), TokenType.WORD)
        value = word.lower() if token_type is not TokenType.WORD else word
        self._emit(token_type, value, start, end)

    def _read_dash_negation(self) -> bool:
        """Treat ``-term`` as ``NOT term``."""
        nxt = self.pos + 1
        if nxt >= len(self.query):
            return False
        ch = self.query[nxt]
        if ch.isspace() or ch in ")-":
            return False
        self._emit(TokenType.NOT, "not", self.pos, nxt)
        return True

    def _read_property(self) -> bool:
        """Read ``[key]`` / ``[key:value]``; False if the bracket never closes."""
        start = self.pos
        in_quote = False
        i = start + 1
        while i < len(self.query):
            ch = self.query[i]
            if ch == "\\" and in_quote:
                i += 2
                continue
            if ch == '"':
                in_quote = not in_quote
            elif ch == "]" and not in_quote:
                break
            i += 1
        else:
            return False

        key, value = split_property_text(self.query[start + 1 : i])
        key = _unquote(key)
        if not key:
            return False
        normalized = key if value is None else f"{key}:{_unquote(value)}"
        self._emit(TokenType.PROPERTY, normalized, start, i + 1)
        return True

    def _read_prefix(self) -> bool:
        match = _PREFIX_RE.match(self.query, self.pos)
        if match is None:
            return False
        self._emit(TokenType.PREFIX, match.group(1), match.start(), match.end())
        self._read_prefix_value()
        return True

    def _read_prefix_value(self) -> None:
        """Read the value glued to a prefix, splitting off a trailing range."""
        start = self.pos
        if start >= len(self.query):
            return
        ch = self.query[start]
        if ch.isspace() or ch in "()":
            return

        if ch == '"':
            self._read_phrase(TokenType.PREFIX_VALUE_QUOTED)
        else:
            end = self._scan_bare(start)
            value = self.query[start:end]
            split = value.find(RANGE_OPERATOR)
            if split > 0:
                end = start + split
                value = value[:split]
            self._emit(TokenType.PREFIX_VALUE, value, start, end)

        if self.query.startswith(RANGE_OPERATOR, self.pos):
            self._emit(TokenType.RANGE, RANGE_OPERATOR, self.pos, self.pos + 2)
            self._read_range_end()

    def _read_range_end(self) -> None:
        start = self.pos
        if start >= len(self.query):
            return
        ch = self.query[start]
        if ch == '"':
            self._read_phrase(TokenType.PHRASE)
        elif not ch.isspace() and ch not in "()":
            end = self._scan_bare(start)
            self._emit(TokenType.WORD, self.query[start:end], start, end)


def tokenize(query: str) -> list[Token]:
    """Tokenize a search query.

    Args:
        query: The raw query string.

    Returns:
        Tokens in left-to-right source order.
    """
    return _Tokenizer(query).run()
