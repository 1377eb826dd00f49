"""Token types and the binding-power table used by the Pratt parser."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(str, Enum):
    """Kinds of tokens produced by the tokenizer."""

    WORD = "word"
    PHRASE = "phrase"
    PREFIX = "prefix"
    PREFIX_VALUE = "prefix_value"
    PREFIX_VALUE_QUOTED = "prefix_value_quoted"
    PROPERTY = "property"
    AND = "and"
    OR = "or"
    NOT = "not"
    LPAREN = "lparen"
    RPAREN = "rparen"
    RANGE = "range"


@dataclass(frozen=True)
class Token:
    """A single lexical unit of a search query.

    Attributes:
        type: The token kind.
        value: Normalized value (quotes, colons and brackets stripped).
        original: The raw source substring, kept for error messages.
        position: Zero-based character offset in the query.
    """

    type: TokenType
    value: str
    original: str
    position: int

    @property
    def end(self) -> int:
        """Offset one past the last source character of this token."""
        return self.position + len(self.original)

    def __repr__(self) -> str:
        return f"Token({self.type.value}, {self.value!r}, @{self.position})"


# Binding powers, higher binds tighter. Only the relative order matters.
BP_NONE = 0
BP_OR = 10
BP_AND = 20
BP_NOT = 30
BP_IMPLICIT = 40
BP_RANGE = 50

# Tokens that start a new operand when seen in infix position. They are
# joined to the left-hand side with an implicit AND.
IMPLICIT_JOIN_TYPES: frozenset[TokenType] = frozenset(
    {
        TokenType.WORD,
        TokenType.PHRASE,
        TokenType.PREFIX,
        TokenType.PROPERTY,
        TokenType.LPAREN,
    }
)

_BINDING_POWERS: dict[TokenType, int] = {
    TokenType.OR: BP_OR,
    TokenType.AND: BP_AND,
    TokenType.NOT: BP_NOT,
    TokenType.RANGE: BP_RANGE,
    **{token_type: BP_IMPLICIT for token_type in IMPLICIT_JOIN_TYPES},
}


def binding_power(token_type: TokenType) -> int:
    """Return the binding power of a token type.

    ``rparen`` and value tokens have no binding power, so they always
    terminate the expression currently being parsed.
    """
    return _BINDING_POWERS.get(token_type, BP_NONE)
