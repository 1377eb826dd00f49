"""Pratt parser turning search tokens into an AST.

Precedence, loosest first: ``OR``, ``AND``, ``NOT``, juxtaposition
(implicit AND), ``..``. Juxtaposed operands are collected into one flat
``AndNode`` so that ``a:1 b:2 c:3`` parses as a single three-child node.
"""

from __future__ import annotations

import logging

from todo_search.exceptions import SearchSyntaxError
from todo_search.search.ast_nodes import (
    DATE_FIELDS,
    AndNode,
    NotNode,
    OrNode,
    PhraseNode,
    PrefixFilter,
    PropertyFilter,
    RangeFilter,
    SearchNode,
    TermNode,
)
from todo_search.search.tokenizer import is_quoted, split_property_text, tokenize
from todo_search.search.tokens import (
    BP_IMPLICIT,
    BP_NONE,
    IMPLICIT_JOIN_TYPES,
    Token,
    TokenType,
    binding_power,
)

logger = logging.getLogger(__name__)

_PREFIX_VALUE_TYPES = frozenset(
    {
        TokenType.PREFIX_VALUE,
        TokenType.PREFIX_VALUE_QUOTED,
        TokenType.WORD,
        TokenType.PHRASE,
    }
)
_QUOTED_VALUE_TYPES = frozenset({TokenType.PREFIX_VALUE_QUOTED, TokenType.PHRASE})


def _conjoin(left: SearchNode, right: SearchNode, position: int) -> AndNode:
    """Implicit AND: extend an existing AND node or start a new one."""
    if isinstance(left, AndNode):
        left.children.append(right)
        return left
    return AndNode(children=[left, right], position=position)


def _join(
    node_type: type[AndNode] | type[OrNode],
    left: SearchNode,
    right: SearchNode,
    position: int,
) -> AndNode | OrNode:
    """Explicit AND/OR: merge same-operator operands into one n-ary node."""
    children: list[SearchNode] = []
    for operand in (left, right):
        if isinstance(operand, node_type):
            children.extend(operand.children)
        else:
            children.append(operand)
    return node_type(children=children, position=position)


class PrattParser:
    """Single-use parser over one token list.

    The cursor lives on the instance; create a new parser per parse.
    """

    def __init__(self, tokens: list[Token], query: str | None = None) -> None:
        self.tokens = tokens
        self.query = query
        self.pos = 0

    # -- cursor helpers -------------------------------------------------

    def _peek(self) -> Token | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def _end_position(self) -> int:
        if self.query is not None:
            return len(self.query)
        if self.tokens:
            return self.tokens[-1].end
        return 0

    def _error(self, message: str, position: int) -> SearchSyntaxError:
        return SearchSyntaxError(message, position, self.query)

    # -- entry point ----------------------------------------------------

    def parse(self) -> SearchNode:
        if not self.tokens:
            raise self._error("Empty search query", 0)

        node = self.parse_expression(BP_NONE)

        leftover = self._peek()
        if leftover is not None:
            if leftover.type is TokenType.RPAREN:
                raise self._error("Unmatched closing parenthesis", leftover.position)
            raise self._error(f"Unexpected token: {leftover.original}", leftover.position)
        return node

    # -- Pratt core -----------------------------------------------------

    def parse_expression(self, min_bp: int) -> SearchNode:
        left = self.parse_prefix()

        while (token := self._peek()) is not None:
            bp = binding_power(token.type)
            if bp <= min_bp:
                break

            if token.type is TokenType.NOT:
                # "a NOT b" means "a AND (NOT b)"
                self._advance()
                operand = self.parse_expression(BP_IMPLICIT)
                left = _conjoin(left, NotNode(child=operand, position=token.position), token.position)
            elif token.type in IMPLICIT_JOIN_TYPES:
                right = self.parse_expression(BP_IMPLICIT)
                left = _conjoin(left, right, token.position)
            else:
                self._advance()
                left = self.parse_infix(left, token)

        return left

    def parse_prefix(self) -> SearchNode:
        token = self._peek()
        if token is None:
            raise self._error("Unexpected end of query", self._end_position())

        if token.type is TokenType.NOT:
            self._advance()
            operand = self.parse_expression(BP_IMPLICIT)
            return NotNode(child=operand, position=token.position)

        if token.type is TokenType.LPAREN:
            self._advance()
            inner = self.parse_expression(BP_NONE)
            closing = self._peek()
            if closing is None or closing.type is not TokenType.RPAREN:
                raise self._error("Expected closing parenthesis", token.position)
            self._advance()
            return inner

        if token.type is TokenType.PREFIX:
            return self.parse_prefix_filter()

        if token.type is TokenType.PROPERTY:
            return self.parse_property_filter()

        if token.type in (TokenType.WORD, TokenType.PREFIX_VALUE):
            self._advance()
            return TermNode(value=token.value, position=token.position)

        if token.type in (TokenType.PHRASE, TokenType.PREFIX_VALUE_QUOTED):
            self._advance()
            return PhraseNode(value=token.value, position=token.position)

        raise self._error(f"Unexpected token: {token.original}", token.position)

    def parse_infix(self, left: SearchNode, operator: Token) -> SearchNode:
        if operator.type is TokenType.AND:
            right = self.parse_expression(binding_power(operator.type) - 1)
            return _join(AndNode, left, right, operator.position)

        if operator.type is TokenType.OR:
            right = self.parse_expression(binding_power(operator.type) - 1)
            return _join(OrNode, left, right, operator.position)

        if operator.type is TokenType.RANGE:
            return self._parse_range(left, operator)

        raise self._error(f"Unexpected operator: {operator.original}", operator.position)

    # -- multi-token units ----------------------------------------------

    def parse_prefix_filter(self) -> PrefixFilter:
        prefix = self._advance()
        value = self._peek()
        if value is None or value.type not in _PREFIX_VALUE_TYPES:
            raise self._error(f"Expected value after '{prefix.original}'", prefix.position)
        self._advance()
        return PrefixFilter(
            field=prefix.value.lower(),
            value=value.value,
            exact=value.type in _QUOTED_VALUE_TYPES,
            position=prefix.position,
        )

    def parse_property_filter(self) -> PropertyFilter:
        token = self._advance()

        key_raw, value_raw = split_property_text(token.original[1:-1])
        exact = is_quoted(key_raw) or (value_raw is not None and is_quoted(value_raw))

        value = token.value
        key, sep, rest = value.partition(":")
        if sep and not rest:
            # "[state:]" degrades to a key-only filter
            value = key

        return PropertyFilter(value=value, exact=exact, position=token.position)

    def _parse_range(self, left: SearchNode, operator: Token) -> RangeFilter:
        if not isinstance(left, PrefixFilter) or left.field not in DATE_FIELDS:
            raise self._error(
                "Range operator can only follow scheduled: or deadline:",
                operator.position,
            )

        end = self._peek()
        if end is None or end.type not in _PREFIX_VALUE_TYPES:
            raise self._error("Expected date value after range operator", operator.position)
        self._advance()

        return RangeFilter(
            field=left.field,
            start=left.value,
            end=end.value,
            position=left.position,
            start_exact=left.exact,
            end_exact=end.type in _QUOTED_VALUE_TYPES,
        )


def parse_tokens(tokens: list[Token], query: str | None = None) -> SearchNode:
    """Parse an already tokenized query into an AST.

    Raises:
        SearchSyntaxError: If the token sequence is not a valid query.
    """
    return PrattParser(list(tokens), query).parse()


def parse(source: str | list[Token]) -> SearchNode:
    """Parse a query string (or token list) into an AST.

    Args:
        source: The raw query, or the output of :func:`tokenize`.

    Returns:
        The root node of the parsed query.

    Raises:
        SearchSyntaxError: If the query cannot be parsed.
    """
    if isinstance(source, str):
        node = parse_tokens(tokenize(source), source)
    else:
        node = parse_tokens(source)
    logger.debug("Parsed %r -> %r", source, node)
    return node


def parse_query(query_string: str) -> SearchNode:
    """Parse a search query string into an AST.

    Alias of :func:`parse` for string input.
    """
    return parse(query_string)


def validate(query_string: str) -> bool:
    """Return True if *query_string* parses, False otherwise."""
    try:
        parse(query_string)
    except Exception:
        return False
    return True


def get_error(query_string: str) -> str | None:
    """Return the parse error message for a query, or None if it is valid."""
    try:
        parse(query_string)
    except SearchSyntaxError as e:
        return str(e)
    return None
