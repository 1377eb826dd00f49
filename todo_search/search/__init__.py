"""Search query tokenizing, parsing and evaluation for task records."""

from todo_search.exceptions import EvaluationError, SearchSyntaxError
from todo_search.search.ast_nodes import (
    AndNode,
    NotNode,
    OrNode,
    PhraseNode,
    PrefixFilter,
    PropertyFilter,
    RangeFilter,
    SearchNode,
    TermNode,
    to_sexpr,
)
from todo_search.search.dates import parse_date_value
from todo_search.search.evaluator import EvaluationSettings, evaluate
from todo_search.search.parser import get_error, parse, parse_query, validate
from todo_search.search.query import filter_tasks, matches
from todo_search.search.tokenizer import tokenize
from todo_search.search.tokens import Token, TokenType

__all__ = [
    "AndNode",
    "EvaluationError",
    "EvaluationSettings",
    "NotNode",
    "OrNode",
    "PhraseNode",
    "PrefixFilter",
    "PropertyFilter",
    "RangeFilter",
    "SearchNode",
    "SearchSyntaxError",
    "TermNode",
    "Token",
    "TokenType",
    "evaluate",
    "filter_tasks",
    "get_error",
    "matches",
    "parse",
    "parse_date_value",
    "parse_query",
    "to_sexpr",
    "tokenize",
    "validate",
]
