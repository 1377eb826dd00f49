"""Validate a search query and show how it parses."""

from __future__ import annotations

import click
from rich.markup import escape
from rich.tree import Tree

from todo_search.cli import Context, pass_context
from todo_search.exceptions import SearchSyntaxError
from todo_search.search.ast_nodes import (
    AndNode,
    NotNode,
    OrNode,
    PrefixFilter,
    PropertyFilter,
    RangeFilter,
    SearchNode,
    to_sexpr,
)
from todo_search.search.parser import parse_tokens
from todo_search.search.tokenizer import tokenize
from todo_search.search.tokens import Token
from todo_search.utils.output import console, create_table, error, print_caret, success

EXIT_SUCCESS = 0
EXIT_PARSE_ERROR = 1


def _node_label(node: SearchNode) -> str:
    if isinstance(node, (AndNode, OrNode, NotNode)):
        return f"[bold]{node.kind.upper()}[/bold]"
    if isinstance(node, PrefixFilter):
        flag = " [dim](exact)[/dim]" if node.exact else ""
        return f"[token.type]{node.field}[/token.type]: {escape(node.value)}{flag}"
    if isinstance(node, PropertyFilter):
        flag = " [dim](exact)[/dim]" if node.exact else ""
        return f"[token.type]property[/token.type] {escape('[' + node.value + ']')}{flag}"
    if isinstance(node, RangeFilter):
        return (
            f"[token.type]{node.field}[/token.type]: "
            f"{escape(node.start)} .. {escape(node.end)}"
        )
    return f"[token.type]{node.kind}[/token.type] {escape(repr(node.value))}"


def _build_tree(node: SearchNode, tree: Tree | None = None) -> Tree:
    """Render an AST as a Rich tree."""
    label = _node_label(node)
    branch = Tree(label) if tree is None else tree.add(label)
    if isinstance(node, (AndNode, OrNode, NotNode)):
        for child in node.children:
            _build_tree(child, branch)
    return branch


def _print_tokens(tokens: list[Token]) -> None:
    table = create_table()
    table.add_column("#", justify="right")
    table.add_column("Type", style="token.type")
    table.add_column("Value")
    table.add_column("Source")
    table.add_column("Pos", justify="right")
    for index, token in enumerate(tokens):
        table.add_row(
            str(index),
            token.type.value,
            escape(token.value),
            escape(token.original),
            str(token.position),
        )
    console.print(table)


def _print_syntax_error(query_string: str, exc: SearchSyntaxError) -> None:
    print_caret(query_string, exc.position)
    error(exc.message)


@click.command("check")
@click.argument("query", nargs=-1, required=True)
@click.option(
    "--tokens",
    "show_tokens",
    is_flag=True,
    default=False,
    help="Show the token list",
)
@click.option(
    "--ast",
    "show_ast",
    is_flag=True,
    default=False,
    help="Show the parsed query as a tree",
)
@pass_context
def cli(ctx: Context, query: tuple[str, ...], show_tokens: bool, show_ast: bool) -> None:
    """Check a search query for syntax errors.

    Prints the normalized form of a valid query. For an invalid query,
    points at the offending position and exits with status 1.

    \b
    Examples:
      todo-search check 'tag:urgent NOT state:done'
      todo-search check --tokens --ast 'a OR b AND c'
    """
    query_string = " ".join(query)
    tokens = tokenize(query_string)

    if show_tokens:
        _print_tokens(tokens)

    try:
        node = parse_tokens(tokens, query_string)
    except SearchSyntaxError as e:
        _print_syntax_error(query_string, e)
        raise SystemExit(EXIT_PARSE_ERROR)

    if show_ast:
        console.print(_build_tree(node))

    if not ctx.quiet:
        success("Query is valid")
    click.echo(to_sexpr(node))
    raise SystemExit(EXIT_SUCCESS)
