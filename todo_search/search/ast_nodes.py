"""AST data classes for parsed search queries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Union

# Fields accepted after ``name:``. The parser accepts any identifier; the
# evaluator rejects names outside this set.
PREFIX_FIELDS: frozenset[str] = frozenset(
    {
        "path",
        "file",
        "tag",
        "state",
        "priority",
        "content",
        "scheduled",
        "deadline",
    }
)

DATE_FIELDS: frozenset[str] = frozenset({"scheduled", "deadline"})


@dataclass
class TermNode:
    """A bare word, matched as a substring of the default searchable text."""

    kind: ClassVar[str] = "term"

    value: str
    position: int = 0


@dataclass
class PhraseNode:
    """A quoted literal, matched as an exact substring."""

    kind: ClassVar[str] = "phrase"

    value: str
    position: int = 0


@dataclass
class AndNode:
    """Conjunction of two or more child nodes."""

    kind: ClassVar[str] = "and"

    children: list[SearchNode] = field(default_factory=list)
    position: int = 0


@dataclass
class OrNode:
    """Disjunction of two or more child nodes."""

    kind: ClassVar[str] = "or"

    children: list[SearchNode] = field(default_factory=list)
    position: int = 0


@dataclass
class NotNode:
    """Negation of exactly one child node."""

    kind: ClassVar[str] = "not"

    child: SearchNode
    position: int = 0

    @property
    def children(self) -> list[SearchNode]:
        return [self.child]


@dataclass
class PrefixFilter:
    """A ``field:value`` filter such as ``tag:urgent`` or ``scheduled:today``.

    ``exact`` is set when the value was quoted, which switches the
    text fields from substring to equality matching.
    """

    kind: ClassVar[str] = "prefix_filter"

    field: str
    value: str
    exact: bool = False
    position: int = 0


@dataclass
class PropertyFilter:
    """A bracketed ``[key]`` or ``[key:value]`` filter on the property bag."""

    kind: ClassVar[str] = "property_filter"

    value: str
    exact: bool = False
    position: int = 0
    field: str = "property"

    @property
    def key(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def property_value(self) -> str | None:
        """The value part, or None for a key-only filter."""
        if ":" not in self.value:
            return None
        return self.value.split(":", 1)[1]


@dataclass
class RangeFilter:
    """A ``scheduled:start..end`` / ``deadline:start..end`` filter."""

    kind: ClassVar[str] = "range_filter"

    field: str
    start: str
    end: str
    position: int = 0
    start_exact: bool = False
    end_exact: bool = False


SearchNode = Union[
    TermNode,
    PhraseNode,
    AndNode,
    OrNode,
    NotNode,
    PrefixFilter,
    PropertyFilter,
    RangeFilter,
]


def to_sexpr(node: SearchNode) -> str:
    """Render a node as a compact S-expression, e.g. ``(and a (not b))``.

    Used by the ``check`` command and handy in test assertions.
    """
    if isinstance(node, TermNode):
        return node.value
    if isinstance(node, PhraseNode):
        return f'"{node.value}"'
    if isinstance(node, (AndNode, OrNode, NotNode)):
        inner = " ".join(to_sexpr(child) for child in node.children)
        return f"({node.kind} {inner})"
    if isinstance(node, PrefixFilter):
        value = f'"{node.value}"' if node.exact else node.value
        return f"{node.field}:{value}"
    if isinstance(node, PropertyFilter):
        return f"[{node.value}]" + ("!" if node.exact else "")
    if isinstance(node, RangeFilter):
        start = f'"{node.start}"' if node.start_exact else node.start
        end = f'"{node.end}"' if node.end_exact else node.end
        return f"{node.field}:{start}..{end}"
    raise TypeError(f"Not a search node: {node!r}")
