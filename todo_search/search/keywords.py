"""Task state keywords and priority synonyms.

State keywords are grouped so that ``state:active`` or ``state:completed``
match any keyword in the group. Each group starts from a builtin list and
can be extended from the config file's ``[keywords]`` section.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

BUILTIN_ACTIVE_KEYWORDS: tuple[str, ...] = ("DOING", "NOW", "IN-PROGRESS")
BUILTIN_INACTIVE_KEYWORDS: tuple[str, ...] = ("TODO", "LATER")
BUILTIN_WAITING_KEYWORDS: tuple[str, ...] = ("WAIT", "WAITING")
BUILTIN_COMPLETED_KEYWORDS: tuple[str, ...] = ("DONE", "CANCELLED", "CANCELED")
BUILTIN_ARCHIVED_KEYWORDS: tuple[str, ...] = ("ARCHIVED",)

KEYWORD_GROUPS: tuple[str, ...] = ("active", "inactive", "waiting", "completed", "archived")

_BUILTIN_GROUPS: dict[str, tuple[str, ...]] = {
    "active": BUILTIN_ACTIVE_KEYWORDS,
    "inactive": BUILTIN_INACTIVE_KEYWORDS,
    "waiting": BUILTIN_WAITING_KEYWORDS,
    "completed": BUILTIN_COMPLETED_KEYWORDS,
    "archived": BUILTIN_ARCHIVED_KEYWORDS,
}

# Canonical priority -> accepted spellings (all lowercase)
PRIORITY_SYNONYMS: dict[str, frozenset[str]] = {
    "high": frozenset({"high", "a"}),
    "med": frozenset({"med", "medium", "b"}),
    "low": frozenset({"low", "c"}),
}


def _unique_upper(words: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for word in words:
        word = word.strip().upper()
        if word:
            seen.setdefault(word, None)
    return tuple(seen)


@dataclass(frozen=True)
class KeywordSets:
    """State keywords by group, builtins first."""

    groups: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: dict(_BUILTIN_GROUPS)
    )

    @classmethod
    def from_additional(
        cls, additional: Mapping[str, Iterable[str]] | None = None
    ) -> KeywordSets:
        """Build keyword sets from the builtins plus extra keywords per group.

        Unknown group names are ignored.
        """
        additional = additional or {}
        groups = {
            name: _unique_upper([*_BUILTIN_GROUPS[name], *additional.get(name, ())])
            for name in KEYWORD_GROUPS
        }
        return cls(groups=groups)

    def keywords_in(self, group: str) -> tuple[str, ...]:
        return tuple(self.groups.get(group.lower(), ()))

    def group_of(self, keyword: str) -> str | None:
        """Return the group a keyword belongs to, or None."""
        upper = keyword.upper()
        for name in KEYWORD_GROUPS:
            if upper in self.groups.get(name, ()):
                return name
        return None

    @property
    def all_keywords(self) -> tuple[str, ...]:
        return _unique_upper(kw for name in KEYWORD_GROUPS for kw in self.groups.get(name, ()))


def priority_synonyms(
    extra: Mapping[str, Iterable[str]] | None = None,
) -> dict[str, frozenset[str]]:
    """Merge configured spellings into the builtin priority synonyms."""
    merged = {name: set(words) for name, words in PRIORITY_SYNONYMS.items()}
    for name, words in (extra or {}).items():
        name = name.lower()
        if name not in merged:
            continue
        merged[name].update(word.strip().lower() for word in words if word.strip())
    return {name: frozenset(words) for name, words in merged.items()}


def normalize_priority(
    value: str | None,
    synonyms: Mapping[str, frozenset[str]] | None = None,
) -> str | None:
    """Map a priority spelling to ``high``, ``med`` or ``low``.

    Returns None for empty input and the lowercased input when it matches
    no known spelling.
    """
    if value is None:
        return None
    lowered = value.strip().lower()
    if not lowered:
        return None
    for name, words in (synonyms or PRIORITY_SYNONYMS).items():
        if lowered in words:
            return name
    return lowered
