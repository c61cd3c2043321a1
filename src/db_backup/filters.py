"""Include/exclude set filters.

A ``FilterSet`` is an unordered set of strings (schemas, object types,
relation names) with a polarity. An empty set matches everything,
regardless of polarity, so an unset ``--include-schema`` style option
never filters anything out.

Usage:
    from db_backup.filters import FilterSet

    schemas = FilterSet.include(["public", "sales"])
    schemas.matches("public")   # True
    schemas.matches("hr")       # False

    types = FilterSet.exclude(["INDEX"])
    types.matches("TABLE")      # True
    types.matches("INDEX")      # False

    FilterSet.include(["a", "b", "a"]) == FilterSet.include(["b", "a"])  # True
"""

from collections.abc import Iterable, Iterator


class FilterSet:
    """Unordered string set with include or exclude matching semantics."""

    def __init__(self, items: Iterable[str] | None = None, is_include: bool = True) -> None:
        self._items: frozenset[str] = frozenset(items or ())
        self.is_include = is_include

    @classmethod
    def include(cls, items: Iterable[str] | None = None) -> "FilterSet":
        """Set that matches only its members (or everything when empty)."""
        return cls(items, is_include=True)

    @classmethod
    def exclude(cls, items: Iterable[str] | None = None) -> "FilterSet":
        """Set that matches everything except its members."""
        return cls(items, is_include=False)

    def matches(self, item: str) -> bool:
        """Return whether *item* passes this filter."""
        if not self._items:
            return True
        if self.is_include:
            return item in self._items
        return item not in self._items

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        # Polarity is a matching mode, not part of the set's identity
        if not isinstance(other, FilterSet):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        kind = "include" if self.is_include else "exclude"
        return f"FilterSet.{kind}({sorted(self._items)!r})"
