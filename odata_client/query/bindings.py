"""
odata_client.query.bindings - Binding bookkeeping
==================================================

Literal values extracted from clauses, kept per category in the order they
appear in the compiled query. The grammar inlines literals itself; bindings
exist so callers can audit what was embedded.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List

from odata_client.constants import BINDING_CATEGORIES
from odata_client.core.exceptions import InvalidBindingCategory


class BindingStore:
    """
    Ordered, categorized collection of bound values.

    Examples
    --------
    >>> store = BindingStore()
    >>> store.add("Russell")
    >>> store.add([1, 2], "where")
    >>> store.flatten()
    ['Russell', 1, 2]
    """

    def __init__(self) -> None:
        self._bindings: Dict[str, List[Any]] = {c: [] for c in BINDING_CATEGORIES}

    def add(self, value: Any, category: str = "where") -> None:
        """
        Append a value, or merge a list/tuple of values, into a category.

        Raises
        ------
        InvalidBindingCategory
            If category is not one of select, where, order
        """
        if category not in self._bindings:
            raise InvalidBindingCategory(category)

        if isinstance(value, (list, tuple)):
            self._bindings[category].extend(value)
        else:
            self._bindings[category].append(value)

    def flatten(self) -> List[Any]:
        """All bound values, select first, then where, then order."""
        out: List[Any] = []
        for category in BINDING_CATEGORIES:
            out.extend(self._bindings[category])
        return out

    def __getitem__(self, category: str) -> List[Any]:
        if category not in self._bindings:
            raise InvalidBindingCategory(category)
        return list(self._bindings[category])

    def __iter__(self) -> Iterator[Any]:
        return iter(self.flatten())

    def __len__(self) -> int:
        return sum(len(v) for v in self._bindings.values())

    def __repr__(self) -> str:
        return f"BindingStore({self._bindings!r})"
