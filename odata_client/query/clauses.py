"""
odata_client.query.clauses - Clause model
==========================================

Plain records produced by the Builder and consumed by a Grammar. Each where
clause variant carries a ``type`` tag that the grammar dispatches on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Optional, Union

if TYPE_CHECKING:
    from odata_client.query.builder import Builder


class Expression:
    """
    Raw fragment rendered verbatim by the grammar and never bound.

    Examples
    --------
    >>> builder.where("Price", ">", raw("Cost mul 2"))
    """

    def __init__(self, value: Any) -> None:
        self.value = value

    def get_value(self) -> Any:
        return self.value

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"Expression({self.value!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Expression) and other.value == self.value

    def __hash__(self) -> int:
        return hash(("Expression", str(self.value)))


def raw(value: Any) -> Expression:
    """Wrap a value so it is emitted without quoting or escaping."""
    return Expression(value)


# ---------------- where clauses ----------------

@dataclass
class BasicClause:
    type: ClassVar[str] = "Basic"
    column: str
    operator: str
    value: Any
    boolean: str = "and"


@dataclass
class FunctionClause:
    type: ClassVar[str] = "Function"
    column: str
    operator: str
    value: Any
    boolean: str = "and"


@dataclass
class NullClause:
    type: ClassVar[str] = "Null"
    column: str
    boolean: str = "and"


@dataclass
class NotNullClause:
    type: ClassVar[str] = "NotNull"
    column: str
    boolean: str = "and"


@dataclass
class NestedClause:
    type: ClassVar[str] = "Nested"
    query: "Builder"
    boolean: str = "and"


@dataclass
class SubClause:
    type: ClassVar[str] = "Sub"
    column: str
    operator: str
    query: "Builder"
    boolean: str = "and"


Clause = Union[BasicClause, FunctionClause, NullClause, NotNullClause, NestedClause, SubClause]


# ---------------- ordering / expansion ----------------

@dataclass
class Order:
    column: str
    direction: str = "asc"


@dataclass
class RawOrder:
    """An $orderby fragment passed through as written."""
    sql: str


@dataclass
class Expansion:
    """A navigation property to expand, optionally with its own query options."""
    property: str
    query: Optional["Builder"] = field(default=None)


@dataclass
class Reference:
    """A navigation property addressed as an entity reference ($ref)."""
    property: str
    id: Any = None
