"""
odata_client.query.grammar - Query string compilers
====================================================

A grammar turns the state accumulated by a Builder into an OData request
path plus query string. The Builder asks its grammar which operators and
functions it understands; everything the grammar receives has already been
validated.

- Grammar: OData v4 URL conventions
- GrammarV2: OData v2 dialect ($inlinecount, substringof)
"""

from __future__ import annotations

import abc
import math
import re
import uuid
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from odata_client.core.exceptions import MissingEntitySet
from odata_client.constants import ENTITY_SET_REQUIRED
from odata_client.query.clauses import (
    Clause,
    Expansion,
    Expression,
    Order,
    RawOrder,
)

if TYPE_CHECKING:
    from odata_client.query.builder import Builder


_GUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

# binary'..', datetime'..', guid'..' etc. are already literals
_TYPED_LITERAL_RE = re.compile(
    r"^(binary|datetime|datetimeoffset|guid|time|duration|X)'[\w:\-\.\+ ]*'$",
    re.IGNORECASE,
)


def escape_odata_literal(value: str) -> str:
    """
    Escape a string value for use in OData $filter expressions.

    Examples
    --------
    >>> escape_odata_literal("O'Brien")
    "O''Brien"
    """
    return value.replace("'", "''")


def _join_csv(items: Sequence[str]) -> str:
    """Join items as comma-separated values, stripping whitespace."""
    return ",".join([s.strip() for s in items if s and s.strip()])


def _special_number_literal(value: Union[float, Decimal]) -> Optional[str]:
    """NaN, INF or -INF for non-finite numbers, else None."""
    if isinstance(value, Decimal):
        nan, inf = value.is_nan(), value.is_infinite()
    else:
        nan, inf = math.isnan(value), math.isinf(value)
    if nan:
        return "NaN"
    if inf:
        return "-INF" if value < 0 else "INF"
    return None


class IGrammar(abc.ABC):
    """Interface the Builder depends on."""

    @abc.abstractmethod
    def compile_select(self, query: "Builder") -> str:
        """Compile the builder state into ``path[?options]``."""

    @abc.abstractmethod
    def get_operators_and_functions(self) -> Tuple[str, ...]:
        """Every operator and function name this grammar can render."""

    @abc.abstractmethod
    def get_functions(self) -> Tuple[str, ...]:
        """Function names rendered as ``fn(column,value)``."""


class Grammar(IGrammar):
    """
    OData v4 grammar.

    Options are always emitted in the same order, regardless of the order
    the builder methods were called in.

    Examples
    --------
    >>> b = Builder(grammar=Grammar()).from_("People").where("FirstName", "Russell")
    >>> Grammar().compile_select(b)
    "People?$filter=FirstName eq 'Russell'"
    """

    operator_mapping: Dict[str, str] = {
        "=": "eq",
        "!=": "ne",
        "<>": "ne",
        ">": "gt",
        ">=": "ge",
        "<": "lt",
        "<=": "le",
        "eq": "eq",
        "ne": "ne",
        "gt": "gt",
        "ge": "ge",
        "lt": "lt",
        "le": "le",
        "has": "has",
        "in": "in",
    }

    functions: Tuple[str, ...] = ("contains", "startswith", "endswith")

    # compile_<component> is called for each; this is the output order
    select_components: Tuple[str, ...] = (
        "properties",
        "wheres",
        "expands",
        "orders",
        "skip",
        "take",
        "total_count",
    )

    expand_separator = ";"

    # ---------------- introspection ----------------

    def get_operators_and_functions(self) -> Tuple[str, ...]:
        return tuple(self.operator_mapping) + tuple(self.functions)

    def get_functions(self) -> Tuple[str, ...]:
        return tuple(self.functions)

    def get_operator_mapping(self, operator: str) -> str:
        return self.operator_mapping.get(operator.lower(), operator)

    # ---------------- entry point ----------------

    def compile_select(self, query: "Builder") -> str:
        if not query.entity_set:
            raise MissingEntitySet(ENTITY_SET_REQUIRED)

        path = self.compile_path(query)
        options = self.compile_options(query)
        if not options:
            return path
        return f"{path}?{'&'.join(options)}"

    def compile_path(self, query: "Builder") -> str:
        path = str(query.entity_set)
        if query.entity_key is not None:
            path += self.compile_entity_key(query.entity_key)
        if query.ref is not None:
            ref = query.ref
            path += f"/{ref.property}"
            if ref.id is not None:
                path += self.compile_entity_key(ref.id)
            path += "/$ref"
        if query.count_only:
            path += self.compile_count()
        return path

    def compile_options(self, query: "Builder") -> List[str]:
        options: List[str] = []
        for component in self.select_components:
            compiler: Callable[["Builder"], str] = getattr(self, f"compile_{component}")
            part = compiler(query)
            if part:
                options.append(part)
        return options

    # ---------------- path segments ----------------

    def compile_entity_key(self, key: Any) -> str:
        if isinstance(key, Mapping):
            parts = [f"{name}={self.wrap_key(value)}" for name, value in key.items()]
            return f"({','.join(parts)})"
        return f"({self.wrap_key(key)})"

    def wrap_key(self, key: Any) -> str:
        if isinstance(key, str):
            if _GUID_RE.match(key):
                return key
            return f"'{escape_odata_literal(key)}'"
        return self.prepare_value(key)

    def compile_count(self) -> str:
        return "/$count"

    # ---------------- query options ----------------

    def compile_properties(self, query: "Builder") -> str:
        if not query.properties:
            return ""
        return f"$select={_join_csv(query.properties)}"

    def compile_wheres(self, query: "Builder") -> str:
        body = self.compile_where_body(query)
        if not body:
            return ""
        return f"$filter={body}"

    def compile_where_body(self, query: "Builder") -> str:
        """Join every where clause with its boolean, dropping the leading one."""
        if not query.wheres:
            return ""
        pieces = [
            f"{where.boolean} {self.compile_where(query, where)}"
            for where in query.wheres
        ]
        return self.remove_leading_boolean(" ".join(pieces))

    def compile_where(self, query: "Builder", where: Clause) -> str:
        compiler: Callable[["Builder", Any], str] = getattr(self, f"where_{where.type.lower()}")
        return compiler(query, where)

    def remove_leading_boolean(self, value: str) -> str:
        return re.sub(r"^(and |or )", "", value, count=1, flags=re.IGNORECASE)

    def compile_expands(self, query: "Builder") -> str:
        if not query.expands:
            return ""
        return "$expand=" + ",".join(self.compile_expansion(e) for e in query.expands)

    def compile_expansion(self, expansion: Expansion) -> str:
        if expansion.query is None:
            return expansion.property
        nested = self.compile_options(expansion.query)
        if not nested:
            return expansion.property
        return f"{expansion.property}({self.expand_separator.join(nested)})"

    def compile_orders(self, query: "Builder") -> str:
        if not query.orders:
            return ""
        parts: List[str] = []
        for order in query.orders:
            if isinstance(order, RawOrder):
                parts.append(order.sql)
            elif isinstance(order, Order):
                parts.append(f"{order.column} {order.direction}")
        return f"$orderby={','.join(parts)}"

    def compile_skip(self, query: "Builder") -> str:
        if query.skip_value is None:
            return ""
        return f"$skip={int(query.skip_value)}"

    def compile_take(self, query: "Builder") -> str:
        if query.take_value is None:
            return ""
        return f"$top={int(query.take_value)}"

    def compile_total_count(self, query: "Builder") -> str:
        if not query.total_count:
            return ""
        return "$count=true"

    # ---------------- where variants ----------------

    def where_basic(self, query: "Builder", where: Any) -> str:
        operator = self.get_operator_mapping(where.operator)
        return f"{where.column} {operator} {self.prepare_value(where.value)}"

    def where_function(self, query: "Builder", where: Any) -> str:
        return f"{where.operator.lower()}({where.column},{self.prepare_value(where.value)})"

    def where_null(self, query: "Builder", where: Any) -> str:
        return f"{where.column} eq null"

    def where_notnull(self, query: "Builder", where: Any) -> str:
        return f"{where.column} ne null"

    def where_nested(self, query: "Builder", where: Any) -> str:
        return f"({self.compile_where_body(where.query)})"

    def where_sub(self, query: "Builder", where: Any) -> str:
        operator = self.get_operator_mapping(where.operator)
        return f"{where.column} {operator} ({self.compile_select(where.query)})"

    # ---------------- literals ----------------

    def prepare_value(self, value: Any) -> str:
        """Render a Python value as an OData literal."""
        if isinstance(value, Expression):
            return str(value.get_value())
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, Enum):
            return self.prepare_value(value.value)
        if isinstance(value, (float, Decimal)):
            special = _special_number_literal(value)
            if special:
                return special
        if isinstance(value, (int, float, Decimal)):
            return str(value)
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, datetime):
            return self.format_datetime(value)
        if isinstance(value, (date, time)):
            return value.isoformat()
        if isinstance(value, (list, tuple, set, frozenset)):
            return "(" + ",".join(self.prepare_value(v) for v in value) + ")"
        if isinstance(value, str):
            if _TYPED_LITERAL_RE.match(value):
                return value
            return f"'{escape_odata_literal(value)}'"
        return f"'{escape_odata_literal(str(value))}'"

    def format_datetime(self, value: datetime) -> str:
        if value.tzinfo is None:
            return value.isoformat() + "Z"
        return value.isoformat()


class GrammarV2(Grammar):
    """
    OData v2 dialect.

    Uses ``substringof(value,column)`` for containment and
    ``$inlinecount=allpages`` for inline counts; v2 has no ``in`` operator.
    """

    operator_mapping: Dict[str, str] = {
        k: v for k, v in Grammar.operator_mapping.items() if k not in ("in", "has")
    }

    functions: Tuple[str, ...] = ("substringof", "startswith", "endswith")

    def where_function(self, query: "Builder", where: Any) -> str:
        if where.operator.lower() == "substringof":
            return f"substringof({self.prepare_value(where.value)},{where.column})"
        return super().where_function(query, where)

    def compile_total_count(self, query: "Builder") -> str:
        if not query.total_count:
            return ""
        return "$inlinecount=allpages"

    def format_datetime(self, value: datetime) -> str:
        return f"datetime'{value.replace(tzinfo=None).isoformat()}'"
