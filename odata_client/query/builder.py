"""
odata_client.query.builder - Fluent query builder
==================================================

The Builder accumulates the state of one entity-set query (selected
properties, filter clauses, ordering, paging, expansions) and hands it to a
grammar for compilation. Every mutator returns the same builder so calls can
be chained; terminal operations compile the query and run it through the
owning client.
"""

from __future__ import annotations

import enum
import logging
import re
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Dict,
    Generator,
    Iterable,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from odata_client.constants import (
    BOOLEANS,
    ENTITY_SET_REQUIRED,
    EMPTY_COUNT_RESPONSE,
    NULL_SAFE_OPERATORS,
    ODATA_OPERATORS,
    OPERATORS,
    ORDER_DIRECTIONS,
)
from odata_client.core.exceptions import (
    EmptyCountResponse,
    IllegalOperatorCombination,
    InvalidOperatorValue,
    MissingEntitySet,
    MissingRequestTarget,
    ResponseParseError,
)
from odata_client.query.bindings import BindingStore
from odata_client.query.clauses import (
    BasicClause,
    Clause,
    Expansion,
    Expression,
    FunctionClause,
    NestedClause,
    NotNullClause,
    NullClause,
    Order,
    RawOrder,
    Reference,
    SubClause,
)
from odata_client.query.grammar import Grammar, IGrammar

if TYPE_CHECKING:
    from odata_client.core.connection import ODataClient
    from odata_client.core.response import ODataResponse

logger = logging.getLogger("odata_client.query")


class _Missing:
    def __repr__(self) -> str:
        return "<missing>"


# Distinguishes "argument not passed" from an explicit None.
MISSING: Any = _Missing()


class QueryOptions(enum.IntFlag):
    NONE = 0
    INCLUDE_COUNT = 1


BuilderCallback = Callable[["Builder"], Any]


class Builder:
    """
    Fluent OData query builder.

    Parameters
    ----------
    client : ODataClient, optional
        Client used by terminal operations (get, count, post, ...)
    grammar : IGrammar, optional
        Compiler for the query. Defaults to the client's grammar, or an
        OData v4 Grammar when there is no client.

    Examples
    --------
    >>> q = (
    ...     Builder()
    ...     .from_("People")
    ...     .select("FirstName", "LastName")
    ...     .where("LastName", "Whyte")
    ...     .or_where(lambda q: q.where("Age", ">", 30).where("Age", "<", 40))
    ...     .order("LastName", "desc")
    ...     .take(5)
    ... )
    >>> q.to_request()
    "People?$select=FirstName,LastName&$filter=LastName eq 'Whyte' or (Age gt 30 and Age lt 40)&$orderby=LastName desc&$top=5"
    """

    operators = OPERATORS + ODATA_OPERATORS

    def __init__(
        self,
        client: Optional["ODataClient"] = None,
        grammar: Optional[IGrammar] = None,
    ) -> None:
        self.client = client
        if grammar is None:
            grammar = client.query_grammar if client is not None else Grammar()
        self.grammar = grammar

        self.entity_set: Optional[str] = None
        self.entity_key: Any = None
        self.ref: Optional[Reference] = None
        self.properties: List[str] = []
        self.wheres: List[Clause] = []
        self.orders: List[Union[Order, RawOrder]] = []
        self.expands: List[Expansion] = []
        self.skip_value: Optional[int] = None
        self.take_value: Optional[int] = None
        self.count_only = False
        self.total_count = False
        self.bindings = BindingStore()

    def __repr__(self) -> str:
        return f"<Builder entity_set={self.entity_set!r} wheres={len(self.wheres)}>"

    # ---------------- target ----------------

    def from_(self, entity_set: str) -> "Builder":
        """Set the entity set the query targets."""
        self.entity_set = entity_set
        return self

    def where_key(self, key: Any) -> "Builder":
        """Address a single entity by key (str, int, UUID, or mapping for composite keys)."""
        self.entity_key = key
        return self

    def reference(self, property: str, id: Any = None) -> "Builder":
        """Address the navigation property as an entity reference (``/$ref``)."""
        self.ref = Reference(property=property, id=id)
        return self

    # ---------------- $select / $expand ----------------

    def select(self, *properties: Union[str, Sequence[str]]) -> "Builder":
        """Replace the $select list."""
        self.properties = _flatten_args(properties)
        return self

    def add_select(self, *properties: Union[str, Sequence[str]]) -> "Builder":
        """Append to the $select list."""
        self.properties = self.properties + _flatten_args(properties)
        return self

    def expand(self, *properties: Any) -> "Builder":
        """
        Set the $expand list.

        Each entry is a navigation property name, a ``(name, callback)``
        tuple, or a mapping of names to callbacks. A callback receives a
        fresh builder whose options are compiled inside the expansion.

        Examples
        --------
        >>> q.expand("Friends", ("Trips", lambda t: t.select("Name").take(2)))
        """
        if len(properties) == 1 and isinstance(properties[0], list):
            properties = tuple(properties[0])

        expands: List[Expansion] = []
        for entry in properties:
            if isinstance(entry, Mapping):
                for name, callback in entry.items():
                    expands.append(self._build_expansion(name, callback))
            elif isinstance(entry, tuple):
                name, callback = entry
                expands.append(self._build_expansion(name, callback))
            else:
                expands.append(Expansion(property=str(entry)))
        self.expands = expands
        return self

    def _build_expansion(self, name: str, callback: Optional[BuilderCallback]) -> Expansion:
        if callback is None:
            return Expansion(property=name)
        query = self.new_query().from_(name)
        callback(query)
        return Expansion(property=name, query=query)

    # ---------------- conditional ----------------

    def when(
        self,
        condition: Any,
        callback: BuilderCallback,
        default: Optional[BuilderCallback] = None,
    ) -> "Builder":
        """
        Apply callback when condition is truthy, otherwise default if given.

        Returns whatever the applied callback returns, or this builder when
        no callback runs or the callback returns None.
        """
        builder = self
        if condition:
            builder = callback(builder) or builder
        elif default is not None:
            builder = default(builder) or builder
        return builder

    # ---------------- $orderby ----------------

    def order(self, *properties: Any) -> "Builder":
        """
        Set the $orderby list.

        Accepts a bare column (ascending), ``column, direction``, a
        ``[column, direction]`` pair, several pairs, or a list of pairs.
        Mappings with ``column``/``direction`` keys are accepted as pairs.

        Examples
        --------
        >>> q.order("Name")
        >>> q.order("Name", "desc")
        >>> q.order([["Name", "desc"], ["Age", "asc"]])
        """
        if len(properties) == 1 and isinstance(properties[0], (list, tuple)):
            entries = list(properties[0])
        else:
            entries = list(properties)

        if entries and not isinstance(entries[0], (list, tuple, Mapping)):
            if (
                len(entries) == 2
                and isinstance(entries[1], str)
                and entries[1].lower() in ORDER_DIRECTIONS
            ):
                entries = [entries]
            else:
                entries = [[e] for e in entries]

        self.orders = self._build_orders(entries)
        return self

    def _build_orders(self, entries: Iterable[Any]) -> List[Union[Order, RawOrder]]:
        orders: List[Union[Order, RawOrder]] = []
        for entry in entries:
            if isinstance(entry, Mapping):
                column = entry["column"]
                direction = entry.get("direction", "asc")
            else:
                column = entry[0]
                direction = entry[1] if len(entry) > 1 else "asc"
            direction = str(direction).lower()
            if direction not in ORDER_DIRECTIONS:
                raise IllegalOperatorCombination(f"Invalid order direction: {direction}")
            orders.append(Order(column=column, direction=direction))
        return orders

    def order_by_sql(self, sql: str = "") -> "Builder":
        """Replace the ordering with a raw $orderby fragment."""
        self.orders = [RawOrder(sql=sql)]
        return self

    # ---------------- paging ----------------

    def skip(self, value: int) -> "Builder":
        self.skip_value = value
        return self

    def take(self, value: int) -> "Builder":
        self.take_value = value
        return self

    # ---------------- $filter ----------------

    def where(
        self,
        column: Any,
        operator: Any = MISSING,
        value: Any = MISSING,
        boolean: str = "and",
    ) -> "Builder":
        """
        Add a $filter clause.

        ``where("Name", "Russell")`` is shorthand for ``where("Name", "=",
        "Russell")``. A mapping or list as column becomes one parenthesized
        group of equality clauses; a callable column starts a nested group;
        a callable value starts a sub-query; a None value becomes a null
        test.

        Raises
        ------
        InvalidOperatorValue
            If value is None and the operator cannot be compared to null
        IllegalOperatorCombination
            If the operator is recognized but the grammar cannot express it
        """
        boolean = self._check_boolean(boolean)

        if isinstance(column, (Mapping, list)):
            return self.add_array_of_wheres(column, boolean)

        use_default = value is MISSING and operator is not MISSING
        if operator is MISSING:
            operator = None
        if value is MISSING:
            value = None

        value, operator = self._prepare_value_and_operator(value, operator, use_default)

        if callable(column):
            return self.where_nested(column, boolean)

        if self._invalid_operator(operator):
            value, operator = operator, "="

        if not self._grammar_supports(operator):
            raise IllegalOperatorCombination(
                f"Operator {operator!r} is not supported by {type(self.grammar).__name__}."
            )

        if callable(value) and not isinstance(value, Expression):
            return self.where_sub(column, operator, value, boolean)

        if value is None:
            return self.where_null(column, boolean, not_=operator != "=" and operator.lower() != "eq")

        if self._is_operator_a_function(operator):
            return self.where_function(operator, column, value, boolean)

        self.wheres.append(BasicClause(column, operator, value, boolean))
        if not isinstance(value, Expression):
            self.add_binding(value, "where")
        return self

    def or_where(self, column: Any, operator: Any = MISSING, value: Any = MISSING) -> "Builder":
        """Add an ``or`` $filter clause."""
        return self.where(column, operator, value, "or")

    def where_equals(self, column: str, value: Any, boolean: str = "and") -> "Builder":
        """Add ``column eq value`` (or a null test when value is None)."""
        return self.where(column, "=", value, boolean)

    def where_in(self, column: str, values: Iterable[Any], boolean: str = "and") -> "Builder":
        """Add ``column in (v1,v2,...)``."""
        return self.where(column, "in", list(values), boolean)

    def where_function(
        self,
        function: str,
        column: str,
        value: Any,
        boolean: str = "and",
    ) -> "Builder":
        """
        Add a function predicate such as ``contains(Name,'ab')``.

        Raises
        ------
        IllegalOperatorCombination
            If the grammar does not declare the function
        """
        boolean = self._check_boolean(boolean)
        if not self._is_operator_a_function(function):
            raise IllegalOperatorCombination(
                f"Function {function!r} is not supported by {type(self.grammar).__name__}."
            )
        self.wheres.append(FunctionClause(column, function, value, boolean))
        if not isinstance(value, Expression):
            self.add_binding(value, "where")
        return self

    def add_array_of_wheres(self, column: Union[Mapping[str, Any], List[Any]], boolean: str) -> "Builder":
        """Add a mapping or list of conditions as one nested group."""
        def callback(query: "Builder") -> None:
            if isinstance(column, Mapping):
                for key, value in column.items():
                    query.where(key, "=", value)
                return
            for condition in column:
                query.where(*condition)

        return self.where_nested(callback, boolean)

    def where_nested(self, callback: BuilderCallback, boolean: str = "and") -> "Builder":
        """Add a parenthesized group built by callback."""
        boolean = self._check_boolean(boolean)
        query = self.for_nested_where()
        callback(query)
        return self.add_nested_where_query(query, boolean)

    def for_nested_where(self) -> "Builder":
        """A fresh builder over the same entity set, for nested groups."""
        return self.new_query().from_(self.entity_set)

    def add_nested_where_query(self, query: "Builder", boolean: str = "and") -> "Builder":
        """Fold another builder's clauses in as one group; no-op when it has none."""
        if query.wheres:
            self.wheres.append(NestedClause(query, boolean))
            self.add_binding(query.get_bindings(), "where")
        return self

    def where_sub(
        self,
        column: str,
        operator: str,
        callback: BuilderCallback,
        boolean: str = "and",
    ) -> "Builder":
        """Add ``column operator (sub-query)`` where callback builds the sub-query."""
        boolean = self._check_boolean(boolean)
        query = self.new_query()
        callback(query)
        self.wheres.append(SubClause(column, operator, query, boolean))
        self.add_binding(query.get_bindings(), "where")
        return self

    def where_null(self, column: str, boolean: str = "and", not_: bool = False) -> "Builder":
        boolean = self._check_boolean(boolean)
        clause = NotNullClause(column, boolean) if not_ else NullClause(column, boolean)
        self.wheres.append(clause)
        return self

    def or_where_null(self, column: str) -> "Builder":
        return self.where_null(column, "or")

    def where_not_null(self, column: str, boolean: str = "and") -> "Builder":
        return self.where_null(column, boolean, not_=True)

    def or_where_not_null(self, column: str) -> "Builder":
        return self.where_not_null(column, "or")

    def merge_wheres(self, wheres: Sequence[Clause], bindings: Sequence[Any]) -> "Builder":
        """Append clauses and their where bindings taken from another builder."""
        self.wheres.extend(wheres)
        self.add_binding(list(bindings), "where")
        return self

    # ---------------- operator classification ----------------

    def _check_boolean(self, boolean: str) -> str:
        value = str(boolean).lower()
        if value not in BOOLEANS:
            raise IllegalOperatorCombination(f"Invalid boolean: {boolean!r}; expected 'and' or 'or'.")
        return value

    def _prepare_value_and_operator(self, value: Any, operator: Any, use_default: bool):
        if use_default:
            return operator, "="
        if self._invalid_operator_and_value(operator, value):
            raise InvalidOperatorValue("Illegal operator and value combination.")
        return value, operator

    def _invalid_operator_and_value(self, operator: Any, value: Any) -> bool:
        if value is not None or not isinstance(operator, str):
            return False
        op = operator.lower()
        recognized = op in self.operators or op in self.grammar.get_operators_and_functions()
        return recognized and op not in NULL_SAFE_OPERATORS

    def _invalid_operator(self, operator: Any) -> bool:
        if not isinstance(operator, str):
            return True
        op = operator.lower()
        return op not in self.operators and op not in self.grammar.get_operators_and_functions()

    def _grammar_supports(self, operator: str) -> bool:
        return operator.lower() in self.grammar.get_operators_and_functions()

    def _is_operator_a_function(self, operator: str) -> bool:
        return operator.lower() in self.grammar.get_functions()

    # ---------------- bindings ----------------

    def add_binding(self, value: Any, category: str = "where") -> "Builder":
        self.bindings.add(value, category)
        return self

    def get_bindings(self) -> List[Any]:
        """All bound values, flattened in query order."""
        return self.bindings.flatten()

    # ---------------- compilation ----------------

    def to_request(self) -> str:
        """Compile the query to ``path[?options]`` without sending it."""
        return self.grammar.compile_select(self)

    def new_query(self) -> "Builder":
        """An independent builder sharing this builder's client and grammar."""
        return type(self)(self.client, self.grammar)

    def get_client(self) -> Optional["ODataClient"]:
        return self.client

    # ---------------- terminal operations ----------------

    def find(self, key: Any, properties: Optional[Sequence[str]] = None) -> Optional[Dict[str, Any]]:
        """Fetch a single entity by key."""
        if not self.entity_set:
            raise MissingEntitySet(ENTITY_SET_REQUIRED)
        return self.where_key(key).first(properties)

    def value(self, property: str) -> Any:
        """A single property of the first result, or None."""
        result = self.first([property])
        if not result:
            return None
        return result.get(property)

    def first(self, properties: Optional[Sequence[str]] = None) -> Optional[Dict[str, Any]]:
        """The first entity of the result, or None."""
        return self.take(1).get(properties).first()

    def get(
        self,
        properties: Optional[Sequence[str]] = None,
        options: Optional[Union[int, QueryOptions]] = None,
    ) -> "ODataResponse":
        """
        Execute the query as a GET request.

        Parameters
        ----------
        properties : list of str, optional
            $select to use when the builder has none of its own
        options : QueryOptions, optional
            ``QueryOptions.INCLUDE_COUNT`` requests an inline total count
        """
        self._apply_call_options(properties, options)
        request = self.to_request()
        bindings = self.get_bindings()
        logger.debug("GET %s bindings=%r", request, bindings)
        return self._client().get(request, bindings)

    def post(
        self,
        body: Any = None,
        properties: Optional[Sequence[str]] = None,
        options: Optional[Union[int, QueryOptions]] = None,
    ) -> "ODataResponse":
        """Execute the query as a POST request with body."""
        self._apply_call_options(properties, options)
        request = self.to_request()
        logger.debug("POST %s", request)
        return self._client().post(request, body if body is not None else {})

    def patch(
        self,
        body: Any,
        properties: Optional[Sequence[str]] = None,
        options: Optional[Union[int, QueryOptions]] = None,
    ) -> "ODataResponse":
        """Execute the query as a PATCH request with body."""
        self._apply_call_options(properties, options)
        request = self.to_request()
        logger.debug("PATCH %s", request)
        return self._client().patch(request, body)

    def delete(self) -> bool:
        """Execute the query as a DELETE request; True when the service answers 204."""
        request = self.to_request()
        logger.debug("DELETE %s", request)
        response = self._client().delete(request)
        return response.status == 204

    def count(self) -> int:
        """
        Request ``/$count`` and return it as an int.

        Raises
        ------
        EmptyCountResponse
            If the service returns an empty body
        ResponseParseError
            If the body holds no digits
        """
        self.count_only = True
        response = self.get()

        if response.is_empty():
            raise EmptyCountResponse(EMPTY_COUNT_RESPONSE)

        digits = re.sub(r"[^0-9]", "", response.raw_body)
        if not digits:
            raise ResponseParseError(f"Unable to read a count from {response.raw_body[:80]!r}")
        return int(digits)

    def insert_get_id(self, values: Mapping[str, Any]) -> Any:
        """POST values and return the identifier of the created entity."""
        return self.post(dict(values)).get_id()

    def pages(self, max_pages: Optional[int] = None) -> Generator[List[Dict[str, Any]], None, None]:
        """
        Execute the query and yield each page of entities, following
        ``@odata.nextLink`` until it runs out or max_pages is reached.
        """
        client = self._client()
        response = self.get()
        seen = set()
        yielded = 0

        while True:
            chunk = response.entities()
            if chunk:
                yield chunk
                yielded += 1
                if max_pages is not None and yielded >= int(max_pages):
                    return

            next_link = response.next_link
            if not next_link or next_link in seen:
                return
            seen.add(next_link)
            response = client.get(next_link)

    # ---------------- helpers ----------------

    def _apply_call_options(
        self,
        properties: Optional[Sequence[str]],
        options: Optional[Union[int, QueryOptions]],
    ) -> None:
        if options is not None and QueryOptions(options) & QueryOptions.INCLUDE_COUNT:
            self.total_count = True
        if properties and not self.properties:
            self.properties = list(properties)

    def _client(self) -> "ODataClient":
        if self.client is None:
            raise MissingRequestTarget("This builder has no client to send the request with.")
        return self.client


def _flatten_args(args: Sequence[Any]) -> List[str]:
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        return [str(a) for a in args[0]]
    return [str(a) for a in args]
