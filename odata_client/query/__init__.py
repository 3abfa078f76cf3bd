"""
odata_client.query - Query model and compiler
==============================================

- Builder: fluent query construction
- Grammar / GrammarV2: compile builder state to an OData request
- BindingStore: values embedded in the compiled query
- Clause records and the raw() expression marker
"""

from odata_client.query.bindings import BindingStore
from odata_client.query.clauses import (
    BasicClause,
    FunctionClause,
    NullClause,
    NotNullClause,
    NestedClause,
    SubClause,
    Expression,
    Expansion,
    Order,
    RawOrder,
    Reference,
    raw,
)
from odata_client.query.grammar import IGrammar, Grammar, GrammarV2, escape_odata_literal
from odata_client.query.builder import Builder, QueryOptions

__all__ = [
    "BindingStore",
    "BasicClause",
    "FunctionClause",
    "NullClause",
    "NotNullClause",
    "NestedClause",
    "SubClause",
    "Expression",
    "Expansion",
    "Order",
    "RawOrder",
    "Reference",
    "raw",
    "IGrammar",
    "Grammar",
    "GrammarV2",
    "escape_odata_literal",
    "Builder",
    "QueryOptions",
]
