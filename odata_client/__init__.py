"""
odata_client - Fluent OData v4 query builder and client
========================================================

Compose entity-set queries (select, filter, order, paging, expansion,
sub-queries) and compile them into OData URL query strings, optionally
sending them to a service.

Usage
-----
>>> from odata_client import ODataClient
>>>
>>> with ODataClient("https://services.odata.org/TripPinRESTierService/") as client:
...     people = (
...         client.from_("People")
...         .select("UserName", "FirstName")
...         .where("FirstName", "Russell")
...         .get()
...     )

Compile without sending:

>>> from odata_client import Builder
>>> Builder().from_("People").where("Age", ">", 30).take(5).to_request()
'People?$filter=Age gt 30&$top=5'

Subpackages
-----------
- odata_client.query: Builder, grammars, clause model, bindings
- odata_client.core: transport, requests, responses, errors
- odata_client.api: Optional FastAPI gateway

"""

__version__ = "0.3.0"

from odata_client.core.exceptions import (
    ODataError,
    MissingEntitySet,
    MissingRequestTarget,
    InvalidOperatorValue,
    InvalidBindingCategory,
    IllegalOperatorCombination,
    ResponseParseError,
    EmptyCountResponse,
    ODataUpstreamError,
)
from odata_client.core.auth import AuthenticationProvider, ODataAuth
from odata_client.core.session import ODataConfig, ODataSession
from odata_client.core.response import ODataResponse
from odata_client.core.connection import ODataClient

from odata_client.query import Builder, Grammar, GrammarV2, QueryOptions, raw

__all__ = [
    # Version
    "__version__",
    # Client
    "ODataClient",
    "ODataAuth",
    "AuthenticationProvider",
    "ODataConfig",
    "ODataSession",
    "ODataResponse",
    # Query
    "Builder",
    "Grammar",
    "GrammarV2",
    "QueryOptions",
    "raw",
    # Errors
    "ODataError",
    "MissingEntitySet",
    "MissingRequestTarget",
    "InvalidOperatorValue",
    "InvalidBindingCategory",
    "IllegalOperatorCombination",
    "ResponseParseError",
    "EmptyCountResponse",
    "ODataUpstreamError",
]
