"""
odata_client.core - Transport, requests and errors
===================================================

- ODataAuth / AuthenticationProvider: request signing
- ODataConfig / ODataSession: requests-based transport
- ODataRequest / ODataResponse: execution and response wrapping
- Error taxonomy (MissingEntitySet, InvalidOperatorValue, ...)

ODataClient lives in odata_client.core.connection; it is not imported here
because it depends on the query package, which depends on this one.
"""

from odata_client.core.exceptions import (
    ODataError,
    ODataConfigurationError,
    MissingEntitySet,
    MissingRequestTarget,
    ODataQueryError,
    InvalidOperatorValue,
    InvalidBindingCategory,
    IllegalOperatorCombination,
    ODataResponseError,
    ResponseParseError,
    EmptyCountResponse,
    ODataUpstreamError,
)
from odata_client.core.auth import AuthenticationProvider, ODataAuth
from odata_client.core.session import ODataConfig, ODataSession
from odata_client.core.response import ODataResponse
from odata_client.core.request import ODataRequest, HttpRequestMessage, split_request_uri

__all__ = [
    "ODataError",
    "ODataConfigurationError",
    "MissingEntitySet",
    "MissingRequestTarget",
    "ODataQueryError",
    "InvalidOperatorValue",
    "InvalidBindingCategory",
    "IllegalOperatorCombination",
    "ODataResponseError",
    "ResponseParseError",
    "EmptyCountResponse",
    "ODataUpstreamError",
    "AuthenticationProvider",
    "ODataAuth",
    "ODataConfig",
    "ODataSession",
    "ODataResponse",
    "ODataRequest",
    "HttpRequestMessage",
    "split_request_uri",
]
