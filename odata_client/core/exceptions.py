"""
odata_client.core.exceptions - Error taxonomy
==============================================

Configuration errors and invalid query construction are raised synchronously
while the query is built; transport and response errors surface from the
request layer. Nothing here is retried.
"""

from __future__ import annotations

from typing import Dict, Optional


class ODataError(Exception):
    """Base class for every error raised by odata_client."""


# ---------------- configuration ----------------

class ODataConfigurationError(ODataError):
    """Required state is missing when a query is compiled or sent."""


class MissingEntitySet(ODataConfigurationError):
    """The query has no entity set."""


class MissingRequestTarget(ODataConfigurationError):
    """A request was created without a URL."""


# ---------------- query construction ----------------

class ODataQueryError(ODataError, ValueError):
    """The query was constructed incorrectly (programmer error)."""


class InvalidOperatorValue(ODataQueryError):
    """A null value was paired with an operator that cannot compare to null."""


class InvalidBindingCategory(ODataQueryError):
    """A binding was added to a category other than select, where or order."""

    def __init__(self, category: str):
        super().__init__(f"Invalid binding type: {category}.")
        self.category = category


class IllegalOperatorCombination(ODataQueryError):
    """The operator is recognized but the grammar cannot express it."""


# ---------------- response ----------------

class ODataResponseError(ODataError):
    """The service response could not be interpreted."""


class ResponseParseError(ODataResponseError):
    """The body is not valid structured data."""


class EmptyCountResponse(ODataResponseError):
    """A $count request came back with an empty body."""


class ODataUpstreamError(ODataError, RuntimeError):
    """
    Exception raised when the OData service returns an error status.

    Attributes
    ----------
    status : int
        HTTP status code
    body : str
        Response body (truncated for display)
    url : str
        The URL that was called
    headers : dict
        Response headers
    """

    def __init__(
        self,
        status: int,
        body: str,
        url: str,
        headers: Optional[Dict[str, str]] = None
    ):
        snippet = (body or "")[:1200]
        super().__init__(f"OData upstream error {status} for {url}: {snippet}")
        self.status = status
        self.body = body or ""
        self.url = url
        self.headers = headers or {}
