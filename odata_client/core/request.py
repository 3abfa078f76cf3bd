"""
odata_client.core.request - Request execution
==============================================

ODataRequest wraps one compiled request: it carries the default OData
headers, encodes the body, lets the authentication provider sign it, sends
it through the client's transport and wraps the result.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple, Union
from urllib.parse import quote

from odata_client.constants import (
    MAX_ODATA_VERSION,
    ODATA_VERSION,
    REQUEST_URL_MISSING,
    SDK_VERSION,
    UNABLE_TO_PARSE_RESPONSE,
    RequestHeader,
)
from odata_client.core.exceptions import MissingRequestTarget, ResponseParseError
from odata_client.core.response import ODataResponse

if TYPE_CHECKING:
    from odata_client.core.connection import ODataClient

# Key predicates and $ref/$count segments keep their delimiters
_PATH_SAFE = "/$()',=:@"


def _split_top_level(text: str, sep: str, maxsplit: int = -1) -> List[str]:
    """Split on sep, ignoring separators inside quoted literals or parentheses."""
    pieces: List[str] = []
    depth = 0
    quoted = False
    start = 0
    for i, ch in enumerate(text):
        if ch == "'":
            # '' inside a literal toggles twice
            quoted = not quoted
        elif quoted:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        elif ch == sep and depth == 0 and len(pieces) != maxsplit:
            pieces.append(text[start:i])
            start = i + 1
    pieces.append(text[start:])
    return pieces


def split_request_uri(request_uri: str) -> Tuple[str, List[Tuple[str, str]]]:
    """
    Split a compiled request into an encoded resource path and its query options.

    The options are returned undecoded as ``(name, value)`` pairs so the
    transport can encode them as query parameters. A ``?`` or ``&`` inside a
    string literal or a parenthesized sub-query is not a boundary.

    Examples
    --------
    >>> split_request_uri("People('a#b')?$filter=Name eq 'A&B'&$top=2")
    ("People('a%23b')", [('$filter', "Name eq 'A&B'"), ('$top', '2')])
    """
    path, *rest = _split_top_level(request_uri, "?", maxsplit=1)
    params: List[Tuple[str, str]] = []
    if rest:
        for option in _split_top_level(rest[0], "&"):
            if not option:
                continue
            name, _, value = option.partition("=")
            params.append((name, value))
    return quote(path, safe=_PATH_SAFE), params


@dataclass
class HttpRequestMessage:
    """The request as handed to the authentication provider and transport."""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[Union[str, bytes]] = None
    stream: bool = False
    params: List[Tuple[str, str]] = field(default_factory=list)


class ODataRequest:
    """
    One OData request.

    Parameters
    ----------
    method : str
        HTTP method, e.g. "GET" or "POST"
    request_url : str
        Absolute URL of the request
    client : ODataClient
        Client providing the transport and authentication provider
    return_type : str, optional
        "stream" returns the raw transport response instead of an ODataResponse

    Raises
    ------
    MissingRequestTarget
        If request_url is empty
    """

    def __init__(
        self,
        method: str,
        request_url: str,
        client: "ODataClient",
        return_type: Optional[str] = None,
    ) -> None:
        self.method = method.upper()
        self.request_url = request_url
        self.client = client
        self.returns_stream = False
        self.return_type: Optional[str] = None
        self.set_return_type(return_type)

        if not self.request_url:
            raise MissingRequestTarget(REQUEST_URL_MISSING)

        self.headers = self._default_headers()
        self.request_body: Optional[Union[str, bytes]] = None
        self.params: List[Tuple[str, str]] = []

    def set_return_type(self, return_type: Optional[str]) -> "ODataRequest":
        if return_type is None:
            return self
        self.return_type = return_type
        self.returns_stream = return_type.lower() == "stream"
        return self

    def add_headers(self, headers: Dict[str, str]) -> "ODataRequest":
        self.headers.update(headers)
        return self

    def get_headers(self) -> Dict[str, str]:
        return self.headers

    def add_params(self, params: List[Tuple[str, str]]) -> "ODataRequest":
        """Append query options, sent encoded by the transport."""
        self.params.extend(params)
        return self

    def attach_body(self, obj: Any) -> "ODataRequest":
        """Attach a body; strings and bytes go as-is, anything else is JSON encoded."""
        if isinstance(obj, (str, bytes)):
            self.request_body = obj
        else:
            self.request_body = json.dumps(obj, separators=(",", ":"), default=str)
        return self

    def get_body(self) -> Optional[Union[str, bytes]]:
        return self.request_body

    def get_http_request_message(self) -> HttpRequestMessage:
        return HttpRequestMessage(
            method=self.method,
            url=self.request_url,
            headers=dict(self.headers),
            body=self.request_body,
            stream=self.returns_stream,
            params=list(self.params),
        )

    def execute(self) -> Any:
        """
        Send the request.

        Returns
        -------
        ODataResponse or requests.Response
            The wrapped response, or the raw one for stream requests
        """
        if not self.request_url:
            raise MissingRequestTarget(REQUEST_URL_MISSING)

        message = self.get_http_request_message()
        provider = self.client.authentication_provider
        if provider is not None:
            provider.authenticate_request(message)

        result = self.client.http_provider.send(message)

        if self.returns_stream:
            return result

        try:
            return ODataResponse(self, result.content, result.status_code, dict(result.headers))
        except UnicodeDecodeError as e:
            raise ResponseParseError(UNABLE_TO_PARSE_RESPONSE) from e

    def _default_headers(self) -> Dict[str, str]:
        return {
            RequestHeader.CONTENT_TYPE: "application/json",
            RequestHeader.ODATA_MAX_VERSION: MAX_ODATA_VERSION,
            RequestHeader.ODATA_VERSION: ODATA_VERSION,
            RequestHeader.USER_AGENT: f"odata-client-python-{SDK_VERSION}",
        }
