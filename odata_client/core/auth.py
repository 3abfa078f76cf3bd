"""
odata_client.core.auth - Authentication providers
==================================================

An authentication provider receives the outgoing request just before it is
sent and may add or change headers. The base provider does nothing, which is
the unauthenticated mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Tuple, Union

from requests.auth import HTTPBasicAuth

from odata_client.constants import RequestHeader

if TYPE_CHECKING:
    from odata_client.core.request import HttpRequestMessage


class AuthenticationProvider:
    """No-op provider; subclass and override authenticate_request."""

    def authenticate_request(self, request: "HttpRequestMessage") -> "HttpRequestMessage":
        return request


@dataclass
class ODataAuth(AuthenticationProvider):
    """
    Basic or bearer authentication.

    Parameters
    ----------
    kind : str
        Either "basic" or "bearer"
    value : tuple or str
        For basic: (username, password) tuple
        For bearer: access token string

    Examples
    --------
    >>> auth = ODataAuth("basic", ("USER", "PASSWORD"))
    >>> auth = ODataAuth("bearer", "eyJ...")
    """
    kind: str  # "basic" | "bearer"
    value: Union[Tuple[str, str], str]  # (user, pass) or access_token

    def __post_init__(self) -> None:
        if self.kind not in ("basic", "bearer"):
            raise ValueError("auth.kind must be 'basic' or 'bearer'")

    def authenticate_request(self, request: "HttpRequestMessage") -> "HttpRequestMessage":
        if self.kind == "basic":
            user, password = self.value  # type: ignore[misc]
            # HTTPBasicAuth only touches request.headers
            HTTPBasicAuth(user, password)(request)
        else:
            request.headers[RequestHeader.AUTHORIZATION] = f"Bearer {self.value}"
        return request
