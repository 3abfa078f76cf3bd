"""
odata_client.core.session - HTTP transport
===========================================

Thin requests-based transport for OData services:
- Configuration dataclass
- One synchronous call per request
- Error extraction from OData error payloads
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional, Union
import logging
import time

import requests
from requests import Response, Session

from odata_client.constants import SDK_VERSION
from odata_client.core.auth import AuthenticationProvider
from odata_client.core.exceptions import ODataUpstreamError

if TYPE_CHECKING:
    from odata_client.core.request import HttpRequestMessage


@dataclass
class ODataConfig:
    """
    Connection configuration for an OData service.

    Parameters
    ----------
    base_url : str
        Service root URL, e.g. "https://services.odata.org/TripPinRESTierService/"
    auth : AuthenticationProvider, optional
        Authentication provider; None sends requests unauthenticated
    timeout : float
        Request timeout in seconds (default: 60.0)
    verify : bool or str
        SSL verification (True, False, or path to CA bundle), passed to requests
    user_agent : str
        User-Agent header value
    headers : dict
        Extra headers sent with every request

    Examples
    --------
    >>> cfg = ODataConfig(
    ...     base_url="https://services.odata.org/TripPinRESTierService/",
    ...     auth=ODataAuth("bearer", "token"),
    ... )
    """
    base_url: str
    auth: Optional[AuthenticationProvider] = None
    timeout: float = 60.0
    verify: Union[bool, str] = True
    user_agent: str = f"odata-client-python-{SDK_VERSION}"
    headers: Dict[str, str] = field(default_factory=dict)


class ODataSession:
    """
    Low-level HTTP transport.

    Sends one request per call and raises ODataUpstreamError for error
    statuses. Use as a context manager for automatic cleanup.

    Parameters
    ----------
    cfg : ODataConfig
        Connection configuration
    """

    def __init__(self, cfg: ODataConfig) -> None:
        self.cfg = cfg
        self.base = cfg.base_url.rstrip("/") + "/"
        self.timeout = float(cfg.timeout)
        self.verify = cfg.verify
        self.logger = logging.getLogger("odata_client.http")

        self.session = self._build_session()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "ODataSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _build_session(self) -> Session:
        sess = requests.Session()
        sess.headers.update({
            "Accept": "application/json",
            "User-Agent": self.cfg.user_agent,
        })
        if self.cfg.headers:
            sess.headers.update(self.cfg.headers)
        return sess

    # ---------------- helpers ----------------

    def _extract_odata_error(self, r: Response) -> str:
        try:
            data = r.json()
        except ValueError:
            return r.text
        if not isinstance(data, dict):
            return r.text
        err = data.get("error")
        if not isinstance(err, dict):
            return r.text

        code = err.get("code")
        message = None
        if isinstance(err.get("message"), dict):
            message = err["message"].get("value")
        elif isinstance(err.get("message"), str):
            message = err.get("message")

        inner = err.get("innererror") or err.get("innerError")
        detail = inner.get("message") if isinstance(inner, dict) else None

        parts = []
        if code:
            parts.append(f"code={code}")
        if message:
            parts.append(f"message={message}")
        if detail:
            parts.append(f"detail={detail}")
        return " | ".join(parts) or r.text

    def _raise_for_error(self, r: Response, url: str) -> None:
        if r.status_code >= 400:
            body = self._extract_odata_error(r)
            raise ODataUpstreamError(r.status_code, body, url, dict(r.headers))

    # ---------------- public ops ----------------

    def send(self, request: "HttpRequestMessage") -> Response:
        """
        Send a prepared request message.

        Returns
        -------
        requests.Response
            The raw response (status, headers and body)

        Raises
        ------
        ODataUpstreamError
            If the service answers with a 4xx/5xx status
        """
        t0 = time.perf_counter()
        r = self.session.request(
            method=request.method,
            url=request.url,
            headers=request.headers,
            params=request.params or None,
            data=request.body,
            timeout=self.timeout,
            verify=self.verify,
            stream=request.stream,
        )
        dt = (time.perf_counter() - t0) * 1000.0
        self.logger.debug("%s %s %s %sms", request.method, request.url, r.status_code, round(dt, 1))
        self._raise_for_error(r, request.url)
        return r
