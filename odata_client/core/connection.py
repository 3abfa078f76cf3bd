"""
odata_client.core.connection - OData client
============================================

ODataClient owns everything a query needs to run: the service root URL, the
authentication provider, the HTTP transport and the query grammar. Builders
are created from it and send their compiled requests back through it.
"""

from __future__ import annotations

import os
from typing import Any, List, Optional, Sequence, Tuple, Union

from odata_client.core.auth import AuthenticationProvider, ODataAuth
from odata_client.core.request import ODataRequest, split_request_uri
from odata_client.core.response import ODataResponse
from odata_client.core.session import ODataConfig, ODataSession
from odata_client.query.builder import Builder
from odata_client.query.grammar import Grammar, IGrammar


class ODataClient:
    """
    Entry point for fluent queries against one OData service.

    Parameters
    ----------
    base_url : str, optional
        Service root URL. Falls back to ODATA_BASE_URL env var.
    user : str, optional
        Username for basic auth. Falls back to ODATA_USER env var.
    password : str, optional
        Password for basic auth. Falls back to ODATA_PASS env var.
    bearer_token : str, optional
        Bearer token. Falls back to ODATA_BEARER_TOKEN env var.
    auth : AuthenticationProvider, optional
        Explicit provider; takes precedence over user/password/token.
    verify : bool, optional
        SSL verification. Falls back to ODATA_VERIFY_TLS env var.
    timeout : float, optional
        Request timeout in seconds. Falls back to ODATA_TIMEOUT env var.
    grammar : IGrammar, optional
        Query grammar; defaults to the OData v4 Grammar.
    session : ODataSession, optional
        Transport to use instead of building one.

    Examples
    --------
    >>> client = ODataClient("https://services.odata.org/TripPinRESTierService/")
    >>> people = client.from_("People").where("FirstName", "Russell").get()

    >>> with ODataClient() as client:  # reads ODATA_* env vars
    ...     n = client.from_("People").count()
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        bearer_token: Optional[str] = None,
        *,
        auth: Optional[AuthenticationProvider] = None,
        verify: Optional[bool] = None,
        timeout: Optional[float] = None,
        grammar: Optional[IGrammar] = None,
        session: Optional[ODataSession] = None,
    ) -> None:
        # Resolve from environment if not provided
        self._base_url = (base_url or os.environ.get("ODATA_BASE_URL", "")).rstrip("/") + "/"
        self._user = user or os.environ.get("ODATA_USER", "")
        self._password = password or os.environ.get("ODATA_PASS", "")
        self._bearer_token = bearer_token or os.environ.get("ODATA_BEARER_TOKEN", "")

        if verify is not None:
            self._verify = verify
        else:
            self._verify = os.environ.get("ODATA_VERIFY_TLS", "true").lower() != "false"

        if timeout is not None:
            self._timeout = float(timeout)
        else:
            self._timeout = float(os.environ.get("ODATA_TIMEOUT", "60"))

        if not self._base_url or self._base_url == "/":
            raise ValueError(
                "Missing base_url. Set ODATA_BASE_URL environment variable "
                "or pass base_url parameter."
            )

        if auth is None:
            if self._bearer_token:
                auth = ODataAuth("bearer", self._bearer_token)
            elif self._user and self._password:
                auth = ODataAuth("basic", (self._user, self._password))
        self._auth = auth

        self._grammar: IGrammar = grammar or Grammar()
        self._session = session

    # ---------------- collaborators ----------------

    @property
    def http_provider(self) -> ODataSession:
        """Get or create the underlying transport."""
        if self._session is None:
            self._session = self._build_session()
        return self._session

    def _build_session(self) -> ODataSession:
        cfg = ODataConfig(
            base_url=self._base_url,
            auth=self._auth,
            timeout=self._timeout,
            verify=self._verify,
        )
        return ODataSession(cfg)

    @property
    def authentication_provider(self) -> Optional[AuthenticationProvider]:
        return self._auth

    @property
    def base_url(self) -> str:
        """The configured service root URL."""
        return self._base_url

    @property
    def query_grammar(self) -> IGrammar:
        return self._grammar

    @query_grammar.setter
    def query_grammar(self, grammar: IGrammar) -> None:
        self._grammar = grammar

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self) -> "ODataClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ---------------- fluent entry points ----------------

    def query(self) -> Builder:
        """A new, empty query builder bound to this client."""
        return Builder(self, self._grammar)

    def from_(self, entity_set: str) -> Builder:
        """Begin a fluent query against an entity set."""
        return self.query().from_(entity_set)

    def select(self, *properties: Union[str, Sequence[str]]) -> Builder:
        """Begin a fluent query with a $select list."""
        return self.query().select(*properties)

    # ---------------- requests ----------------

    def url_for(self, request_uri: str) -> str:
        """Resolve a compiled request against the service root; absolute URLs pass through."""
        if request_uri.startswith(("http://", "https://")):
            return request_uri
        return self._base_url + request_uri.lstrip("/")

    def request(self, method: str, request_uri: str, body: Any = None) -> ODataResponse:
        """
        Send a compiled request.

        The query options of a compiled request travel as encoded query
        parameters; absolute URLs such as next links are sent as they are.
        """
        url = ""
        params: List[Tuple[str, str]] = []
        if request_uri:
            if request_uri.startswith(("http://", "https://")):
                url = request_uri
            else:
                path, params = split_request_uri(request_uri)
                url = self.url_for(path)
        req = ODataRequest(method, url, self)
        req.add_params(params)
        if body is not None:
            req.attach_body(body)
        return req.execute()

    def get(self, request_uri: str, bindings: Optional[Sequence[Any]] = None) -> ODataResponse:
        """
        Execute a GET request.

        bindings are the values embedded in the request; they are only
        informational since the grammar already inlined them.
        """
        return self.request("GET", request_uri)

    def post(self, request_uri: str, post_data: Any) -> ODataResponse:
        return self.request("POST", request_uri, post_data)

    def patch(self, request_uri: str, body: Any) -> ODataResponse:
        return self.request("PATCH", request_uri, body)

    def delete(self, request_uri: str) -> ODataResponse:
        return self.request("DELETE", request_uri)
