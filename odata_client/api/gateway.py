"""
odata_client.api.gateway - FastAPI query gateway
=================================================

Optional REST gateway that accepts JSON query descriptions, compiles them
with the Builder and, for /query and /count, runs them against the
configured OData service.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Header, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from odata_client import __version__
from odata_client.core.connection import ODataClient
from odata_client.core.exceptions import (
    ODataConfigurationError,
    ODataQueryError,
    ODataResponseError,
    ODataUpstreamError,
)
from odata_client.query.builder import Builder
from odata_client.api.models import (
    CompileResponse,
    CountResponse,
    ExpandSpec,
    QueryResponse,
    QuerySpec,
    WhereSpec,
)

logger = logging.getLogger("odata_client.api")


class ODataGateway:
    """
    Configuration and client factory for the API gateway.

    Reads configuration from environment variables by default.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        max_top: Optional[int] = None,
        client: Optional[ODataClient] = None,
    ):
        self.base_url = base_url or os.environ.get("ODATA_BASE_URL", "")
        self.api_key = api_key if api_key is not None else os.environ.get("ODATA_API_KEY", "")
        self.max_top = max_top if max_top is not None else int(os.environ.get("ODATA_MAX_TOP", "500"))
        self._client = client

    def build_client(self) -> ODataClient:
        """Get or create the OData client (credentials come from ODATA_* env vars)."""
        if self._client is None:
            if not self.base_url:
                raise HTTPException(status_code=503, detail="ODATA_BASE_URL is not configured")
            self._client = ODataClient(self.base_url)
        return self._client

    def builder(self) -> Builder:
        """A builder for compile-only use; no upstream connection needed."""
        if self._client is not None:
            return self._client.query()
        return Builder()


def apply_wheres(query: Builder, wheres: List[WhereSpec]) -> Builder:
    """Apply a list of where specs to a builder, recursing into groups."""
    for spec in wheres:
        if spec.group is not None:
            group = spec.group
            query.where_nested(lambda q, g=group: apply_wheres(q, g), spec.boolean)
        else:
            if not spec.column:
                raise HTTPException(status_code=422, detail="where.column is required outside a group")
            query.where(spec.column, spec.operator, spec.value, spec.boolean)
    return query


def _apply_expand(spec: ExpandSpec):
    def callback(q: Builder) -> None:
        if spec.select:
            q.select(spec.select)
        if spec.where:
            apply_wheres(q, spec.where)
        if spec.top is not None:
            q.take(spec.top)
    return callback


def build_query(query: Builder, spec: QuerySpec, max_top: Optional[int] = None) -> Builder:
    """Translate a QuerySpec onto a builder."""
    query.from_(spec.entity_set)
    if spec.key is not None:
        query.where_key(spec.key)
    if spec.select:
        query.select(spec.select)
    if spec.where:
        apply_wheres(query, spec.where)
    if spec.order:
        query.order([[o.column, o.direction] for o in spec.order])
    if spec.expand:
        entries: List[Any] = []
        for e in spec.expand:
            if isinstance(e, str):
                entries.append(e)
            else:
                entries.append((e.property, _apply_expand(e)))
        query.expand(*entries)
    top = spec.top
    if max_top is not None and top is not None:
        top = min(top, max_top)
    if top is not None:
        query.take(top)
    if spec.skip is not None:
        query.skip(spec.skip)
    if spec.count:
        query.count_only = True
    if spec.total_count:
        query.total_count = True
    return query


# Global gateway instance (lazy init)
_gateway: Optional[ODataGateway] = None


def get_gateway() -> ODataGateway:
    """Get or create the global gateway instance."""
    global _gateway
    if _gateway is None:
        _gateway = ODataGateway()
    return _gateway


def create_app(gateway: Optional[ODataGateway] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Parameters
    ----------
    gateway : ODataGateway, optional
        Custom gateway configuration. If None, reads from environment.

    Returns
    -------
    FastAPI
        Configured FastAPI application
    """
    global _gateway
    _gateway = gateway or ODataGateway()

    app = FastAPI(
        title="OData Query Gateway",
        description="Compile JSON query descriptions into OData requests and run them.",
        version=__version__,
        openapi_tags=[
            {"name": "Compile", "description": "Compile a query without contacting the service"},
            {"name": "Execute", "description": "Compile and run a query"},
        ],
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -------------------------------------------------------------------------
    # Dependencies
    # -------------------------------------------------------------------------

    def require_api_key(x_api_key: Optional[str] = Header(default=None)) -> None:
        gw = get_gateway()
        if gw.api_key and x_api_key != gw.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    def _compile(spec: QuerySpec, query: Builder) -> Builder:
        try:
            return build_query(query, spec, get_gateway().max_top)
        except (ODataQueryError, ODataConfigurationError) as e:
            raise HTTPException(status_code=400, detail=str(e))

    # -------------------------------------------------------------------------
    # Endpoints
    # -------------------------------------------------------------------------

    @app.get("/health")
    def health() -> Dict[str, Any]:
        """Health check endpoint."""
        return {"ok": True, "version": __version__}

    @app.post("/compile", response_model=CompileResponse, tags=["Compile"])
    def compile_query(
        spec: QuerySpec,
        _: None = Depends(require_api_key),
    ) -> CompileResponse:
        """Compile a query spec to its OData request string."""
        query = _compile(spec, get_gateway().builder())
        try:
            request = query.to_request()
        except (ODataQueryError, ODataConfigurationError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        logger.debug("compiled %s", request)
        return CompileResponse(request=request, bindings=query.get_bindings())

    @app.post("/query", response_model=QueryResponse, tags=["Execute"])
    def run_query(
        spec: QuerySpec,
        _: None = Depends(require_api_key),
    ) -> QueryResponse:
        """Compile a query spec and execute it as a GET request."""
        gw = get_gateway()
        query = _compile(spec, gw.build_client().query())
        request = query.to_request()
        try:
            response = query.get()
            items = response.entities()
            return QueryResponse(
                entity_set=spec.entity_set,
                request=request,
                count=len(items),
                total_count=response.total_count,
                items=items,
            )
        except ODataUpstreamError as e:
            raise HTTPException(
                status_code=502,
                detail={"upstream_status": e.status, "message": str(e), "url": e.url}
            )
        except ODataResponseError as e:
            raise HTTPException(status_code=502, detail=str(e))

    @app.post("/count", response_model=CountResponse, tags=["Execute"])
    def run_count(
        spec: QuerySpec,
        _: None = Depends(require_api_key),
    ) -> CountResponse:
        """Compile a query spec and return its /$count."""
        gw = get_gateway()
        query = _compile(spec, gw.build_client().query())
        try:
            n = query.count()
            return CountResponse(entity_set=spec.entity_set, request=query.to_request(), count=n)
        except ODataUpstreamError as e:
            raise HTTPException(
                status_code=502,
                detail={"upstream_status": e.status, "message": str(e), "url": e.url}
            )
        except ODataResponseError as e:
            raise HTTPException(status_code=502, detail=str(e))

    return app
