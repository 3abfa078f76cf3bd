"""
odata_client.api - Optional REST API Gateway
=============================================

This module provides an optional FastAPI-based REST gateway that compiles
JSON query descriptions and runs them against an OData service.

Usage
-----
>>> from odata_client.api import create_app
>>> app = create_app()
>>> # Run with: uvicorn odata_client.api:app

Or run directly:
>>> python -m odata_client.api

"""

from odata_client.api.gateway import create_app, build_query, ODataGateway

# Create default app instance for uvicorn
app = create_app()

__all__ = [
    "create_app",
    "build_query",
    "ODataGateway",
    "app",
]
