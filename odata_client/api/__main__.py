"""
odata_client.api.__main__ - Gateway server entry point
=======================================================

Serves the query gateway with uvicorn. Bind address, port, auto-reload and
log level come from ODATA_HOST, ODATA_PORT, ODATA_RELOAD and
ODATA_LOG_LEVEL.

Usage: python -m odata_client.api
"""

import logging
import os

import uvicorn

logger = logging.getLogger("odata_client.api")


def main():
    """Serve odata_client.api:app until interrupted."""
    host = os.environ.get("ODATA_HOST", "0.0.0.0")
    port = int(os.environ.get("ODATA_PORT", "5050"))
    reload = os.environ.get("ODATA_RELOAD", "false").lower() == "true"
    log_level = os.environ.get("ODATA_LOG_LEVEL", "info")

    logging.basicConfig(level=log_level.upper())
    logger.info("Serving OData query gateway at http://%s:%s (reload=%s)", host, port, reload)

    uvicorn.run(
        "odata_client.api:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
