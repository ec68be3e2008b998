"""Inbound adapters for the HTTP gateway.

Inbound adapters handle incoming requests and convert them to
application use cases.

Exports:
    - create_app: Create the FastAPI application
    - run_server: Run it under uvicorn
"""

from pg_http.adapters.inbound.rest_api import create_app, run_server

__all__ = [
    "create_app",
    "run_server",
]
