"""Mini README: Interactive interfaces (web/CLI) for SolarFlow.

Exports the FastAPI application factory that serves the ledger operations
as JSON. Dashboards and forms live outside this repository and consume
these endpoints.
"""

from .web_app import create_application

__all__ = ["create_application"]
