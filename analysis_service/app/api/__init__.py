"""
api
===

FastAPI routers and HTTP endpoint definitions for the concurrent analysis service.

Modules
-------
routes
    Main router for the analysis endpoints (/api/v1/analyze, /api/v1/health).

Design
------
Thin controllers: endpoints validate the request, delegate to the
orchestrator, and translate its outcome into an HTTP response.
"""

from .routes import router, get_orchestrator

__all__ = ["router", "get_orchestrator"]
