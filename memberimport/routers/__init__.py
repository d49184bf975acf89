"""API routers for Member Import."""

from memberimport.routers import import_router

__all__ = ["import_router"]
