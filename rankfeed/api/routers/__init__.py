"""API routers package."""
from .feeds import router as feeds_router
from .health import router as health_router
from .rankings import router as rankings_router

__all__ = ["feeds_router", "health_router", "rankings_router"]
