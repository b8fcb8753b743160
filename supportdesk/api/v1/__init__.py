"""API v1 package."""

from .support import router as support_router
from .operator import router as operator_router

__all__ = ["support_router", "operator_router"]
