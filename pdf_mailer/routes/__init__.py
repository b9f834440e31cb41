# Import all routes
from .submission import router as submission_router
from .health import router as health_router

# All routers that should be included in main app
__all__ = [
    "submission_router",
    "health_router",
]
