# API routes module
# Contains all API endpoint definitions

from .repository_routes import router as repository_router

__all__ = ["repository_router"]
