"""
API v1 package.

Contains the auth and admin routers of the Digital Library account API.
"""

from dlibrary.api.v1.admin import router as admin_router
from dlibrary.api.v1.auth import router as auth_router

__all__ = ["admin_router", "auth_router"]
