"""API routers for AdBoard.

Each router handles a specific domain of endpoints.
"""

from .dashboard import router as dashboard_router
from .sync_data import router as sync_data_router
from .system import router as system_router

__all__ = [
    "dashboard_router",
    "sync_data_router",
    "system_router",
]
