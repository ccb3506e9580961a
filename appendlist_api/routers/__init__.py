"""API routers."""

from appendlist_api.routers.append_lists import router as append_lists_router
from appendlist_api.routers.notifications import router as notifications_router

__all__ = [
    "append_lists_router",
    "notifications_router",
]
