"""API endpoint modules for version 1."""

from .chats import router as chats_router
from .push import router as push_router
from .system import router as system_router
from .users import router as users_router

__all__ = [
    "chats_router",
    "push_router",
    "system_router",
    "users_router",
]
