"""Version 1 API endpoints."""

from .endpoints import chats_router, push_router, system_router, users_router

__all__ = [
    "chats_router",
    "push_router",
    "system_router",
    "users_router",
]
