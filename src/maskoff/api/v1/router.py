"""Versioned API router wiring for v1.

This module composes the version 1 API surface by including the sub-routers
that define their own endpoints. It contains no business logic and no
endpoint definitions. Downstream code should import and mount `api_v1` only.
"""
from __future__ import annotations

from typing import Final

from fastapi import APIRouter

from .endpoints import chats_router, push_router, system_router, users_router

api_v1: Final[APIRouter] = APIRouter()
api_v1.include_router(chats_router)
api_v1.include_router(users_router)
api_v1.include_router(system_router)
api_v1.include_router(push_router)

__all__ = ["api_v1"]
