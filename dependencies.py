"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The objects themselves are built once in
create_app() and stored on app.state.
"""

from __future__ import annotations

from fastapi import Request

from services.auth_service import AuthService
from services.session_service import SessionService


async def get_db(request: Request):
    """Return the async MongoDB database from app.state."""
    return request.app.state.db


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_session_service(request: Request) -> SessionService:
    return request.app.state.session_service
