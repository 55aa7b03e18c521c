"""
FastAPI dependencies for authentication.

Provides ``db_session``, the service factories and ``get_current_user``,
the bearer-token gate every task route runs behind.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenExpired, TokenError, TokenPayload, TokenService
from auth.service import AuthService
from database.session import get_db_session
from tasks.service import TaskService
from utils.errors import Unauthenticated

logger = logging.getLogger(__name__)


async def db_session(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a DB session for route handlers."""
    yield session


def get_token_service(request: Request) -> TokenService:
    """The process-wide ``TokenService`` built in ``main.create_app``."""
    return request.app.state.tokens


def get_auth_service(
    request: Request,
    session: AsyncSession = Depends(db_session),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(session, tokens, bcrypt_rounds=request.app.state.bcrypt_rounds)


def get_task_service(session: AsyncSession = Depends(db_session)) -> TaskService:
    return TaskService(session)


def parse_bearer(authorization: Optional[str]) -> str:
    """
    Return the token from an ``Authorization: Bearer <token>`` header.

    The scheme is case-sensitive and must be separated from the token by
    exactly one space.
    """
    if not authorization:
        raise Unauthenticated("No authorization header provided", reason="missing header")
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise Unauthenticated(
            "Invalid authorization header format. Use: Bearer <token>",
            reason="malformed header",
        )
    return parts[1]


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> TokenPayload:
    """
    Verify the bearer access token and attach its payload to
    ``request.state.user``.
    """
    try:
        token = parse_bearer(authorization)
    except Unauthenticated as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.reason)
        raise

    try:
        payload = tokens.verify_access(token)
    except TokenExpired as exc:
        logger.info("Rejected %s %s: expired token", request.method, request.url.path)
        raise Unauthenticated("Token has expired", reason="expired") from exc
    except TokenError as exc:
        logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        raise Unauthenticated("Invalid token", reason=str(exc)) from exc

    request.state.user = payload
    return payload
