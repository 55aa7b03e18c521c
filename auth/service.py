"""
Auth service — register, login, refresh, logout.

Sessions are not stored server-side: a user is "logged in" for as long as
they hold a valid access token, and logout is an acknowledgment only.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth.jwt import TokenError, TokenPayload, TokenService
from auth.password import DEFAULT_ROUNDS, hash_password, verify_password
from database.models import User
from utils.errors import DuplicateEmail, InvalidCredentials, InvalidRefreshToken
from utils.schemas import LoginResult, PublicUser, RefreshResult

logger = logging.getLogger(__name__)

# Hashes verified against when the email is unknown, keyed by work factor.
_DUMMY_HASHES: Dict[int, str] = {}


def _dummy_hash(rounds: int) -> str:
    if rounds not in _DUMMY_HASHES:
        _DUMMY_HASHES[rounds] = hash_password("not-a-real-password", rounds)
    return _DUMMY_HASHES[rounds]


class AuthService:
    def __init__(
        self,
        session: AsyncSession,
        tokens: TokenService,
        *,
        bcrypt_rounds: int = DEFAULT_ROUNDS,
    ) -> None:
        self.session = session
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds

    async def _find_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, name: str, email: str, password: str) -> PublicUser:
        """Create a user; raises ``DuplicateEmail`` if the email is taken."""
        if await self._find_by_email(email) is not None:
            raise DuplicateEmail()

        password_hash = await asyncio.to_thread(hash_password, password, self.bcrypt_rounds)
        user = User(name=name, email=email, password_hash=password_hash)
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError as exc:
            # Lost a race against a concurrent registration.
            raise DuplicateEmail() from exc

        logger.info("Registered user %s (%s)", email, user.id)
        return PublicUser.model_validate(user)

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue an access/refresh token pair.

        Unknown email and wrong password raise the same ``InvalidCredentials``.
        """
        user = await self._find_by_email(email)
        # Unknown emails are checked against a dummy hash of the same cost.
        if user is not None:
            password_hash = user.password_hash
        else:
            password_hash = await asyncio.to_thread(_dummy_hash, self.bcrypt_rounds)
        matches = await asyncio.to_thread(verify_password, password, password_hash)
        if user is None or not matches:
            logger.info("Failed login for %s", email)
            raise InvalidCredentials()

        payload = TokenPayload(user_id=str(user.id), email=user.email)
        logger.info("Login: %s (%s)", user.email, user.id)
        return LoginResult(
            user=PublicUser.model_validate(user),
            access_token=self.tokens.issue_access(payload),
            refresh_token=self.tokens.issue_refresh(payload),
        )

    async def refresh(self, refresh_token: str) -> RefreshResult:
        """Exchange a valid refresh token for a new access token."""
        try:
            payload = self.tokens.verify_refresh(refresh_token)
        except TokenError as exc:
            logger.info("Refresh rejected: %s", exc)
            raise InvalidRefreshToken() from exc
        return RefreshResult(access_token=self.tokens.issue_access(payload))

    @staticmethod
    async def logout() -> Dict[str, str]:
        # Tokens are discarded client-side; nothing to revoke.
        return {"message": "Logged out successfully"}
