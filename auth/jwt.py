"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON payloads signed with HMAC-SHA256.
Access and refresh tokens are signed with different secrets
(``JWT_SECRET`` / ``REFRESH_SECRET``) and carry their own lifetimes, so a
token of one class never verifies as the other.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from config.settings import Settings


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidSignature(TokenError):
    """Token is malformed or its signature does not match."""


class TokenExpired(TokenError):
    """Signature is valid but the ``exp`` claim has passed."""


class TokenPayload(BaseModel):
    """Identity claim embedded in both token classes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    user_id: str
    email: str


def _sign(secret: bytes, raw: bytes) -> str:
    return hmac.new(secret, raw, hashlib.sha256).hexdigest()


class TokenService:
    """Issues and verifies access / refresh tokens."""

    def __init__(self, settings: Settings, clock: Callable[[], float] = time.time) -> None:
        if not settings.jwt_secret or not settings.refresh_secret:
            raise RuntimeError("JWT_SECRET and REFRESH_SECRET must be set")
        if settings.jwt_secret == settings.refresh_secret:
            raise RuntimeError("JWT_SECRET and REFRESH_SECRET must differ")
        self._access_secret = settings.jwt_secret.encode()
        self._refresh_secret = settings.refresh_secret.encode()
        self._access_ttl = settings.access_token_ttl
        self._refresh_ttl = settings.refresh_token_ttl
        self._clock = clock

    # ── Issue ───────────────────────────────────────────────────────────

    def issue_access(self, payload: TokenPayload) -> str:
        return self._encode(payload, self._access_secret, self._access_ttl)

    def issue_refresh(self, payload: TokenPayload) -> str:
        return self._encode(payload, self._refresh_secret, self._refresh_ttl)

    # ── Verify ──────────────────────────────────────────────────────────

    def verify_access(self, token: str) -> TokenPayload:
        """Return the payload of a valid access token or raise ``TokenError``."""
        return self._decode(token, self._access_secret)

    def verify_refresh(self, token: str) -> TokenPayload:
        """Return the payload of a valid refresh token or raise ``TokenError``."""
        return self._decode(token, self._refresh_secret)

    # ── Internals ───────────────────────────────────────────────────────

    def _encode(self, payload: TokenPayload, secret: bytes, ttl: int) -> str:
        now = int(self._clock())
        claims = payload.model_dump(by_alias=True)
        claims["iat"] = now
        claims["exp"] = now + ttl
        raw = json.dumps(claims, separators=(",", ":")).encode()
        return urlsafe_b64encode(raw).decode() + "." + _sign(secret, raw)

    def _decode(self, token: str, secret: bytes) -> TokenPayload:
        parts = token.split(".")
        if len(parts) != 2:
            raise InvalidSignature("bad format")
        try:
            raw = urlsafe_b64decode(parts[0].encode())
        except (binascii.Error, ValueError) as exc:
            raise InvalidSignature("bad encoding") from exc
        # Bytes, since compare_digest rejects non-ASCII str.
        if not hmac.compare_digest(parts[1].encode(), _sign(secret, raw).encode()):
            raise InvalidSignature("bad signature")
        try:
            claims = json.loads(raw)
            payload = TokenPayload.model_validate(claims)
            exp = int(claims["exp"])
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            raise InvalidSignature("bad claims") from exc
        if exp <= self._clock():
            raise TokenExpired("token expired")
        return payload
