from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import jwt

from quickscan.exceptions import AuthError

from .models import IssuedToken, User

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """Stateless HS256 bearer tokens.

    Expiry is checked against the injected clock rather than by PyJWT so tests
    can move time without sleeping.
    """

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(hours=24),
        clock: Clock = utcnow,
    ):
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def issue(self, user: User) -> IssuedToken:
        now = self._clock()
        expires_at = now + self.ttl
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=expires_at)

    def decode(self, token: str) -> dict[str, Any]:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "require": ["sub", "exp", "iat"]},
            )
        except jwt.PyJWTError as exc:
            raise AuthError("Invalid or malformed token") from exc

        if int(claims["exp"]) <= int(self._clock().timestamp()):
            raise AuthError("Token has expired")
        return claims

    def subject(self, token: str) -> uuid.UUID:
        claims = self.decode(token)
        try:
            return uuid.UUID(str(claims["sub"]))
        except ValueError as exc:
            raise AuthError("Invalid token subject") from exc
