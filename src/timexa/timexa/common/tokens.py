from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from jose import JWTError, jwt

from ..core.constants import DEFAULT_JWT_EXPIRES_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a bearer token."""

    user_id: int
    email: str
    name: str
    role: Role


class TokenService:
    """Issues and verifies HS256 bearer tokens."""

    def __init__(self, secret: str, *, algorithm: str = "HS256", expires_minutes: int = DEFAULT_JWT_EXPIRES_MINUTES):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self._expires = timedelta(minutes=int(expires_minutes))

    def issue(self, claims: TokenClaims, *, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": claims.email,
            "username": claims.name,
            "userId": str(claims.user_id),
            "role": claims.role.value,
            "iat": issued_at,
            "exp": issued_at + self._expires,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as e:
            logger.info("Rejected bearer token: %s", e)
            raise AuthenticationError("Invalid or expired token") from None

        try:
            return TokenClaims(
                user_id=int(payload["userId"]),
                email=str(payload["sub"]),
                name=str(payload.get("username", "")),
                role=Role(payload["role"]),
            )
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid or expired token") from None
