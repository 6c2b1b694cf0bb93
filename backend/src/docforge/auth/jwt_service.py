"""JWT access token generation and validation."""

import time
from collections.abc import Iterable

import jwt

from docforge.auth.types import TokenClaims


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid or malformed."""

    pass


class JWTService:
    """Service for generating and validating access tokens.

    Uses HS256 algorithm with a shared secret key.
    """

    ACCESS_TOKEN_TTL = 24 * 60 * 60  # 1 day

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens (should be at least 32 chars)
            algorithm: JWT algorithm (default HS256)
        """
        self._secret_key = secret_key
        self._algorithm = algorithm

    def generate_token(
        self,
        user_id: str,
        roles: Iterable[str] = (),
        ttl: int | None = None,
    ) -> str:
        """Generate an access token for a user.

        Args:
            user_id: The user's ID
            roles: Role names to embed in the token
            ttl: Lifetime in seconds (defaults to ACCESS_TOKEN_TTL)
        """
        now = int(time.time())
        claims = {
            "sub": user_id,
            "roles": list(roles),
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.ACCESS_TOKEN_TTL),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def decode_token(self, token: str) -> TokenClaims:
        """Decode and validate an access token.

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        return TokenClaims(
            user_id=payload.get("sub", ""),
            roles=list(payload.get("roles") or []),
            exp=payload.get("exp", 0),
            iat=payload.get("iat", 0),
        )
