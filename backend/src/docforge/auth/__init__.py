"""Access token support for docforge."""

from docforge.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)
from docforge.auth.types import TokenClaims

__all__ = [
    "InvalidTokenError",
    "JWTError",
    "JWTService",
    "TokenClaims",
    "TokenExpiredError",
]
