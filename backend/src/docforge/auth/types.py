"""Type definitions for authentication."""

from dataclasses import dataclass, field


@dataclass
class TokenClaims:
    """Claims embedded in an access token.

    Attributes:
        user_id: The authenticated user's ID
        roles: Role names granted to the user
        exp: Token expiration timestamp
        iat: Token issued-at timestamp
    """

    user_id: str
    roles: list[str] = field(default_factory=list)
    exp: int = 0
    iat: int = 0

    def has_role(self, role: str) -> bool:
        return role in self.roles
