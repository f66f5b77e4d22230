"""
Bearer credential resolution for the Follow Service.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from jose import jwt
from jose.exceptions import JWTError
from pydantic import BaseModel

from shared.errors import AuthenticationError
from shared.logging import get_logger

# Claims checked in order; the first non-empty string wins.
SUBJECT_CLAIMS: Tuple[str, ...] = ("user_id", "sub")


class IdentityResolution(BaseModel):
    """Outcome of resolving a credential."""

    valid: bool
    user_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def invalid(cls, error: str) -> "IdentityResolution":
        return cls(valid=False, error=error)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token of a `Bearer <token>` header, or None."""
    if not authorization:
        return None

    parts = authorization.strip().split(None, 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None

    token = parts[1].strip()
    return token or None


def extract_subject(claims: Dict[str, Any], claim_order: Sequence[str] = SUBJECT_CLAIMS) -> Optional[str]:
    """Pick the caller id from verified claims using `claim_order`."""
    for claim in claim_order:
        value = claims.get(claim)
        if isinstance(value, str) and value:
            return value
    return None


class IdentityResolver:
    """Resolve bearer credentials into user ids."""

    def __init__(self, secret: str, algorithms: Optional[List[str]] = None,
                 claim_order: Sequence[str] = SUBJECT_CLAIMS):
        self.secret = secret
        self.algorithms = algorithms or ["HS256"]
        self.claim_order = tuple(claim_order)
        self.logger = get_logger("follow.auth.identity")

    def resolve(self, credential: Optional[str]) -> IdentityResolution:
        """Verify a credential and extract the caller id."""
        if not credential:
            self.logger.warning("Token verification failed", error="missing credential")
            return IdentityResolution.invalid("missing credential")

        try:
            claims = jwt.decode(
                credential,
                self.secret,
                algorithms=self.algorithms,
                options={"verify_aud": False},
            )
        except JWTError as e:
            self.logger.warning("Token verification failed", error=str(e))
            return IdentityResolution.invalid(str(e))

        user_id = extract_subject(claims, self.claim_order)
        if user_id is None:
            self.logger.warning("Token verification failed", error="missing subject claim")
            return IdentityResolution.invalid("missing subject claim")

        return IdentityResolution(valid=True, user_id=user_id)

    def authenticate(self, authorization: Optional[str]) -> str:
        """Resolve an Authorization header value or raise AuthenticationError."""
        token = extract_bearer_token(authorization)
        if token is None:
            raise AuthenticationError("Bearer token required")

        resolution = self.resolve(token)
        if not resolution.valid:
            raise AuthenticationError("Invalid or expired token")

        return resolution.user_id
