"""
Caller identity resolution.

Verifies HS256 bearer tokens against the shared secret and extracts the
caller's user id. Resolution never raises; callers turn an invalid
resolution into a 401 through `IdentityResolver.authenticate`.
"""

from .identity import IdentityResolver, IdentityResolution, extract_bearer_token

__all__ = ["IdentityResolver", "IdentityResolution", "extract_bearer_token"]
