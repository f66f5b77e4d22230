#!/usr/bin/env python3
"""
Mint a signed bearer token for local testing of the Follow Service.

Token issuance belongs to the identity provider in production. This helper
signs a short-lived token with the configured shared secret so the API can
be exercised from a developer workstation:

    python scripts/generate_token.py user123
    curl -H "Authorization: Bearer $(python scripts/generate_token.py user123)" \
        http://localhost:8020/following
"""

import argparse
import sys
import os
from datetime import datetime, timedelta, timezone
from typing import Optional

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from jose import jwt  # noqa: E402

from shared.config import get_config  # noqa: E402


def generate_token(subject: str, secret: str, expires_in: int = 3600,
                   claim: str = "sub", algorithm: str = "HS256") -> str:
    """Return a token carrying `subject` under `claim`."""
    now = datetime.now(timezone.utc)
    payload = {
        claim: subject,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a Follow Service bearer token")
    parser.add_argument("subject", help="User id to embed in the token")
    parser.add_argument("--secret", default=None,
                        help="Signing secret (defaults to JWT_SECRET from the environment)")
    parser.add_argument("--expires-in", type=int, default=3600,
                        help="Token lifetime in seconds (default: 3600)")
    parser.add_argument("--claim", choices=["sub", "user_id"], default="sub",
                        help="Claim that carries the user id")
    return parser.parse_args(argv)


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    config = get_config("follow", 8020)
    secret = args.secret or config.jwt_secret
    algorithm = config.jwt_algorithms[0]

    print(generate_token(args.subject, secret, args.expires_in, args.claim, algorithm))
    return 0


if __name__ == "__main__":
    sys.exit(main())
