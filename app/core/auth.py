"""
Caller identification for the detection route.

Token validation belongs to the upstream auth provider; here a bearer token
only decides which word ceiling applies and which rate-limit bucket a request
falls into.
"""

import hashlib
from typing import Optional

from fastapi import Request


def get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an `Authorization: Bearer ...` header, if any.

    Browser clients without a session send the literal "Bearer null".
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or token in ("null", "undefined"):
        return None
    return token


def is_authenticated(authorization: Optional[str]) -> bool:
    return get_bearer_token(authorization) is not None


def get_client_ip(request: Request) -> str:
    """Extracts the real client IP from headers, falling back to host."""
    cf_ip = request.headers.get("cf-connecting-ip")
    if cf_ip:
        return cf_ip

    x_forwarded = request.headers.get("x-forwarded-for")
    if x_forwarded:
        return x_forwarded.split(",")[0].strip()

    return request.client.host if request.client else "127.0.0.1"


def caller_identifier(request: Request, authorization: Optional[str]) -> str:
    """Rate-limit key: a hash of the bearer token, or the client IP for anonymous callers."""
    token = get_bearer_token(authorization)
    if token:
        return f"user:{hashlib.sha256(token.encode('utf-8')).hexdigest()[:16]}"
    return f"ip:{get_client_ip(request)}"
