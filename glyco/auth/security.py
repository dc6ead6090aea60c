# -*- coding: utf-8 -*-
"""Auth — local credential check.

Passwords are stored as ``pbkdf2_sha256$<iterations>$<salt>$<digest>``.
Session tokens are HS256 JWTs whose only claims are the user id (``sub``)
and the expiry (``exp``); they travel as a bearer header or a cookie.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request

from ..config import settings
from .storage import get_user_by_id

TOKEN_COOKIE_NAME = "glyco_token"

_HASH_SCHEME = "pbkdf2_sha256"
_HASH_ITERATIONS = 200_000


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def hash_password(password: str) -> str:
    salt = secrets.token_bytes(16)
    digest = _derive(password, salt, _HASH_ITERATIONS)
    return "$".join((_HASH_SCHEME, str(_HASH_ITERATIONS), _b64(salt), _b64(digest)))


def verify_password(password: str, stored: str) -> bool:
    parts = stored.split("$")
    if len(parts) != 4 or parts[0] != _HASH_SCHEME:
        return False
    _, iterations, salt, digest = parts
    try:
        actual = _derive(password, _unb64(salt), int(iterations))
        expected = _unb64(digest)
    except (ValueError, TypeError):
        return False
    return hmac.compare_digest(actual, expected)


# ---- session tokens ----

_TOKEN_HEADER = _b64(b'{"alg":"HS256","typ":"JWT"}')


def _sign(body: str) -> bytes:
    return hmac.new(settings.jwt_secret.encode("utf-8"), body.encode("ascii"), hashlib.sha256).digest()


def issue_token(user_id: str) -> str:
    claims = {"sub": user_id, "exp": int(time.time()) + int(settings.token_ttl_days) * 86400}
    body = f"{_TOKEN_HEADER}.{_b64(json.dumps(claims, separators=(',', ':')).encode('utf-8'))}"
    return f"{body}.{_b64(_sign(body))}"


def token_subject(token: str) -> str:
    """User id carried by a valid, unexpired token. Raises 401 otherwise."""
    try:
        header, claims_b64, signature = token.split(".")
        if not hmac.compare_digest(_sign(f"{header}.{claims_b64}"), _unb64(signature)):
            raise ValueError("bad signature")
        claims = json.loads(_unb64(claims_b64))
    except (ValueError, UnicodeError) as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc
    if not isinstance(claims, dict) or not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Invalid token")
    if int(claims.get("exp") or 0) < int(time.time()):
        raise HTTPException(status_code=401, detail="Token expired")
    return str(claims["sub"])


# ---- FastAPI helpers ----


def token_from_request(request: Request) -> Optional[str]:
    scheme, _, credentials = (request.headers.get("authorization") or "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(TOKEN_COOKIE_NAME) or None


def get_current_user_from_request(request: Request) -> Dict[str, Any]:
    # The auth gate middleware may already have resolved the user.
    user = getattr(request.state, "user", None)
    if user:
        return user

    token = token_from_request(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = get_user_by_id(token_subject(token))
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    request.state.user = user
    return user


def get_current_user(user: Dict[str, Any] = Depends(get_current_user_from_request)) -> Dict[str, Any]:
    return user
