# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Response

from ..config import settings
from .models import Account, Credentials, Registration, SignedIn
from .security import TOKEN_COOKIE_NAME, get_current_user, hash_password, issue_token, verify_password
from .storage import create_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _signed_in(row: Dict[str, Any], response: Response) -> SignedIn:
    token = issue_token(row["id"])
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        token,
        httponly=True,
        secure=bool(settings.cookie_secure),
        samesite="lax",
        max_age=int(settings.token_ttl_days) * 86400,
        path="/",
    )
    return SignedIn(user=Account.from_row(row), token=token)


@router.post("/register", response_model=SignedIn, summary="Create a local account")
def register(request: Registration, response: Response):
    if get_user_by_email(request.email):
        raise HTTPException(status_code=400, detail="Email already registered")
    try:
        row = create_user(name=request.name, email=request.email, password_hash=hash_password(request.password))
    except sqlite3.IntegrityError as exc:
        raise HTTPException(status_code=400, detail="Email already registered") from exc
    logger.info("Registered user %s", row["id"])
    return _signed_in(row, response)


@router.post("/login", response_model=SignedIn, summary="Check credentials and open a session")
def login(request: Credentials, response: Response):
    row = get_user_by_email(request.email)
    if row is None or not verify_password(request.password, row["password_hash"]):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _signed_in(row, response)


@router.post("/logout", summary="Drop the session cookie")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")
    return {"status": "ok"}


@router.get("/me", response_model=Account, summary="Signed-in account")
def me(user: dict = Depends(get_current_user)):
    return Account.from_row(user)
