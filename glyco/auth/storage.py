# -*- coding: utf-8 -*-
"""Auth — users table access."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from ..app_db import db_conn
from ..config import settings
from .models import normalize_email


def _fetch_one(where: str, value: str) -> Optional[Dict[str, Any]]:
    with db_conn(settings.app_db_path) as conn:
        row = conn.execute(f"SELECT * FROM users WHERE {where} = ?", (value,)).fetchone()
        return dict(row) if row else None


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    return _fetch_one("email", normalize_email(email))


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    return _fetch_one("id", user_id)


def create_user(*, name: str, email: str, password_hash: str) -> Dict[str, Any]:
    row = {
        "id": str(uuid4()),
        "name": name.strip(),
        "email": normalize_email(email),
        "password_hash": password_hash,
        "created_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    with db_conn(settings.app_db_path) as conn:
        conn.execute(
            "INSERT INTO users (id, name, email, password_hash, created_at) "
            "VALUES (:id, :name, :email, :password_hash, :created_at)",
            row,
        )
    return row
