# -*- coding: utf-8 -*-
"""Auth — account and credential models."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Credentials(BaseModel):
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v: Any) -> Any:
        return normalize_email(v) if isinstance(v, str) else v


class Registration(Credentials):
    name: str = Field("", max_length=120)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v


class Account(BaseModel):
    """Public view of a row of the ``users`` table."""

    id: str
    name: str = ""
    email: str
    created_at: str

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Account":
        return cls(id=row["id"], name=row.get("name") or "", email=row["email"], created_at=row["created_at"])


class SignedIn(BaseModel):
    user: Account
    token: str
