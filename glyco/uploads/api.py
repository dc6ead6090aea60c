# -*- coding: utf-8 -*-
"""Uploads — API endpoint."""

from __future__ import annotations

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from .storage import save_upload

router = APIRouter(tags=["Uploads"])

PUBLIC_PREFIX = "/public"


@router.post("/upload", summary="Upload a recipe photo")
def upload_photo(request: Request, photo: UploadFile | None = File(default=None)):
    if photo is None or not photo.filename:
        raise HTTPException(status_code=400, detail="No file received")
    name = save_upload(photo)
    return {"url": f"{str(request.base_url).rstrip('/')}{PUBLIC_PREFIX}/uploads/{name}"}
