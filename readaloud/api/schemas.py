# readaloud/api/schemas.py
from __future__ import annotations
from pydantic import BaseModel


class UploadResponse(BaseModel):
    text: str


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
