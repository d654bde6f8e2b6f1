"""Batch import result schemas."""
from pydantic import BaseModel


class ImportRowError(BaseModel):
    line: int | None = None
    column: str | None = None
    message: str


class ImportResult(BaseModel):
    success: bool
    imported_count: int
    errors: list[ImportRowError] = []
    message: str
