"""Shared JSON error bodies for the support and operator routes."""

from fastapi.responses import JSONResponse


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build an ``{"error": message}`` response."""
    return JSONResponse(status_code=status_code, content={"error": message})
