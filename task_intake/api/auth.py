"""
Shared-secret API key check for the intake endpoint.

The caller sends the key in the X-Api-Key header; it is compared in constant
time with the configured `api_key`. An unconfigured key rejects every request.
"""

import secrets

import structlog
from fastapi import HTTPException, Request, Security
from fastapi.security import APIKeyHeader

from task_intake.config import get_settings

logger = structlog.get_logger()

API_KEY_HEADER = "X-Api-Key"

# Security scheme for OpenAPI docs
api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def require_api_key(
    request: Request,
    api_key: str | None = Security(api_key_header),
) -> None:
    expected = get_settings().api_key

    if not api_key:
        logger.warning("Missing API key", path=request.url.path)
        raise HTTPException(
            status_code=401,
            detail=f"Missing API key. Include {API_KEY_HEADER} header.",
            headers={"WWW-Authenticate": "ApiKey"},
        )

    if not expected or not secrets.compare_digest(api_key.encode(), expected.encode()):
        logger.warning(
            "Invalid API key",
            path=request.url.path,
            key_prefix=api_key[:4] if len(api_key) > 8 else "***",
        )
        raise HTTPException(
            status_code=401,
            detail="Invalid API key",
            headers={"WWW-Authenticate": "ApiKey"},
        )
