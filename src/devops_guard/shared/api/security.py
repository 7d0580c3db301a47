"""
API Key Check
=============

Static shared-secret check on the ``X-API-Key`` header for mutating routes.
When no key is configured every request is allowed.
"""

import secrets
from typing import Optional

from fastapi import HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader

from devops_guard.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "X-API-Key"

_api_key_header = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


async def require_api_key(
    request: Request,
    provided: Optional[str] = Security(_api_key_header),
) -> None:
    """FastAPI dependency rejecting requests without the configured key."""
    expected = getattr(request.app.state.settings, "api_key", None)
    if not expected or not expected.strip():
        return

    if not provided or not secrets.compare_digest(provided.encode(), expected.encode()):
        logger.warning(
            "API key rejected",
            extra={
                "path": request.url.path,
                "correlation_id": getattr(request.state, "correlation_id", "unknown"),
            }
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing or invalid {API_KEY_HEADER} header."
        )
