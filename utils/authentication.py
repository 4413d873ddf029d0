"""
API key authentication for service-to-service calls.

The aggregation endpoints are called by the app's own backend, which forwards
records it has already fetched for an authenticated user. They are protected
by a shared key sent in the ``X-API-Key`` header.
"""

import hmac
import logging
from typing import Optional

from decouple import config
from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)


def verify_api_key(x_api_key: Optional[str] = Header(None)) -> str:
    """
    FastAPI dependency validating the ``X-API-Key`` header.

    Raises:
        HTTPException: 500 when the server has no key configured,
            401 when the header is missing or does not match
    """
    expected_key = config("BACKEND_API_KEY", default=None)
    if not expected_key:
        logger.error("BACKEND_API_KEY environment variable is not set on the server.")
        raise HTTPException(status_code=500, detail="Server configuration error: API key not set.")

    if x_api_key is None:
        logger.warning("API key is missing")
        raise HTTPException(status_code=401, detail="API key is required")

    if not hmac.compare_digest(x_api_key.encode("utf-8"), expected_key.encode("utf-8")):
        logger.warning(f"Invalid API key provided: {x_api_key[:4]}...")
        raise HTTPException(status_code=401, detail="Invalid API key")

    return x_api_key
