"""API key check shared by all routes."""

import secrets

from fastapi import Depends, HTTPException, Request
from fastapi.security import APIKeyHeader

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(request: Request, provided_key: str | None = Depends(api_key_header)) -> None:
    """Reject the request with 401 unless X-API-Key matches APP_API_KEY.

    An unset APP_API_KEY rejects every request instead of opening the API.
    """
    expected_key = request.app.state.config.get_string_val("APP_API_KEY", default="")
    if not expected_key:
        request.app.state.logging.warning("APP_API_KEY is not configured, rejecting request to %s.", request.url.path)
    if not expected_key or not provided_key or not secrets.compare_digest(provided_key, expected_key):
        raise HTTPException(status_code=401, detail="Invalid or missing API key.")
