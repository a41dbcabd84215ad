import os
import secrets

from fastapi import Header, HTTPException

API_KEY_ENV = "TOURGUIDE_API_KEY"


async def require_api_key(x_api_key: str = Header(default="", alias="X-API-Key")):
    """Shared-secret check for the map front end. Unset key means every call is refused."""
    expected = os.getenv(API_KEY_ENV, "")
    if not expected or not secrets.compare_digest(x_api_key.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="unauthorized")
