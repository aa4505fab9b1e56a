from fastapi import Header, HTTPException

from .config import settings

async def require_api_key(x_api_key: str = Header(default="", alias="X-API-Key")):
    """
    Checks X-API-Key against DIRECTORY_API_KEY.

    Open by default: with DIRECTORY_API_KEY unset every request is let through, which is
    only meant for the local development directory. Set the key before exposing the app.
    """
    expected = settings.directory_api_key
    if expected and x_api_key != expected:
        raise HTTPException(status_code=401, detail="unauthorized")
