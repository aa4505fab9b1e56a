from pydantic import BaseModel, Field
import os

def _env(name: str, default: str, **constraints):
    # default_factory values are only coerced (e.g. "50" -> 50.0) and checked with validate_default
    return Field(default_factory=lambda: os.getenv(name, default), validate_default=True, **constraints)

class Settings(BaseModel):
    planora_api_url: str = _env("PLANORA_API_URL", "http://localhost:5000/api")
    planora_api_key: str = _env("PLANORA_API_KEY", "")
    geocoder_url: str = _env("GEOCODER_URL", "https://nominatim.openstreetmap.org")
    geocoder_user_agent: str = _env("GEOCODER_USER_AGENT", "Planora-Construction-App/1.0")
    # Radius is caller policy (map vs list discovery), not an engine constant.
    map_radius_km: float = _env("MAP_RADIUS_KM", "50", gt=0)
    list_radius_km: float = _env("LIST_RADIUS_KM", "100", gt=0)
    position_timeout_s: float = _env("POSITION_TIMEOUT_S", "10", gt=0)
    http_timeout_s: float = _env("HTTP_TIMEOUT_S", "15", gt=0)
    # Empty leaves the development directory open; see core/auth.py.
    directory_api_key: str = _env("DIRECTORY_API_KEY", "")

settings = Settings()
