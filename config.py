"""
Konfiguration och konstanter för ruttplaneraren
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Karta
DEFAULT_CENTER = [59.3293, 18.0686]  # Stockholm
DEFAULT_ZOOM = 13
USER_LOCATION_ZOOM = 15.0

# API URLs
ROUTING_BASE_URL = "https://nominatim.openstreetmap.org"
ROUTE_PATH = "route/v1/driving"
NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
FIREBASE_AUTH_URL = "https://identitytoolkit.googleapis.com/v1"
USER_AGENT = "LandmarkRoutePlanner/1.0"

# Routing-inställningar
REQUEST_TIMEOUT = 10  # sekunder
MAX_ROUTE_ATTEMPTS = 2  # totalt antal försök vid tillfälliga fel

# Cache-inställningar
CACHE_TTL = 3600  # 1 timme


@dataclass(frozen=True)
class Settings:
    """Inställningar som kan överskridas via secrets eller miljövariabler"""
    routing_base_url: str = ROUTING_BASE_URL
    firebase_api_key: Optional[str] = None
    home_location: Optional[tuple] = None  # (lat, lon)
    log_level: str = "INFO"


def _lookup(secrets: Mapping[str, Any], name: str) -> Optional[str]:
    if name in secrets:
        return str(secrets[name])
    return os.environ.get(name)


def load_settings(secrets: Optional[Mapping[str, Any]] = None) -> Settings:
    """
    Bygg Settings från st.secrets (eller annan mapping) med miljövariabler som reserv

    Args:
        secrets: Mapping med hemligheter, t.ex. st.secrets

    Returns:
        Settings
    """
    secrets = secrets or {}

    home_location = None
    home_lat = _lookup(secrets, "HOME_LAT")
    home_lon = _lookup(secrets, "HOME_LON")
    if home_lat and home_lon:
        try:
            home_location = (float(home_lat), float(home_lon))
        except ValueError:
            raise ValueError(f"Ogiltig hemposition: {home_lat!r}, {home_lon!r}")

    return Settings(
        routing_base_url=_lookup(secrets, "ROUTING_BASE_URL") or ROUTING_BASE_URL,
        firebase_api_key=_lookup(secrets, "FIREBASE_API_KEY"),
        home_location=home_location,
        log_level=(_lookup(secrets, "LOG_LEVEL") or "INFO").upper(),
    )
