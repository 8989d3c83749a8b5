"""
Positionskällor för användarens plats
"""

from typing import Optional, Tuple

from models import Coordinate


class LocationProvider:
    """Basklass för positionskällor"""

    def last_location(self) -> Optional[Coordinate]:
        """Senast kända position, eller None om den är okänd"""
        raise NotImplementedError


class StaticLocationProvider(LocationProvider):
    """Fast position från konfigurationen (HOME_LAT/HOME_LON)"""

    def __init__(self, location: Optional[Tuple[float, float]] = None):
        self.location = Coordinate(*location) if location else None

    def last_location(self) -> Optional[Coordinate]:
        return self.location
