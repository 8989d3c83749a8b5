"""
Routing-providers: klient mot det externa routing-API:t
"""

import logging
from typing import List, Optional

import requests

from config import (
    ROUTING_BASE_URL,
    ROUTE_PATH,
    REQUEST_TIMEOUT,
    MAX_ROUTE_ATTEMPTS,
    USER_AGENT
)
from models import Coordinate

logger = logging.getLogger(__name__)


class RouteRequestError(Exception):
    """Transport- eller avkodningsfel mot routing-API:t"""

    def __init__(self, reason: str, retryable: bool = False):
        super().__init__(reason)
        self.reason = reason
        self.retryable = retryable


class RoutingProvider:
    """Basklass för routing-providers"""

    name = "base"

    def get_route(self, start: Coordinate, end: Coordinate) -> List[Coordinate]:
        """Returnera rutten som punktlista. Tom lista betyder att ingen rutt finns."""
        raise NotImplementedError


class HttpRoutingProvider(RoutingProvider):
    """Routing via HTTP: GET route/v1/driving?origin=lat,lon&destination=lat,lon"""

    name = "HTTP"

    def __init__(
        self,
        base_url: str = ROUTING_BASE_URL,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        max_attempts: int = MAX_ROUTE_ATTEMPTS,
        user_agent: str = USER_AGENT
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts måste vara minst 1")
        self.url = f"{base_url.rstrip('/')}/{ROUTE_PATH}"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.headers = {"User-Agent": user_agent}

    def get_route(self, start: Coordinate, end: Coordinate) -> List[Coordinate]:
        """Hämta rutt, med nya försök vid tillfälliga fel"""

        params = {
            "origin": start.as_query(),
            "destination": end.as_query()
        }

        for attempt in range(1, self.max_attempts + 1):
            try:
                data = self._fetch(params)
            except RouteRequestError as e:
                if not e.retryable or attempt == self.max_attempts:
                    raise
                logger.warning(
                    "Routing-försök %d/%d misslyckades (%s), försöker igen",
                    attempt, self.max_attempts, e.reason
                )
                continue
            return self._parse_response(data)

        # Nås inte: sista försöket returnerar eller kastar
        raise RouteRequestError("inga försök gjordes")

    def _fetch(self, params: dict):
        try:
            response = self.session.get(
                self.url, params=params, headers=self.headers, timeout=self.timeout
            )
        except requests.Timeout:
            raise RouteRequestError("timeout", retryable=True)
        except requests.ConnectionError as e:
            raise RouteRequestError(f"anslutningsfel: {e}", retryable=True)
        except requests.RequestException as e:
            raise RouteRequestError(str(e))

        if response.status_code >= 500:
            raise RouteRequestError(f"HTTP {response.status_code}", retryable=True)
        if response.status_code != 200:
            raise RouteRequestError(f"HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            raise RouteRequestError("ogiltigt JSON-svar")

    def _parse_response(self, data) -> List[Coordinate]:
        """Parsa [{"lat": .., "lon": ..}, ...] till Coordinate-lista"""

        if not isinstance(data, list):
            raise RouteRequestError("oväntat svarsformat")

        points = []
        for record in data:
            try:
                points.append(Coordinate(
                    lat=float(record["lat"]),
                    lon=float(record["lon"])
                ))
            except (KeyError, TypeError, ValueError):
                raise RouteRequestError(f"ogiltig ruttpunkt: {record!r}")

        return points
