import itertools
from typing import Dict, List, Optional, Tuple

import pytest

from location import StaticLocationProvider
from map_utils import MapCanvas
from models import Coordinate
from planner import RoutePlanner
from routing import FetchResult
from routing_providers import RouteRequestError


class DummyFetcher:
    """Fetcher där testet själv bestämmer när och hur en hämtning blir klar"""

    def __init__(self) -> None:
        self.submitted: List[Tuple[int, Coordinate, Coordinate]] = []
        self._completed: List[FetchResult] = []
        self.shut_down = False

    def submit(self, request_id, start, end):
        if self.shut_down:
            raise RuntimeError("RouteFetcher är avstängd")
        self.submitted.append((request_id, start, end))

    def complete(self, request_id: int, points: Optional[List[Tuple[float, float]]] = None,
                 error: Optional[RouteRequestError] = None) -> None:
        coords = [Coordinate(lat, lon) for lat, lon in points] if points is not None else None
        self._completed.append(FetchResult(request_id=request_id, points=coords, error=error))

    def drain(self):
        results, self._completed = self._completed, []
        return results

    def wait(self, timeout=None):
        return True

    def shutdown(self):
        self.shut_down = True


class CountingCanvas(MapCanvas):
    """MapCanvas som räknar laddningsindikatorns växlingar"""

    def __init__(self) -> None:
        super().__init__()
        self.busy_calls: List[str] = []

    def show_busy(self):
        super().show_busy()
        self.busy_calls.append("show")

    def hide_busy(self):
        super().hide_busy()
        self.busy_calls.append("hide")


@pytest.fixture
def canvas():
    return CountingCanvas()


@pytest.fixture
def fetcher():
    return DummyFetcher()


@pytest.fixture
def planner(canvas, fetcher):
    ids = itertools.count(1)
    return RoutePlanner(
        canvas,
        fetcher,
        StaticLocationProvider((59.3293, 18.0686)),
        id_factory=lambda: f"m{next(ids)}",
    )
