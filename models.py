"""
Datamodeller för ruttplaneraren
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Coordinate:
    """En geografisk punkt i WGS-84-grader"""
    lat: float
    lon: float

    def as_query(self) -> str:
        """Formatera som "lat,lon" för routing-API:t"""
        return f"{self.lat},{self.lon}"

    def as_list(self) -> List[float]:
        return [self.lat, self.lon]


class Role(Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class Waypoint:
    """En användarvald punkt med roll. marker_id följer markören på kartan."""
    marker_id: str
    coordinate: Coordinate
    role: Role

    def retag(self, role: Role) -> "Waypoint":
        return replace(self, role=role)


@dataclass(frozen=True)
class NoWaypoints:
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return ()


@dataclass(frozen=True)
class StartOnly:
    start: Waypoint

    def waypoints(self) -> Tuple[Waypoint, ...]:
        return (self.start,)


@dataclass(frozen=True)
class StartAndEnd:
    start: Waypoint
    end: Waypoint

    def waypoints(self) -> Tuple[Waypoint, ...]:
        return (self.start, self.end)


# Slut utan start går inte att uttrycka
Selection = Union[NoWaypoints, StartOnly, StartAndEnd]


@dataclass(frozen=True)
class Route:
    """Rutt från start till mål som ordnad lista av punkter"""
    points: Tuple[Coordinate, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def as_lists(self) -> List[List[float]]:
        return [p.as_list() for p in self.points]


class PlannerState(Enum):
    IDLE = "idle"
    PENDING = "pending"


class RouteOutcome(Enum):
    RENDERED = "rendered"
    NO_ROUTE_FOUND = "no_route_found"
    REQUEST_FAILED = "request_failed"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class FetchSummary:
    """Utfallet av en avslutad ruttförfrågan"""
    request_id: int
    outcome: RouteOutcome
    reason: Optional[str] = None
