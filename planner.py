"""
Ruttplaneraren: håller start- och slutpunkt, roterar markörer och hämtar rutt
"""

import itertools
import logging
import uuid
from typing import Callable, Dict, Optional

from config import DEFAULT_CENTER, DEFAULT_ZOOM, USER_LOCATION_ZOOM
from location import LocationProvider
from models import (
    Coordinate,
    FetchSummary,
    NoWaypoints,
    PlannerState,
    Role,
    Route,
    RouteOutcome,
    Selection,
    StartAndEnd,
    StartOnly,
    Waypoint
)
from routing import FetchResult, RouteFetcher
from utils import validate_coordinates

logger = logging.getLogger(__name__)

USER_MARKER_ID = "user-location"

MSG_SELECT_BOTH = "Välj både start- och slutpunkt"
MSG_NO_ROUTE = "Ingen rutt hittades"
MSG_REQUEST_FAILED = "Fel vid hämtning av vägbeskrivning: {reason}"
MSG_PERMISSION_DENIED = "Platsbehörighet nekades"
MSG_NO_LOCATION = "Kunde inte hämta position"
MSG_USER_MARKER = "Du är här"


class IncompleteSelection(Exception):
    """Rutt begärd utan att både start och mål är valda"""

    def __init__(self, message: str = MSG_SELECT_BOTH):
        super().__init__(message)
        self.message = message


class MapView:
    """Kartan som planeraren ritar på. Implementeras av map_utils.MapCanvas."""

    def add_marker(self, marker_id: str, coordinate: Coordinate,
                   role: Optional[Role] = None, title: str = "") -> None:
        raise NotImplementedError

    def set_marker_role(self, marker_id: str, role: Role) -> None:
        raise NotImplementedError

    def remove_marker(self, marker_id: str) -> None:
        raise NotImplementedError

    def add_path(self, route: Route) -> int:
        raise NotImplementedError

    def remove_path(self, handle: int) -> None:
        raise NotImplementedError

    def show_busy(self) -> None:
        raise NotImplementedError

    def hide_busy(self) -> None:
        raise NotImplementedError

    def notify(self, message: str, level: str = "info") -> None:
        raise NotImplementedError

    def center_on(self, coordinate: Coordinate, zoom: float) -> None:
        raise NotImplementedError

    def request_location_permission(self) -> None:
        raise NotImplementedError


def _new_marker_id() -> str:
    return uuid.uuid4().hex


class RoutePlanner:
    """
    Styr markörer och rutt på kartan.

    Allt tillstånd ändras bara från användarhändelser och från
    process_completions(), båda på samma kontext. Själva hämtningen körs
    av RouteFetcher i bakgrunden.
    """

    def __init__(
        self,
        view: MapView,
        fetcher: RouteFetcher,
        location_provider: Optional[LocationProvider] = None,
        id_factory: Callable[[], str] = _new_marker_id
    ):
        self.view = view
        self.fetcher = fetcher
        self.location_provider = location_provider
        self._new_id = id_factory

        self._selection: Selection = NoWaypoints()
        self._route: Optional[Route] = None
        self._path_handle: Optional[int] = None

        self._request_ids = itertools.count(1)
        self._selection_version = 0
        # request_id -> selection_version vid utskick
        self._pending: Dict[int, int] = {}
        self._latest_request: Optional[int] = None
        self._last_summary: Optional[FetchSummary] = None
        self._disposed = False

    # ----------------
    # Tillstånd
    # ----------------

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def start(self) -> Optional[Waypoint]:
        if isinstance(self._selection, (StartOnly, StartAndEnd)):
            return self._selection.start
        return None

    @property
    def end(self) -> Optional[Waypoint]:
        if isinstance(self._selection, StartAndEnd):
            return self._selection.end
        return None

    @property
    def route(self) -> Optional[Route]:
        return self._route

    @property
    def state(self) -> PlannerState:
        return PlannerState.PENDING if self._pending else PlannerState.IDLE

    @property
    def last_summary(self) -> Optional[FetchSummary]:
        return self._last_summary

    # ----------------
    # Livscykel
    # ----------------

    def create(self, location_permission_granted: bool = False) -> None:
        """Initiera kartan. Visar användarens position om behörighet finns."""
        self.view.center_on(Coordinate(*DEFAULT_CENTER), DEFAULT_ZOOM)
        if location_permission_granted:
            self.show_user_location()
        else:
            self.view.request_location_permission()

    def on_permission_result(self, granted: bool) -> None:
        if granted:
            self.show_user_location()
        else:
            self.view.notify(MSG_PERMISSION_DENIED, "warning")

    def dispose(self) -> None:
        """Stäng av hämtningen. Sena svar ignoreras."""
        if self._disposed:
            return
        self._disposed = True
        self.fetcher.shutdown()
        if self._pending:
            logger.info("Avslutar med %d obesvarade ruttförfrågningar", len(self._pending))
            self._pending.clear()
            self.view.hide_busy()

    def show_user_location(self) -> None:
        location = self.location_provider.last_location() if self.location_provider else None
        if location is None:
            self.view.notify(MSG_NO_LOCATION, "warning")
            return

        self.view.center_on(location, USER_LOCATION_ZOOM)
        self.view.remove_marker(USER_MARKER_ID)
        self.view.add_marker(USER_MARKER_ID, location, None, MSG_USER_MARKER)

    # ----------------
    # Markörer
    # ----------------

    def select_point(self, coordinate: Coordinate) -> Waypoint:
        """
        Lägg till en punkt enligt rotationsregeln

        Ingen start -> start. Bara start -> mål. Båda satta -> gamla starten
        tas bort, målet blir ny start och den nya punkten blir mål.

        Returns:
            Den nyskapade waypointen
        """
        if not validate_coordinates(coordinate.lat, coordinate.lon):
            raise ValueError(f"Ogiltiga koordinater: {coordinate}")

        selection = self._selection
        if isinstance(selection, NoWaypoints):
            waypoint = Waypoint(self._new_id(), coordinate, Role.START)
            self._selection = StartOnly(waypoint)
        elif isinstance(selection, StartOnly):
            waypoint = Waypoint(self._new_id(), coordinate, Role.END)
            self._selection = StartAndEnd(selection.start, waypoint)
        else:
            self.view.remove_marker(selection.start.marker_id)
            promoted = selection.end.retag(Role.START)
            self.view.set_marker_role(promoted.marker_id, Role.START)
            waypoint = Waypoint(self._new_id(), coordinate, Role.END)
            self._selection = StartAndEnd(promoted, waypoint)

        self.view.add_marker(
            waypoint.marker_id, coordinate, waypoint.role,
            "Start" if waypoint.role is Role.START else "Mål"
        )
        self._selection_version += 1
        return waypoint

    # ----------------
    # Rutt
    # ----------------

    def request_route(self) -> int:
        """
        Skicka en ruttförfrågan för nuvarande start och mål

        Returns:
            request_id för förfrågan

        Raises:
            IncompleteSelection: om start eller mål saknas
        """
        if self._disposed:
            raise RuntimeError("RoutePlanner är avslutad")

        selection = self._selection
        if not isinstance(selection, StartAndEnd):
            raise IncompleteSelection()

        request_id = next(self._request_ids)
        # Indikatorn följer PENDING: visas när första förfrågan startar
        if not self._pending:
            self.view.show_busy()
        self._pending[request_id] = self._selection_version
        self._latest_request = request_id
        logger.info(
            "Ruttförfrågan %d: %s -> %s", request_id,
            selection.start.coordinate.as_query(), selection.end.coordinate.as_query()
        )

        self.fetcher.submit(request_id, selection.start.coordinate, selection.end.coordinate)
        return request_id

    def process_completions(self) -> Optional[FetchSummary]:
        """Applicera färdiga hämtningar. Körs på planerarens kontext."""
        summary = None
        for result in self.fetcher.drain():
            if self._disposed or result.request_id not in self._pending:
                continue
            summary = self._settle(result)
        return summary

    def wait_for_route(self, timeout: Optional[float] = None) -> Optional[FetchSummary]:
        """Blockera tills utestående hämtningar är klara och applicera dem"""
        self.fetcher.wait(timeout)
        self.process_completions()
        return self._last_summary

    def render_route(self, route: Route) -> None:
        """Ersätt den ritade rutten. Högst ett ruttlager finns på kartan."""
        if self._path_handle is not None:
            self.view.remove_path(self._path_handle)
            self._path_handle = None
        self._path_handle = self.view.add_path(route)
        self._route = route

    def _settle(self, result: FetchResult) -> FetchSummary:
        version = self._pending.pop(result.request_id)
        if not self._pending:
            self.view.hide_busy()

        stale = version != self._selection_version or result.request_id != self._latest_request
        if stale:
            logger.info("Ignorerar inaktuellt svar på ruttförfrågan %d", result.request_id)
            summary = FetchSummary(result.request_id, RouteOutcome.DISCARDED)
        elif not result.ok:
            reason = result.error.reason
            logger.warning("Ruttförfrågan %d misslyckades: %s", result.request_id, reason)
            self.view.notify(MSG_REQUEST_FAILED.format(reason=reason), "error")
            summary = FetchSummary(result.request_id, RouteOutcome.REQUEST_FAILED, reason)
        elif not result.points:
            logger.info("Ruttförfrågan %d gav ingen rutt", result.request_id)
            self.view.notify(MSG_NO_ROUTE, "warning")
            summary = FetchSummary(result.request_id, RouteOutcome.NO_ROUTE_FOUND)
        else:
            self.render_route(Route(tuple(result.points)))
            logger.info("Ruttförfrågan %d ritad med %d punkter", result.request_id, len(result.points))
            summary = FetchSummary(result.request_id, RouteOutcome.RENDERED)

        self._last_summary = summary
        return summary
