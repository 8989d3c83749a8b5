"""
Kartfunktioner för visualisering
"""

import itertools
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import folium

from config import DEFAULT_CENTER, DEFAULT_ZOOM
from models import Coordinate, Role, Route
from planner import MapView

# (färg, ikon) per roll; None är användarens position
MARKER_ICONS = {
    Role.START: ("green", "play"),
    Role.END: ("red", "stop"),
    None: ("blue", "user"),
}

ROUTE_COLOR = "blue"
ROUTE_WEIGHT = 5


@dataclass
class MarkerOverlay:
    coordinate: Coordinate
    role: Optional[Role]
    title: str


class MapCanvas(MapView):
    """
    Kartans lager mellan omritningar: markörer, ruttlager, laddningsindikator
    och meddelanden till användaren. create_map() ritar upp den med Folium.
    """

    def __init__(self):
        self.markers: Dict[str, MarkerOverlay] = {}
        self.paths: Dict[int, Route] = {}
        self.busy = False
        self.messages: List[Tuple[str, str]] = []
        self.center = Coordinate(*DEFAULT_CENTER)
        self.zoom = DEFAULT_ZOOM
        self.permission_requested = False
        self._path_handles = itertools.count(1)

    def add_marker(self, marker_id, coordinate, role=None, title=""):
        self.markers[marker_id] = MarkerOverlay(coordinate, role, title)

    def set_marker_role(self, marker_id, role):
        marker = self.markers[marker_id]
        marker.role = role
        marker.title = "Start" if role is Role.START else "Mål"

    def remove_marker(self, marker_id):
        self.markers.pop(marker_id, None)

    def add_path(self, route):
        handle = next(self._path_handles)
        self.paths[handle] = route
        return handle

    def remove_path(self, handle):
        self.paths.pop(handle, None)

    def show_busy(self):
        self.busy = True

    def hide_busy(self):
        self.busy = False

    def notify(self, message, level="info"):
        self.messages.append((level, message))

    def center_on(self, coordinate, zoom):
        self.center = coordinate
        self.zoom = zoom

    def request_location_permission(self):
        self.permission_requested = True

    def pop_messages(self) -> List[Tuple[str, str]]:
        """Hämta och töm väntande meddelanden"""
        messages, self.messages = self.messages, []
        return messages


def create_map(canvas: MapCanvas) -> folium.Map:
    """
    Skapa Folium-karta med markörer och rutt

    Args:
        canvas: Kartans lager

    Returns:
        Folium Map-objekt
    """
    m = folium.Map(
        location=canvas.center.as_list(),
        zoom_start=canvas.zoom,
        control_scale=True
    )

    for marker in canvas.markers.values():
        color, icon = MARKER_ICONS[marker.role]
        folium.Marker(
            marker.coordinate.as_list(),
            popup=marker.title,
            tooltip=marker.title,
            icon=folium.Icon(color=color, icon=icon)
        ).add_to(m)

    for route in canvas.paths.values():
        if route.is_empty:
            continue
        route_coords = route.as_lists()

        folium.PolyLine(
            route_coords,
            color=ROUTE_COLOR,
            weight=ROUTE_WEIGHT,
            opacity=0.8
        ).add_to(m)

        # Anpassa zoom för att visa hela rutten
        if len(route_coords) > 1:
            bounds = [[min(p[0] for p in route_coords), min(p[1] for p in route_coords)],
                      [max(p[0] for p in route_coords), max(p[1] for p in route_coords)]]
            m.fit_bounds(bounds)

    return m
