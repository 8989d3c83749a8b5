"""
Hjälpfunktioner för ruttplaneraren
"""

import math
import gpxpy
import gpxpy.gpx
from typing import Sequence
from models import Coordinate, Route

EARTH_RADIUS_M = 6371000


def calculate_distance_from_points(points: Sequence[Coordinate]) -> float:
    """
    Beräkna total distans från en lista av punkter (Haversine formula)

    Args:
        points: Lista med Coordinate

    Returns:
        Total distans i meter
    """
    if len(points) < 2:
        return 0.0

    total_distance = 0.0
    for i in range(len(points) - 1):
        lat1, lon1 = math.radians(points[i].lat), math.radians(points[i].lon)
        lat2, lon2 = math.radians(points[i+1].lat), math.radians(points[i+1].lon)

        dlat = lat2 - lat1
        dlon = lon2 - lon1

        a = math.sin(dlat/2)**2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon/2)**2
        c = 2 * math.asin(math.sqrt(a))

        total_distance += EARTH_RADIUS_M * c

    return total_distance


def calculate_route_distance(route: Route) -> float:
    """Ruttens längd i meter"""
    return calculate_distance_from_points(route.points)


def create_gpx(route: Route, name: str = "Rutt") -> str:
    """
    Skapa GPX-fil från en rutt

    Args:
        route: Route-objekt
        name: Namn på rutten

    Returns:
        GPX som sträng
    """
    gpx = gpxpy.gpx.GPX()

    gpx.creator = "Ruttplanerare"
    gpx.description = f"Bilrutt på {calculate_route_distance(route)/1000:.2f} km"

    gpx_track = gpxpy.gpx.GPXTrack()
    gpx_track.name = name
    gpx_track.type = "driving"
    gpx.tracks.append(gpx_track)

    gpx_segment = gpxpy.gpx.GPXTrackSegment()
    gpx_track.segments.append(gpx_segment)

    for point in route.points:
        gpx_segment.points.append(gpxpy.gpx.GPXTrackPoint(point.lat, point.lon))

    return gpx.to_xml()


def normalize_longitude(lon: float) -> float:
    """
    Vik in longitud till [-180, 180)

    Leaflet rapporterar klick utanför [-180, 180] när kartan panorerats
    över datumlinjen.
    """
    return ((lon + 180) % 360) - 180


def validate_coordinates(lat: float, lon: float) -> bool:
    """
    Validera att koordinater är giltiga

    Args:
        lat: Latitud
        lon: Longitud

    Returns:
        True om koordinaterna är giltiga
    """
    return -90 <= lat <= 90 and -180 <= lon <= 180
