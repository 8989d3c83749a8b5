import contextlib

import main
from models import Coordinate, RouteOutcome
from planner import RoutePlanner
from routing import RouteFetcher
from routing_providers import RoutingProvider


class FixedProvider(RoutingProvider):
    def get_route(self, start, end):
        return [start, end]


class RecordingSpinner:
    def __init__(self):
        self.texts = []

    def __call__(self, text):
        self.texts.append(text)
        return contextlib.nullcontext()


def test_click_across_antimeridian_is_wrapped(planner):
    coordinate = main.clicked_coordinate({"lat": 59.0, "lng": 198.0})

    assert coordinate.lat == 59.0
    assert -180 <= coordinate.lon <= 180

    waypoint = planner.select_point(coordinate)
    assert waypoint.coordinate == coordinate


def test_spinner_follows_busy_indicator(canvas):
    planner = RoutePlanner(canvas, RouteFetcher(FixedProvider()))
    planner.select_point(Coordinate(10, 20))
    planner.select_point(Coordinate(30, 40))
    spinner = RecordingSpinner()

    planner.request_route()
    main.await_route(planner, canvas, spinner=spinner)
    planner.dispose()

    assert spinner.texts == ["Hämtar rutt..."]
    assert canvas.busy is False
    assert planner.last_summary.outcome is RouteOutcome.RENDERED


def test_no_spinner_when_idle(canvas):
    planner = RoutePlanner(canvas, RouteFetcher(FixedProvider()))
    spinner = RecordingSpinner()

    main.await_route(planner, canvas, spinner=spinner)
    planner.dispose()

    assert spinner.texts == []
