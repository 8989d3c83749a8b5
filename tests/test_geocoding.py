from unittest import mock

import pytest
import requests

import geocoding
from models import Coordinate


@pytest.fixture(autouse=True)
def no_rate_limit(monkeypatch):
    monkeypatch.setattr(geocoding.time, "sleep", lambda seconds: None)
    geocoding.geocode_address.clear()


def _response(status, payload):
    response = mock.Mock()
    response.status_code = status
    response.json.return_value = payload
    return response


def test_geocode_returns_first_hit():
    with mock.patch.object(geocoding.requests, "get") as get:
        get.return_value = _response(200, [{"lat": "59.3326", "lon": "18.0649"}])
        assert geocoding.geocode_address("Kungsgatan 1, Stockholm") == Coordinate(59.3326, 18.0649)

    assert get.call_args.kwargs["params"]["q"] == "Kungsgatan 1, Stockholm"


def test_geocode_no_hit():
    with mock.patch.object(geocoding.requests, "get") as get:
        get.return_value = _response(200, [])
        assert geocoding.geocode_address("Ingenstans") is None


def test_geocode_blank_address_skips_request():
    with mock.patch.object(geocoding.requests, "get") as get:
        assert geocoding.geocode_address("   ") is None
    get.assert_not_called()


def test_geocode_transport_error_returns_none():
    with mock.patch.object(geocoding.requests, "get", side_effect=requests.ConnectionError()):
        assert geocoding.geocode_address("Stureplan") is None
