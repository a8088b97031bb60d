"""Tests for the geodata client. HTTP is always mocked."""

from __future__ import annotations

from unittest import mock

import pytest
import requests

from apps.venues.geodata import GeodataClient, overpass_string
from shared.domain.exceptions import ExternalServiceError, ValidationError
from shared.infrastructure.cache import TTLCache


def _response(payload):
    response = mock.Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def session():
    session = mock.Mock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return GeodataClient(cache=TTLCache(max_size=10, ttl=60), session=session, timeout=2)


def test_geocode_maps_results_and_caches_them(client, session):
    session.get.return_value = _response([
        {"display_name": "Connaught Place, New Delhi", "lat": "28.6315", "lon": "77.2167"},
        {"display_name": "No coordinates"},
    ])

    first = client.geocode("Connaught Place")
    second = client.geocode("connaught place")

    assert first == [{"name": "Connaught Place, New Delhi", "lat": 28.6315, "lng": 77.2167}]
    assert second == first
    session.get.assert_called_once()
    assert session.get.call_args.kwargs["params"]["q"] == "Connaught Place"
    assert session.get.call_args.kwargs["timeout"] == 2


def test_geocode_requires_query(client, session):
    with pytest.raises(ValidationError) as excinfo:
        client.geocode("   ")
    assert excinfo.value.code == "missing_query"
    session.get.assert_not_called()


def test_provider_failure_is_an_external_service_error(client, session):
    session.get.side_effect = requests.ConnectionError("boom")

    with pytest.raises(ExternalServiceError):
        client.geocode("Mumbai")


def test_bad_json_is_an_external_service_error(client, session):
    response = _response(None)
    response.json.side_effect = ValueError("no json")
    session.get.return_value = response

    with pytest.raises(ExternalServiceError):
        client.cities_by_country("India")


def test_cities_are_sorted_and_unique(client, session):
    session.get.return_value = _response({
        "elements": [
            {"tags": {"name": "Pune"}},
            {"tags": {"name": "Agra"}},
            {"tags": {"name": "Pune"}},
            {"tags": {}},
        ]
    })

    assert client.cities_by_country("India") == ["Agra", "Pune"]
    assert client.cities_by_country("INDIA") == ["Agra", "Pune"]
    session.get.assert_called_once()


def test_cities_require_country(client):
    with pytest.raises(ValidationError) as excinfo:
        client.cities_by_country("")
    assert excinfo.value.code == "missing_country"


def test_country_is_quoted_in_the_overpass_query(client, session):
    session.get.return_value = _response({"elements": []})

    client.cities_by_country('Cote "d\\" Ivoire')

    query = session.get.call_args.kwargs["params"]["data"]
    assert 'area["name"="Cote \\"d\\\\\\" Ivoire"]->.a;' in query


def test_overpass_string_escapes_quotes_and_backslashes():
    assert overpass_string("India") == '"India"'
    assert overpass_string('a"b') == '"a\\"b"'
    assert overpass_string("a\\b") == '"a\\\\b"'
