"""Geodata lookups for venue addresses and city pickers.

Results are cached through an injected cache (``TTLCache`` by default,
``DjangoCacheAdapter`` when entries should be shared between workers).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests  # type: ignore
from django.conf import settings  # type: ignore

from shared.domain.exceptions import ExternalServiceError, ValidationError
from shared.infrastructure.cache import TTLCache

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"User-Agent": "venuebook-geodata/1.0", "Accept-Encoding": "gzip, deflate"}


def overpass_string(value: str) -> str:
    """Quote value as an Overpass QL string literal."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def default_cache() -> TTLCache:
    return TTLCache(
        max_size=getattr(settings, "GEODATA_CACHE_MAX_SIZE", 100),
        ttl=getattr(settings, "GEODATA_CACHE_TTL", 900),
    )


class GeodataClient:
    """Thin client over a Nominatim geocoder and the Overpass API."""

    def __init__(self, cache=None, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.cache = cache if cache is not None else default_cache()
        self.session = session or requests.Session()
        self.session.headers.update(DEFAULT_HEADERS)
        self.timeout = timeout or getattr(settings, "GEODATA_TIMEOUT", 6)
        self.geocode_url = getattr(settings, "GEODATA_GEOCODE_URL", "https://nominatim.openstreetmap.org/search")
        self.overpass_url = getattr(settings, "GEODATA_OVERPASS_URL", "https://overpass-api.de/api/interpreter")

    def _get_json(self, url: str, params: dict) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Geodata request to %s failed: %s", url, exc)
            raise ExternalServiceError("Geodata provider unavailable", details={"provider": url}) from exc

    def geocode(self, query: str, limit: int = 5) -> list[dict]:
        """Places matching a free-text address: name, lat, lng."""
        query = (query or "").strip()
        if not query:
            raise ValidationError("Query is required", code="missing_query")

        cache_key = f"geocode:{query.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        data = self._get_json(self.geocode_url, {"q": query, "format": "json", "limit": limit})
        results = [
            {
                "name": item.get("display_name", ""),
                "lat": float(item["lat"]),
                "lng": float(item["lon"]),
            }
            for item in data or []
            if item.get("lat") and item.get("lon")
        ]
        self.cache.set(cache_key, results)
        return results

    def cities_by_country(self, country: str) -> list[str]:
        country = (country or "").strip()
        if not country:
            raise ValidationError("Country is required", code="missing_country")

        cache_key = f"cities:{country.lower()}"
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        overpass_query = (
            "[out:json][timeout:120];"
            f'area["name"={overpass_string(country)}]->.a;'
            'node["place"="city"](area.a);'
            "out tags;"
        )
        data = self._get_json(self.overpass_url, {"data": overpass_query})
        cities = sorted({el["tags"]["name"] for el in data.get("elements", []) if el.get("tags", {}).get("name")})
        self.cache.set(cache_key, cities)
        return cities


_client: Optional[GeodataClient] = None


def get_geodata_client() -> GeodataClient:
    """Process-wide client, so its cache survives between requests."""
    global _client
    if _client is None:
        _client = GeodataClient()
    return _client
