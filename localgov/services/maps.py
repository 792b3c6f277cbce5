# File: localgov/services/maps.py
"""Server-side proxy for Google geocoding and Places lookups.

Keeps the server API key off the client. Region and language defaults come
from settings.
"""
import logging
from typing import Iterable, List
from urllib.parse import quote

import requests

from localgov.core.config import settings
from localgov.schemas.maps import AddressParts, LatLng, MapResult, PlaceSuggestion
from localgov.services.exceptions import MapsError, MapsUnavailable

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
PLACES_URL = "https://places.googleapis.com/v1/places"
SEARCH_TEXT_URL = f"{PLACES_URL}:searchText"
AUTOCOMPLETE_URL = f"{PLACES_URL}:autocomplete"

PLACE_DETAILS_FIELDS = "id,formattedAddress,location,addressComponents"
SEARCH_TEXT_FIELDS = "places.id,places.formattedAddress,places.location"
AUTOCOMPLETE_FIELDS = ",".join([
    "suggestions.placePrediction.placeId",
    "suggestions.placePrediction.text",
    "suggestions.placePrediction.structuredFormat.mainText.text",
    "suggestions.placePrediction.structuredFormat.secondaryText.text",
])

LEGACY_SUBURB_TYPES = ("sublocality_level_1", "sublocality", "neighborhood")
PLACES_SUBURB_TYPES = ("sublocality",)

TIMEOUT = 15


def _key() -> str:
    key = settings.google_maps_server_api_key
    if not key:
        raise MapsUnavailable("Google Maps server API key is not configured")
    return key


def _places_headers(key: str, fields: str) -> dict:
    return {"X-Goog-Api-Key": key, "X-Goog-FieldMask": fields}


def _places_body(field: str, text: str) -> dict:
    body = {field: text, "languageCode": settings.google_maps_language or "en"}
    if settings.google_maps_region:
        body["regionCode"] = settings.google_maps_region
    return body


def _json(what: str, send, url: str, **kwargs) -> dict:
    try:
        r = send(url, timeout=TIMEOUT, **kwargs)
    except requests.RequestException as e:
        raise MapsError(f"{what} request failed: {e}") from e
    if not r.ok:
        raise MapsError(f"{what} failed: {r.status_code} {r.reason} - {r.text}")
    data = r.json() or {}
    error = data.get("error")
    if error:
        msg = error.get("message") if isinstance(error, dict) else None
        raise MapsError(f"{what} failed: {msg or 'Unknown Places API error.'}")
    return data


def _address_parts(node: dict, components: str, text_key: str, formatted_key: str,
                   suburb_types: Iterable[str]) -> AddressParts:
    parts = AddressParts(formatted=node.get(formatted_key))
    for c in node.get(components) or []:
        types = c.get("types") or []
        text = c.get(text_key) or ""
        if "street_number" in types:
            parts.street_number = text
        if "route" in types:
            parts.route = text
        if parts.suburb is None and any(t in types for t in suburb_types):
            parts.suburb = text
        if "locality" in types:
            parts.city = text
        if parts.city is None and "administrative_area_level_2" in types:
            parts.city = text
        if "postal_code" in types:
            parts.postal_code = text
    parts.street = " ".join(p for p in (parts.street_number, parts.route) if p and p.strip()).strip()
    return parts


def _lat_lng(node: dict) -> tuple[float, float]:
    loc = node.get("location") or {}
    lat = float(loc.get("latitude") or 0)
    lng = float(loc.get("longitude") or 0)
    if lat == 0 and lng == 0 and "latLng" in loc:
        lat = float(loc["latLng"].get("latitude") or 0)
        lng = float(loc["latLng"].get("longitude") or 0)
    return lat, lng


def _place_result(node: dict) -> MapResult:
    lat, lng = _lat_lng(node)
    return MapResult(
        lat=lat,
        lng=lng,
        formatted_address=node.get("formattedAddress") or "",
        parts=_address_parts(node, "addressComponents", "longText", "formattedAddress", PLACES_SUBURB_TYPES),
    )


def reverse_geocode(lat: float, lng: float) -> MapResult:
    """Address for a point, echoing back the requested coordinates."""
    params = {"latlng": f"{lat},{lng}", "key": _key()}
    if settings.google_maps_region:
        params["region"] = settings.google_maps_region
    if settings.google_maps_language:
        params["language"] = settings.google_maps_language

    data = _json("Reverse geocode", requests.get, GEOCODE_URL, params=params)
    status = data.get("status")
    if status and status not in ("OK", "ZERO_RESULTS"):
        raise MapsError(f"Reverse geocode failed: {status} {data.get('error_message', '')}".strip())

    results = data.get("results") or []
    first = results[0] if results else {}
    parts = _address_parts(first, "address_components", "long_name", "formatted_address", LEGACY_SUBURB_TYPES)
    geometry = first.get("geometry") or {}
    point = geometry.get("location")
    return MapResult(
        lat=lat,
        lng=lng,
        formatted_address=parts.formatted or "",
        parts=parts,
        geocode_location_type=geometry.get("location_type"),
        geocoded_point=LatLng(lat=point["lat"], lng=point["lng"]) if point else None,
    )


def place_details(place_id: str) -> MapResult:
    key = _key()
    url = f"{PLACES_URL}/{quote(place_id, safe='')}"
    data = _json("Place details", requests.get, url, headers=_places_headers(key, PLACE_DETAILS_FIELDS))
    return _place_result(data)


def geocode_text(query: str) -> MapResult:
    """First Places text-search hit for ``query``; an empty result when nothing matches."""
    key = _key()
    data = _json(
        "Places search",
        requests.post,
        SEARCH_TEXT_URL,
        headers=_places_headers(key, SEARCH_TEXT_FIELDS),
        json=_places_body("textQuery", query),
    )
    places = data.get("places") or []
    if not places:
        logger.debug(f"No places found for {query!r}")
        return MapResult()
    return _place_result(places[0])


def autocomplete(query: str) -> List[PlaceSuggestion]:
    key = _key()
    data = _json(
        "Places autocomplete",
        requests.post,
        AUTOCOMPLETE_URL,
        headers=_places_headers(key, AUTOCOMPLETE_FIELDS),
        json=_places_body("input", query),
    )

    out: List[PlaceSuggestion] = []
    for s in data.get("suggestions") or []:
        pp = s.get("placePrediction")
        if not pp:
            continue
        sf = pp.get("structuredFormat") or {}
        main = (sf.get("mainText") or {}).get("text")
        secondary = (sf.get("secondaryText") or {}).get("text")
        description = None
        if not (main and main.strip()):
            description = (pp.get("text") or {}).get("text")
        if not (description and description.strip()):
            description = f"{main}, {secondary}" if secondary and secondary.strip() else main

        place_id = pp.get("placeId")
        if place_id and place_id.strip() and description and description.strip():
            out.append(PlaceSuggestion(
                place_id=place_id,
                description=description,
                main_text=main,
                secondary_text=secondary,
            ))
    return out
