from unittest.mock import MagicMock, patch

import pytest
import requests

from localgov.core.config import settings
from localgov.services import maps
from localgov.services.exceptions import MapsError, MapsUnavailable


@pytest.fixture()
def configured(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "google_maps_server_api_key", "server-key")
    monkeypatch.setattr(settings, "google_maps_region", "ZA")
    monkeypatch.setattr(settings, "google_maps_language", "en")


def _reply(payload: dict | None = None, ok: bool = True) -> MagicMock:
    reply = MagicMock()
    reply.ok = ok
    reply.status_code = 200 if ok else 403
    reply.reason = "OK" if ok else "Forbidden"
    reply.text = "" if ok else "API key not valid"
    reply.json.return_value = payload or {}
    return reply


GEOCODE_REPLY = {
    "status": "OK",
    "results": [
        {
            "formatted_address": "21 Main Rd, Berea, Durban, 4001, South Africa",
            "address_components": [
                {"long_name": "21", "types": ["street_number"]},
                {"long_name": "Main Road", "types": ["route"]},
                {"long_name": "Berea", "types": ["sublocality_level_1", "sublocality"]},
                {"long_name": "Durban", "types": ["locality", "political"]},
                {"long_name": "4001", "types": ["postal_code"]},
            ],
            "geometry": {"location": {"lat": -29.85, "lng": 31.02}, "location_type": "ROOFTOP"},
        }
    ],
}


class TestReverseGeocode:
    def test_extracts_address_parts(self, configured) -> None:
        with patch.object(maps.requests, "get", return_value=_reply(GEOCODE_REPLY)) as get:
            result = maps.reverse_geocode(-29.8587, 31.0218)

        assert result.lat == -29.8587
        assert result.formatted_address.startswith("21 Main Rd")
        assert result.parts.street == "21 Main Road"
        assert result.parts.suburb == "Berea"
        assert result.parts.city == "Durban"
        assert result.parts.postal_code == "4001"
        assert result.geocode_location_type == "ROOFTOP"
        assert result.geocoded_point.lat == -29.85
        params = get.call_args.kwargs["params"]
        assert params["latlng"] == "-29.8587,31.0218"
        assert params["region"] == "ZA"

    def test_city_falls_back_to_district(self, configured) -> None:
        reply = {
            "status": "OK",
            "results": [
                {"address_components": [{"long_name": "eThekwini", "types": ["administrative_area_level_2"]}]}
            ],
        }
        with patch.object(maps.requests, "get", return_value=_reply(reply)):
            result = maps.reverse_geocode(0, 0)

        assert result.parts.city == "eThekwini"
        assert result.formatted_address == ""

    def test_no_results(self, configured) -> None:
        with patch.object(maps.requests, "get", return_value=_reply({"status": "ZERO_RESULTS", "results": []})):
            result = maps.reverse_geocode(1.5, 2.5)

        assert result.lat == 1.5
        assert result.parts.street == ""
        assert result.geocoded_point is None

    def test_denied_status_raises(self, configured) -> None:
        reply = {"status": "REQUEST_DENIED", "error_message": "bad key", "results": []}
        with patch.object(maps.requests, "get", return_value=_reply(reply)):
            with pytest.raises(MapsError, match="REQUEST_DENIED"):
                maps.reverse_geocode(0, 0)

    def test_missing_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(settings, "google_maps_server_api_key", None)

        with pytest.raises(MapsUnavailable):
            maps.reverse_geocode(0, 0)


class TestPlaces:
    def test_place_details(self, configured) -> None:
        reply = {
            "id": "abc",
            "formattedAddress": "5 Long St, Cape Town",
            "location": {"latitude": -33.92, "longitude": 18.42},
            "addressComponents": [
                {"longText": "5", "types": ["street_number"]},
                {"longText": "Long Street", "types": ["route"]},
                {"longText": "Cape Town", "types": ["locality"]},
            ],
        }
        with patch.object(maps.requests, "get", return_value=_reply(reply)) as get:
            result = maps.place_details("abc/def")

        assert (result.lat, result.lng) == (-33.92, 18.42)
        assert result.parts.street == "5 Long Street"
        assert get.call_args.args[0].endswith("/places/abc%2Fdef")
        assert get.call_args.kwargs["headers"]["X-Goog-Api-Key"] == "server-key"

    def test_geocode_text_takes_first_place(self, configured) -> None:
        reply = {
            "places": [
                {"formattedAddress": "First", "location": {"latitude": 1.0, "longitude": 2.0}},
                {"formattedAddress": "Second", "location": {"latitude": 3.0, "longitude": 4.0}},
            ]
        }
        with patch.object(maps.requests, "post", return_value=_reply(reply)) as post:
            result = maps.geocode_text("main road")

        assert result.formatted_address == "First"
        assert (result.lat, result.lng) == (1.0, 2.0)
        body = post.call_args.kwargs["json"]
        assert body == {"textQuery": "main road", "languageCode": "en", "regionCode": "ZA"}

    def test_geocode_text_nothing_found(self, configured) -> None:
        with patch.object(maps.requests, "post", return_value=_reply({})):
            result = maps.geocode_text("nowhere")

        assert (result.lat, result.lng) == (0, 0)
        assert result.formatted_address is None

    def test_error_body_raises(self, configured) -> None:
        with patch.object(maps.requests, "post", return_value=_reply({"error": {"message": "quota"}})):
            with pytest.raises(MapsError, match="quota"):
                maps.geocode_text("x")

    def test_http_error_raises(self, configured) -> None:
        with patch.object(maps.requests, "get", return_value=_reply(ok=False)):
            with pytest.raises(MapsError, match="403"):
                maps.place_details("abc")

    def test_network_error_raises(self, configured) -> None:
        with patch.object(maps.requests, "post", side_effect=requests.Timeout("slow")):
            with pytest.raises(MapsError, match="slow"):
                maps.autocomplete("x")


class TestAutocomplete:
    def test_builds_suggestions(self, configured) -> None:
        reply = {
            "suggestions": [
                {
                    "placePrediction": {
                        "placeId": "p1",
                        "text": {"text": "Main Road, Durban, South Africa"},
                        "structuredFormat": {
                            "mainText": {"text": "Main Road"},
                            "secondaryText": {"text": "Durban"},
                        },
                    }
                },
                {"placePrediction": {"placeId": "p2", "text": {"text": "Berea, Durban"}}},
                {"placePrediction": {"text": {"text": "no id"}}},
                {"queryPrediction": {"text": {"text": "main"}}},
            ]
        }
        with patch.object(maps.requests, "post", return_value=_reply(reply)) as post:
            out = maps.autocomplete("main")

        assert [(s.place_id, s.description) for s in out] == [
            ("p1", "Main Road, Durban"),
            ("p2", "Berea, Durban"),
        ]
        assert out[0].secondary_text == "Durban"
        assert post.call_args.kwargs["json"]["input"] == "main"

    def test_no_suggestions(self, configured) -> None:
        with patch.object(maps.requests, "post", return_value=_reply({})):
            assert maps.autocomplete("zz") == []
