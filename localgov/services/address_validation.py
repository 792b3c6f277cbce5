# localgov/services/address_validation.py
import requests
from localgov.core.config import settings
from localgov.services.exceptions import AddressValidationError, AddressValidationUnavailable

VALIDATE_URL = "https://addressvalidation.googleapis.com/v1:validateAddress"

def validate_address(payload: dict, timeout: int = 15) -> dict:
    """Forwards a Google Address Validation request body; returns the raw JSON reply."""
    key = settings.google_maps_server_api_key
    if not key:
        raise AddressValidationUnavailable("Google Maps server API key is not configured")
    body = dict(payload or {})
    address = body.get("address")
    if isinstance(address, dict):
        if settings.google_maps_region and not address.get("regionCode"):
            address = {**address, "regionCode": settings.google_maps_region}
        if settings.google_maps_language and not address.get("languageCode"):
            address = {**address, "languageCode": settings.google_maps_language}
        body["address"] = address
    try:
        r = requests.post(VALIDATE_URL, params={"key": key}, json=body, timeout=timeout)
    except requests.RequestException as e:
        raise AddressValidationError(f"Address validation request failed: {e}") from e
    if not r.ok:
        raise AddressValidationError(f"Address validation failed: {r.status_code} {r.reason} - {r.text}")
    return r.json()
