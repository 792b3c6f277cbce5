# File: localgov/routers/address.py

from typing import List
from fastapi import APIRouter, Body, Depends, HTTPException
from localgov.core.security import get_current_user
from localgov.schemas.maps import MapResult, PlaceDetailsIn, PlaceSuggestion, ReverseGeocodeIn, TextQueryIn
from localgov.services import maps
from localgov.services.address_validation import validate_address
from localgov.services.exceptions import (
    AddressValidationError,
    AddressValidationUnavailable,
    MapsError,
    MapsUnavailable,
)

router = APIRouter(prefix="/address", tags=["address"], dependencies=[Depends(get_current_user)])


def _maps_call(fn, *args):
    try:
        return fn(*args)
    except MapsUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except MapsError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/validate")
def validate(payload: dict = Body(...)):
    try:
        return validate_address(payload)
    except AddressValidationUnavailable as e:
        raise HTTPException(status_code=503, detail=str(e))
    except AddressValidationError as e:
        raise HTTPException(status_code=502, detail=str(e))


@router.post("/reverse-geocode", response_model=MapResult)
def reverse_geocode(body: ReverseGeocodeIn):
    return _maps_call(maps.reverse_geocode, body.lat, body.lng)


@router.post("/place-details", response_model=MapResult)
def place_details(body: PlaceDetailsIn):
    if not body.place_id.strip():
        raise HTTPException(status_code=400, detail="place_id is required")
    return _maps_call(maps.place_details, body.place_id)


@router.post("/geocode-text", response_model=MapResult)
def geocode_text(body: TextQueryIn):
    if not body.query.strip():
        raise HTTPException(status_code=400, detail="query is required")
    return _maps_call(maps.geocode_text, body.query)


@router.post("/autocomplete", response_model=List[PlaceSuggestion])
def autocomplete(body: TextQueryIn):
    if not body.query.strip():
        return []
    return _maps_call(maps.autocomplete, body.query)
