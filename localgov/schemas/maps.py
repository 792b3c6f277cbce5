from pydantic import BaseModel, Field
from typing import Optional


class LatLng(BaseModel):
    lat: float
    lng: float


class AddressParts(BaseModel):
    street_number: Optional[str] = None
    route: Optional[str] = None
    street: Optional[str] = None
    suburb: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    formatted: Optional[str] = None


class MapResult(BaseModel):
    lat: float = 0
    lng: float = 0
    formatted_address: Optional[str] = None
    parts: AddressParts = Field(default_factory=AddressParts)
    geocode_location_type: Optional[str] = None
    geocoded_point: Optional[LatLng] = None


class PlaceSuggestion(BaseModel):
    place_id: str
    description: str
    main_text: Optional[str] = None
    secondary_text: Optional[str] = None


class ReverseGeocodeIn(BaseModel):
    lat: float
    lng: float


class PlaceDetailsIn(BaseModel):
    place_id: str = ""


class TextQueryIn(BaseModel):
    query: str = ""
