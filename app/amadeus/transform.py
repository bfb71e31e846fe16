from typing import Any, Dict, List

import httpx

from app.types import Location


def location_from_amadeus(entry: Dict[str, Any]) -> Location:
    address = entry.get("address") or {}
    name = entry.get("name")
    return Location(
        name=name,
        city_name=address.get("cityName") or name,
        country=address.get("countryName"),
        city_code=entry.get("iataCode"),
    )


def locations_from_amadeus(json_obj: Dict[str, Any]) -> List[Location]:
    """Map a reference-data/locations payload, keeping CITY entries only."""
    return [
        location_from_amadeus(e)
        for e in (json_obj.get("data") or [])
        if e.get("subType") == "CITY"
    ]


def extract_error_detail(response: httpx.Response, fallback: str) -> str:
    """Best-effort `errors[0].detail` from a provider error body."""
    try:
        errors = response.json().get("errors") or []
        detail = errors[0].get("detail")
    except (ValueError, AttributeError, IndexError, KeyError, TypeError):
        return fallback
    return detail if isinstance(detail, str) and detail else fallback
