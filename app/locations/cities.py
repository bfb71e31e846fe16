from typing import Dict, Optional

from app.types import District, Location


# Keyed by lowercase city slug. Entries here short-circuit the remote lookup.
KNOWN_CITIES: Dict[str, Dict] = {
    "amsterdam": {
        "code": "AMS",
        "name": "Amsterdam",
        "country": "Netherlands",
        "districts": [
            {"name": "City Center", "code": "AMS"},
            {"name": "Museum Quarter", "code": "AMS"},
            {"name": "Canal Ring", "code": "AMS"},
            {"name": "Jordaan", "code": "AMS"},
            {"name": "De Pijp", "code": "AMS"},
        ],
    },
}


def to_location(city: Dict) -> Location:
    return Location(
        name=city["name"],
        city_name=city["name"],
        country=city.get("country"),
        city_code=city["code"],
        districts=[District(**d) for d in city.get("districts", [])] or None,
    )


def match_known_city(keyword: str, cities: Optional[Dict[str, Dict]] = None) -> Optional[Location]:
    """First table entry whose slug contains the keyword (case-insensitive)."""
    t = keyword.strip().lower()
    if not t:
        return None
    for slug, city in (cities if cities is not None else KNOWN_CITIES).items():
        if t in slug:
            return to_location(city)
    return None
