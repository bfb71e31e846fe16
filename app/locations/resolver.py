from typing import Dict, List, Optional

from app.amadeus.client import AmadeusClient
from app.amadeus.transform import locations_from_amadeus
from app.locations.cities import match_known_city
from app.obs.logger import log_event
from app.types import Location

MIN_KEYWORD_LENGTH = 2
MAX_CANDIDATES = 10


class LocationResolver:
    """Turns a partial place name into candidate locations for autocomplete.

    Resolution order: static city table -> provider city search. Autocomplete
    is non-critical, so every failure degrades to an empty list.
    """

    def __init__(self, client: AmadeusClient, cities: Optional[Dict[str, Dict]] = None):
        self.client = client
        self.cities = cities

    def resolve(self, keyword: Optional[str]) -> List[Location]:
        if not keyword or len(keyword) < MIN_KEYWORD_LENGTH:
            return []

        known = match_known_city(keyword, self.cities)
        if known is not None:
            log_event("location_search", keyword=keyword, source="static", results=1)
            return [known]

        try:
            payload = self.client.search_locations(keyword, limit=MAX_CANDIDATES)
            locations = locations_from_amadeus(payload)
        except Exception as e:
            log_event("location_search_error", level="ERROR", keyword=keyword,
                      error=type(e).__name__, detail=str(e))
            return []

        log_event("location_search", keyword=keyword, source="amadeus", results=len(locations))
        return locations[:MAX_CANDIDATES]
