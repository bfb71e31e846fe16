import asyncio
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError

from app.formatters.hotel_cards import pagination_controls, render_error, render_results
from app.obs.logger import log_event
from app.types import District, GeoCode, Location, Pagination, PriceRange, SearchResultPage
from app.utils.dates import default_stay_dates, to_iso_date

DEBOUNCE_SECONDS = 0.3
MIN_QUERY_LENGTH = 2

PRICE_PRESETS = {
    "budget": PriceRange(min=0, max=100),
    "moderate": PriceRange(min=100, max=200),
    "luxury": PriceRange(min=200, max=10000),
}

SEARCHING_HTML = '<div class="searching">Searching for hotels... Please wait.</div>'


class SearchForm(BaseModel):
    check_in: str
    check_out: str
    adults: int = 2
    radius: int = 5
    ratings: List[str] = Field(default_factory=list)
    price_preset: Optional[str] = None
    sort_by: str = ""


class ResultState(BaseModel):
    hotels: List[Dict[str, Any]] = Field(default_factory=list)
    page: int = 1
    total_pages: int = 1
    total_results: int = 0


class SearchController:
    """Client-side state for the search page, driven through the JSON API.

    Holds the bound location, the form, and the page currently on display.
    Each keystroke bumps a generation counter; a suggestion response is only
    applied if no newer keystroke has arrived since it was requested.
    """

    def __init__(self, http: httpx.AsyncClient, debounce: float = DEBOUNCE_SECONDS,
                 tz: str = None):
        self.http = http
        self.debounce = debounce
        self._generation = 0
        self.suggestions: List[Location] = []
        self.location: Optional[Location] = None
        self.location_text = ""
        check_in, check_out = default_stay_dates(tz)
        self.form = SearchForm(check_in=check_in.isoformat(), check_out=check_out.isoformat())
        self.results = ResultState()
        self.html = ""
        self.controls: Dict[str, Any] = {"visible": False}

    # Autocomplete

    async def suggest(self, query: str) -> Optional[List[Location]]:
        """Debounced location lookup. Returns None when superseded."""
        self._generation += 1
        generation = self._generation
        self.location_text = query

        if len(query) < MIN_QUERY_LENGTH:
            self.suggestions = []
            return []

        await asyncio.sleep(self.debounce)
        if generation != self._generation:
            return None

        locations = await self._fetch_locations(query)
        if generation != self._generation:
            log_event("suggestions_discarded", query=query, generation=generation)
            return None

        self.suggestions = locations
        return locations

    async def _fetch_locations(self, query: str) -> List[Location]:
        try:
            r = await self.http.get("/api/v1/locations/search", params={"keyword": query})
            r.raise_for_status()
            return [Location.model_validate(item) for item in r.json()]
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            log_event("suggestions_error", level="WARNING", query=query, error=str(e))
            return []

    def select_location(self, location: Location, district: Optional[District] = None) -> Location:
        if district is not None:
            location = location.model_copy(update={
                "name": f"{district.name}, {location.name}",
                "geo_code": GeoCode(latitude=district.latitude, longitude=district.longitude),
            })
            self.location_text = location.name
        else:
            suffix = f", {location.country}" if location.country else ""
            self.location_text = f"{location.name}{suffix}"
        self.location = location
        self.dismiss_suggestions()
        return location

    def dismiss_suggestions(self) -> None:
        self.suggestions = []

    # Form

    def set_dates(self, check_in: str, check_out: str) -> None:
        self.form.check_in = to_iso_date(check_in)
        self.form.check_out = to_iso_date(check_out)

    def _request_body(self, page: int) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "location": self.location.model_dump(by_alias=True, exclude_none=True),
            "checkIn": self.form.check_in,
            "checkOut": self.form.check_out,
            "adults": self.form.adults,
            "radius": self.form.radius,
            "page": page,
            "sortBy": self.form.sort_by,
        }
        if self.form.ratings:
            body["ratings"] = list(self.form.ratings)
        preset = PRICE_PRESETS.get(self.form.price_preset or "")
        if preset is not None:
            body["priceRange"] = preset.model_dump()
        return body

    # Search

    async def search(self, page: int = 1) -> Optional[SearchResultPage]:
        self.html = SEARCHING_HTML
        if self.location is None or not self.location.name or not self.location_text:
            self.html = render_error(
                "Start typing a city name and select from the dropdown list.",
                title="Please select a location from the suggestions",
            )
            return None

        try:
            r = await self.http.post("/api/v1/hotels/search", json=self._request_body(page))
            data = r.json()
        except (httpx.HTTPError, ValueError) as e:
            return self._fail(str(e) or "Failed to fetch hotels")
        if not r.is_success:
            error = data.get("error") if isinstance(data, dict) else None
            return self._fail(error or "Failed to fetch hotels")

        try:
            result = SearchResultPage.model_validate(data)
        except ValidationError as e:
            return self._fail(str(e))
        self.results = ResultState(
            hotels=result.data,
            page=page,
            total_pages=result.pagination.total_pages,
            total_results=result.pagination.total_results,
        )
        self.html = render_results(result.data)
        self.controls = pagination_controls(Pagination(
            page=page,
            total_pages=result.pagination.total_pages,
            total_results=result.pagination.total_results,
        ))
        return result

    def _fail(self, message: str) -> None:
        log_event("search_failed", level="WARNING", error=message)
        self.html = render_error(message)
        self.controls = {"visible": False}
        return None

    async def change_page(self, delta: int) -> Optional[SearchResultPage]:
        new_page = self.results.page + delta
        if 1 <= new_page <= self.results.total_pages:
            return await self.search(new_page)
        return None

    async def update_sort(self, sort_by: str) -> Optional[SearchResultPage]:
        self.form.sort_by = sort_by
        return await self.search(1)

    async def update_filters(self, ratings: Optional[List[str]] = None,
                             price_preset: Optional[str] = None) -> Optional[SearchResultPage]:
        self.form.ratings = [str(r) for r in ratings or []]
        self.form.price_preset = price_preset
        return await self.search(1)
