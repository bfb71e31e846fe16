import math
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from app.amadeus.client import AmadeusClient
from app.config import settings
from app.errors import ClientInputError
from app.obs.logger import log_event
from app.rank.sorter import sort_hotels
from app.types import HotelSearchRequest, Location, Pagination, SearchCriteria, SearchResultPage

PAGE_SIZE = 10


def validate_request(req: HotelSearchRequest) -> SearchCriteria:
    """Check required fields and normalise the raw form into SearchCriteria."""
    if not req.check_in or not req.check_out or not req.adults:
        raise ClientInputError()
    try:
        return SearchCriteria(
            location=req.location or Location(),
            check_in=req.check_in,
            check_out=req.check_out,
            adults=req.adults,
            radius=req.radius,
            ratings=[str(r) for r in req.ratings] if req.ratings else None,
            price_range=req.price_range,
            sort_by=req.sort_by or None,
            page=max(1, req.page),
        )
    except ValidationError as e:
        raise ClientInputError("Invalid search parameters",
                               details=e.errors(include_url=False, include_context=False)) from e


def resolve_city_code(location: Location, default: Optional[str] = None) -> str:
    # Name prefix is a heuristic; the static city table covers the common case
    if location.city_code:
        return location.city_code
    if location.name:
        return location.name[:3].upper()
    return default or settings.DEFAULT_CITY_CODE


def build_offer_query(criteria: SearchCriteria, city_code: str) -> Dict[str, Any]:
    return {
        "cityCode": city_code,
        "roomQuantity": 1,
        "adults": criteria.adults,
        "checkInDate": criteria.check_in.isoformat(),
        "checkOutDate": criteria.check_out.isoformat(),
        "priceRange": criteria.price_range.render() if criteria.price_range else None,
        "currency": settings.HOTEL_CURRENCY,
        "ratings": ",".join(criteria.ratings) if criteria.ratings else None,
        "bestRateOnly": True,
        # The form's radius slider is not forwarded; see DESIGN.md
        "radius": settings.HOTEL_SEARCH_RADIUS_KM,
        "radiusUnit": "KM",
        "hotelSource": "ALL",
        "lang": "EN",
    }


def paginate(hotels: List[Dict[str, Any]], page: int, page_size: int = PAGE_SIZE) -> SearchResultPage:
    start = (page - 1) * page_size
    return SearchResultPage(
        data=hotels[start:start + page_size],
        pagination=Pagination(
            page=page,
            total_pages=math.ceil(len(hotels) / page_size),
            total_results=len(hotels),
        ),
    )


class HotelSearchService:
    def __init__(self, client: AmadeusClient):
        self.client = client

    def search(self, req: HotelSearchRequest) -> SearchResultPage:
        criteria = validate_request(req)
        city_code = resolve_city_code(criteria.location)
        log_event(
            "hotel_search",
            city_code=city_code,
            adults=criteria.adults,
            page=criteria.page,
            sort_by=criteria.sort_by,
            requested_radius=criteria.radius,
        )

        # AuthError / UpstreamError propagate to the API layer untouched
        payload = self.client.search_hotel_offers(build_offer_query(criteria, city_code))
        hotels = payload.get("data") or []

        result = paginate(sort_hotels(hotels, criteria.sort_by), criteria.page)
        log_event(
            "hotel_search_done",
            total_results=result.pagination.total_results,
            returned=len(result.data),
        )
        return result
