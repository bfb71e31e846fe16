"""Card and panel rendering for hotel search results.

Everything here is pure: provider offer dicts and pagination metadata go in,
display strings and escaped HTML fragments come out.
"""

from html import escape
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from app.types import Pagination

CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}
MAP_SEARCH_URL = "https://www.google.com/maps?q="


def _first_offer(hotel: Dict[str, Any]) -> Dict[str, Any]:
    offers = hotel.get("offers") or []
    return offers[0] if offers else {}


def format_address(hotel: Dict[str, Any]) -> str:
    address = (hotel.get("hotel") or {}).get("address") or {}
    lines = address.get("lines")
    # A bare string would otherwise be split into characters
    parts: List[str] = [str(line) for line in lines if line] if isinstance(lines, list) else []
    for key in ("postalCode", "cityName", "countryCode"):
        if address.get(key):
            parts.append(address[key])
    return ", ".join(parts) if parts else "Address not available"


def format_price(offers: Optional[List[Dict[str, Any]]]) -> str:
    if not offers or not offers[0].get("price"):
        return "Price on request"
    price = offers[0]["price"]
    try:
        total = float(price.get("total"))
    except (TypeError, ValueError):
        return "Price on request"
    symbol = CURRENCY_SYMBOLS.get(price.get("currency") or "EUR", "€")
    return f"{symbol}{total:.2f}"


def format_stars(rating: Any) -> str:
    try:
        return "⭐" * int(float(rating))
    except (TypeError, ValueError):
        return ""


def map_link(hotel: Dict[str, Any]) -> str:
    name = (hotel.get("hotel") or {}).get("name") or ""
    return MAP_SEARCH_URL + quote(f"{name} {format_address(hotel)}", safe="")


def build_card(hotel: Dict[str, Any]) -> Dict[str, Optional[str]]:
    info = hotel.get("hotel") or {}
    offer = _first_offer(hotel)
    return {
        "name": info.get("name") or "Hotel Name Not Available",
        "stars": format_stars(info.get("rating")),
        "address": format_address(hotel),
        "price": format_price(hotel.get("offers")),
        "room_category": ((offer.get("room") or {}).get("typeEstimated") or {}).get("category"),
        "cancellation": ((offer.get("policies") or {}).get("cancellation") or {}).get("description"),
        "map_url": map_link(hotel),
    }


def render_card(card: Dict[str, Optional[str]]) -> str:
    parts = [
        '<div class="hotel-card">',
        '<div class="hotel-header">',
        f"<h3>{escape(card['name'])}</h3>",
    ]
    if card["stars"]:
        parts.append(f'<div class="hotel-rating">{card["stars"]}</div>')
    parts += [
        "</div>",
        '<div class="hotel-details">',
        f'<p class="address">{escape(card["address"])}</p>',
        '<div class="price-info">',
        f'<div class="price"><strong>Price:</strong> {escape(card["price"])}</div>',
    ]
    if card["room_category"]:
        parts.append(f'<div class="room-type">{escape(card["room_category"])}</div>')
    parts.append("</div>")
    if card["cancellation"]:
        parts.append(f'<div class="cancellation-policy">{escape(card["cancellation"])}</div>')
    parts += [
        "</div>",
        '<div class="hotel-actions">',
        f'<a href="{escape(card["map_url"])}" target="_blank" rel="noopener noreferrer" '
        'class="map-link">View on Map</a>',
        "</div>",
        "</div>",
    ]
    return "".join(parts)


def render_empty() -> str:
    tips = ["Different dates", "Different location or district",
            "Increasing the search radius", "Adjusting your filters"]
    items = "".join(f"<li>{t}</li>" for t in tips)
    return ('<div class="no-results"><p>No hotels found for your search criteria.</p>'
            f"<p>Try:</p><ul>{items}</ul></div>")


def render_error(message: str, title: str = "Error searching for hotels") -> str:
    return (f'<div class="error"><h3>{escape(title)}</h3><p>{escape(message)}</p>'
            "<p>Please try again or contact support if the problem persists.</p></div>")


def render_results(hotels: List[Dict[str, Any]]) -> str:
    if not hotels:
        return render_empty()
    return "".join(render_card(build_card(h)) for h in hotels)


def pagination_controls(pagination: Pagination) -> Dict[str, Any]:
    """Visibility and button state for the pager under the result list."""
    visible = pagination.total_pages > 1
    return {
        "visible": visible,
        "label": f"Page {pagination.page} of {pagination.total_pages}" if visible else "",
        "prev_disabled": pagination.page <= 1,
        "next_disabled": pagination.page >= pagination.total_pages,
        "result_count": f"Found {pagination.total_results} hotels",
    }
