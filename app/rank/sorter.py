from typing import Any, Dict, List, Optional

SORT_KEYS = ("price-asc", "price-desc", "rating-desc")


def offer_price(hotel: Dict[str, Any]) -> float:
    """Total of the first offer; missing or unparseable counts as 0."""
    try:
        return float(hotel["offers"][0]["price"]["total"])
    except (KeyError, IndexError, TypeError, ValueError):
        return 0.0


def hotel_rating(hotel: Dict[str, Any]) -> int:
    try:
        return int(float((hotel.get("hotel") or {})["rating"]))
    except (AttributeError, KeyError, TypeError, ValueError):
        return 0


def sort_hotels(hotels: List[Dict[str, Any]], sort_by: Optional[str]) -> List[Dict[str, Any]]:
    """Sort the full result set. Unknown or empty keys keep provider order."""
    if sort_by == "price-asc":
        return sorted(hotels, key=offer_price)
    if sort_by == "price-desc":
        return sorted(hotels, key=offer_price, reverse=True)
    if sort_by == "rating-desc":
        return sorted(hotels, key=hotel_rating, reverse=True)
    return list(hotels)
