from datetime import date
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base for models exchanged with the browser (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeoCode(WireModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class District(WireModel):
    name: str
    code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class Location(WireModel):
    name: Optional[str] = Field(None, description="Display name shown in the dropdown")
    city_name: Optional[str] = None
    country: Optional[str] = None
    city_code: Optional[str] = Field(None, description="Provider city code, e.g. 'AMS'")
    districts: Optional[List[District]] = None
    geo_code: Optional[GeoCode] = None  # only set when a district was picked


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class PriceRange(WireModel):
    min: float
    max: float

    def render(self) -> str:
        """Provider format: 'min-max'."""
        return f"{_num(self.min)}-{_num(self.max)}"


class HotelSearchRequest(WireModel):
    """Raw search form as posted by the browser; required fields are checked later."""
    location: Optional[Location] = None
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: Optional[int] = None
    radius: Optional[int] = None
    page: int = 1
    ratings: Optional[List[Union[int, str]]] = None
    price_range: Optional[PriceRange] = None
    sort_by: Optional[str] = None


class SearchCriteria(WireModel):
    location: Location = Field(default_factory=Location)
    check_in: date
    check_out: date
    adults: int = Field(ge=1)
    radius: Optional[int] = None
    ratings: Optional[List[str]] = None
    price_range: Optional[PriceRange] = None
    sort_by: Optional[str] = None
    page: int = Field(1, ge=1)


class Pagination(WireModel):
    page: int
    total_pages: int
    total_results: int


class SearchResultPage(WireModel):
    # HotelOffer payloads pass through untouched
    data: List[Dict[str, Any]]
    pagination: Pagination
