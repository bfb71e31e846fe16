from datetime import date
from unittest.mock import Mock

import pytest

from app.amadeus.client import AmadeusClient
from app.errors import AuthError, ClientInputError
from app.hotels.search import (
    HotelSearchService,
    build_offer_query,
    paginate,
    resolve_city_code,
    validate_request,
)
from app.rank.sorter import hotel_rating, offer_price, sort_hotels
from app.types import HotelSearchRequest, Location, PriceRange, SearchCriteria


def request(**overrides):
    body = {
        "location": {"name": "Amsterdam", "cityCode": "AMS"},
        "checkIn": "2025-11-10",
        "checkOut": "2025-11-12",
        "adults": 2,
        "radius": 5,
        "page": 1,
    }
    body.update(overrides)
    return HotelSearchRequest.model_validate(body)


@pytest.fixture
def mock_client(hotel_factory):
    client = Mock(spec=AmadeusClient)
    client.search_hotel_offers.return_value = {
        "data": [hotel_factory(f"Hotel {i}", total=str(100 + i)) for i in range(23)]
    }
    return client


class TestValidation:
    @pytest.mark.parametrize("missing", ["checkIn", "checkOut", "adults"])
    def test_missing_required_field_is_client_error(self, missing):
        req = request(**{missing: None})
        with pytest.raises(ClientInputError) as exc:
            validate_request(req)
        assert exc.value.status_code == 400
        assert exc.value.to_payload()["code"] == "INVALID_INPUT"

    def test_zero_adults_is_client_error(self):
        with pytest.raises(ClientInputError):
            validate_request(request(adults=0))

    def test_negative_adults_is_client_error(self):
        with pytest.raises(ClientInputError) as exc:
            validate_request(request(adults=-1))
        assert exc.value.details

    def test_page_below_one_is_coerced(self):
        assert validate_request(request(page=0)).page == 1

    def test_ratings_normalised_to_strings(self):
        criteria = validate_request(request(ratings=[4, "5"]))
        assert criteria.ratings == ["4", "5"]

    def test_missing_location_defaults_to_empty(self):
        criteria = validate_request(request(location=None))
        assert criteria.location == Location()

    def test_invalid_field_never_calls_provider(self, mock_client):
        service = HotelSearchService(mock_client)
        with pytest.raises(ClientInputError):
            service.search(request(checkIn=None))
        mock_client.search_hotel_offers.assert_not_called()


class TestCityCode:
    def test_prefers_city_code(self):
        assert resolve_city_code(Location(name="Jordaan, Amsterdam", city_code="AMS")) == "AMS"

    def test_falls_back_to_name_prefix(self):
        assert resolve_city_code(Location(name="barcelona")) == "BAR"

    def test_falls_back_to_default_without_name(self):
        assert resolve_city_code(Location()) == "AMS"
        assert resolve_city_code(Location(), default="PAR") == "PAR"


class TestQuery:
    def criteria(self, **kw):
        base = dict(
            location=Location(name="Amsterdam", city_code="AMS"),
            check_in=date(2025, 11, 10),
            check_out=date(2025, 11, 12),
            adults=2,
            radius=15,
        )
        base.update(kw)
        return SearchCriteria(**base)

    def test_fixed_parameters(self):
        q = build_offer_query(self.criteria(), "AMS")
        assert q["cityCode"] == "AMS"
        assert q["roomQuantity"] == 1
        assert q["adults"] == 2
        assert q["checkInDate"] == "2025-11-10"
        assert q["checkOutDate"] == "2025-11-12"
        assert q["currency"] == "EUR"
        assert q["bestRateOnly"] is True
        assert q["hotelSource"] == "ALL"
        assert q["lang"] == "EN"
        assert q["radiusUnit"] == "KM"

    def test_client_radius_is_not_forwarded(self):
        q = build_offer_query(self.criteria(radius=15), "AMS")
        assert q["radius"] == 50

    def test_optional_filters(self):
        q = build_offer_query(self.criteria(
            ratings=["4", "5"], price_range=PriceRange(min=100, max=200),
        ), "AMS")
        assert q["ratings"] == "4,5"
        assert q["priceRange"] == "100-200"

    def test_absent_filters_are_none(self):
        q = build_offer_query(self.criteria(), "AMS")
        assert q["ratings"] is None
        assert q["priceRange"] is None


class TestSorting:
    def test_price_asc_and_desc(self, hotel_factory):
        hotels = [hotel_factory("A", total="50"), hotel_factory("B", total="20"),
                  hotel_factory("C", total="80")]
        asc = [offer_price(h) for h in sort_hotels(hotels, "price-asc")]
        desc = [offer_price(h) for h in sort_hotels(hotels, "price-desc")]
        assert asc == [20.0, 50.0, 80.0]
        assert desc == [80.0, 50.0, 20.0]

    def test_missing_price_sorts_as_zero(self, hotel_factory):
        hotels = [hotel_factory("A", total="50"), hotel_factory("NoPrice"),
                  hotel_factory("Bad", total="n/a")]
        names = [h["hotel"]["name"] for h in sort_hotels(hotels, "price-asc")]
        assert names == ["NoPrice", "Bad", "A"]

    def test_rating_desc_missing_rating_last(self, hotel_factory):
        hotels = [hotel_factory("Three", rating="3"), hotel_factory("None"),
                  hotel_factory("Five", rating="5")]
        names = [h["hotel"]["name"] for h in sort_hotels(hotels, "rating-desc")]
        assert names == ["Five", "Three", "None"]

    def test_malformed_entries_rate_as_zero(self, hotel_factory):
        assert hotel_rating("oops") == 0
        assert hotel_rating({"hotel": "oops"}) == 0
        hotels = [hotel_factory("Four", rating="4"), "oops", {"hotel": "oops"}]
        ranked = sort_hotels(hotels, "rating-desc")
        assert ranked == [hotels[0], "oops", {"hotel": "oops"}]

    @pytest.mark.parametrize("key", [None, "", "distance"])
    def test_unknown_key_keeps_provider_order(self, hotel_factory, key):
        hotels = [hotel_factory("B", total="2"), hotel_factory("A", total="1")]
        assert sort_hotels(hotels, key) == hotels


class TestPagination:
    @pytest.mark.parametrize("page,expected", [(1, 10), (2, 10), (3, 3), (4, 0)])
    def test_23_results(self, page, expected):
        result = paginate([{"i": i} for i in range(23)], page)
        assert len(result.data) == expected
        assert result.pagination.total_pages == 3
        assert result.pagination.total_results == 23
        assert result.pagination.page == page

    def test_empty(self):
        result = paginate([], 1)
        assert result.data == []
        assert result.pagination.total_pages == 0


class TestService:
    def test_sort_applies_before_pagination(self, mock_client):
        service = HotelSearchService(mock_client)
        result = service.search(request(sortBy="price-desc", page=1))

        prices = [offer_price(h) for h in result.data]
        assert prices[0] == 122.0
        assert prices == sorted(prices, reverse=True)
        assert result.pagination.total_results == 23
        assert result.pagination.total_pages == 3

    def test_last_page(self, mock_client):
        result = HotelSearchService(mock_client).search(request(page=3))
        assert [h["hotel"]["name"] for h in result.data] == ["Hotel 20", "Hotel 21", "Hotel 22"]

    def test_name_prefix_city_code_sent(self, mock_client):
        HotelSearchService(mock_client).search(request(location={"name": "Rotterdam"}))
        query = mock_client.search_hotel_offers.call_args.args[0]
        assert query["cityCode"] == "ROT"

    def test_missing_data_key_is_empty_page(self, mock_client):
        mock_client.search_hotel_offers.return_value = {}
        result = HotelSearchService(mock_client).search(request())
        assert result.data == []
        assert result.pagination.total_results == 0

    def test_auth_error_propagates(self, mock_client):
        mock_client.search_hotel_offers.side_effect = AuthError()
        with pytest.raises(AuthError):
            HotelSearchService(mock_client).search(request())
