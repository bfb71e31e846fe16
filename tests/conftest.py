import os
import sys
import asyncio
import inspect

import httpx
import pytest

# Ensure project root is on sys.path so `import app` works in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.amadeus.client import AmadeusClient  # noqa: E402
from app.obs.metrics import reset_metrics  # noqa: E402

BASE_URL = "https://test.api.amadeus.com"


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


@pytest.fixture(autouse=True)
def _clean_metrics():
    reset_metrics()
    yield


class FakeAmadeus:
    """Scripted provider behind httpx.MockTransport; records every request."""

    def __init__(self):
        self.requests = []
        self.token_calls = 0
        self.token_status = 200
        self.locations = {"data": []}
        self.locations_status = 200
        self.hotels = {"data": []}
        self.hotels_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/v1/security/oauth2/token":
            self.token_calls += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(200, json={
                "access_token": f"TOKEN-{self.token_calls}",
                "expires_in": 1799,
            })
        if path == "/v1/reference-data/locations":
            return httpx.Response(self.locations_status, json=self.locations)
        if path == "/v3/shopping/hotel-offers":
            return httpx.Response(self.hotels_status, json=self.hotels)
        return httpx.Response(404, json={"errors": [{"detail": "no route"}]})

    def data_requests(self, path: str):
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def fake_amadeus():
    return FakeAmadeus()


@pytest.fixture
def amadeus_client(fake_amadeus):
    http = httpx.Client(transport=httpx.MockTransport(fake_amadeus.handler))
    client = AmadeusClient(base_url=BASE_URL, credentials=("id", "secret"), http=http)
    yield client
    client.close()


def make_hotel(name: str, total=None, rating=None, **extra):
    hotel = {"type": "hotel-offers", "hotel": {"name": name}, "offers": []}
    if rating is not None:
        hotel["hotel"]["rating"] = rating
    if total is not None:
        hotel["offers"] = [{"price": {"currency": "EUR", "total": total}}]
    hotel.update(extra)
    return hotel


@pytest.fixture
def hotel_factory():
    return make_hotel
