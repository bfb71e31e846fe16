import httpx
import time
from typing import Any, Callable, Dict, Optional, Tuple

from app.amadeus.auth import TokenCache
from app.amadeus.transform import extract_error_detail
from app.config import settings
from app.errors import AuthError, UpstreamError
from app.obs.logger import log_event
from app.obs.metrics import inc_counter, record_timing

TOKEN_PATH = "/v1/security/oauth2/token"
LOCATIONS_PATH = "/v1/reference-data/locations"
HOTEL_OFFERS_PATH = "/v3/shopping/hotel-offers"


class AmadeusClient:
    def __init__(self, base_url: Optional[str] = None,
                 credentials: Optional[Tuple[str, str]] = None,
                 http: Optional[httpx.Client] = None,
                 clock: Callable[[], float] = time.time):
        self.base_url = (base_url or settings.amadeus_base_url).rstrip("/")
        self._client_id, self._client_secret = credentials or settings.amadeus_credentials
        # Persistent HTTP client with HTTP/2 and sensible timeouts
        self._http = http or httpx.Client(
            http2=True,
            timeout=httpx.Timeout(connect=3.0, read=30.0, write=12.0, pool=12.0),
        )
        self.tokens = TokenCache(self._exchange_credentials, clock=clock)

    def _exchange_credentials(self) -> Tuple[str, Optional[int]]:
        data = {
            "grant_type": "client_credentials",
            "client_id": self._client_id,
            "client_secret": self._client_secret,
        }
        try:
            r = self._http.post(
                f"{self.base_url}{TOKEN_PATH}",
                data=data,
                headers={"Accept": "application/json"},
            )
            r.raise_for_status()
            j = r.json()
            return j["access_token"], j.get("expires_in")
        except (httpx.HTTPError, ValueError, KeyError) as e:
            detail = e.response.text if isinstance(e, httpx.HTTPStatusError) else str(e)
            log_event("token_error", level="ERROR", error=type(e).__name__, detail=detail)
            inc_counter("upstream_errors_total", {"op": "token"})
            raise AuthError("Failed to get access token") from e

    def get_token(self) -> str:
        return self.tokens.get_token()

    def _get(self, op: str, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        token = self.get_token()
        start = time.monotonic()
        try:
            r = self._http.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}"},
            )
        except httpx.RequestError as e:
            inc_counter("upstream_errors_total", {"op": op})
            log_event("upstream_transport_error", level="ERROR", op=op, error=str(e))
            raise UpstreamError(str(e) or type(e).__name__) from e
        finally:
            record_timing("upstream_latency_ms", (time.monotonic() - start) * 1000.0, {"op": op})

        inc_counter("upstream_requests_total", {"op": op, "status": str(r.status_code)})
        if r.status_code == 401:
            # Only invalidation path: next call forces a fresh exchange
            self.tokens.invalidate()
            log_event("upstream_unauthorized", level="WARNING", op=op)
            raise AuthError()
        try:
            r.raise_for_status()
            payload = r.json()
        except httpx.HTTPStatusError as e:
            detail = extract_error_detail(r, fallback=str(e))
            log_event("upstream_error", level="ERROR", op=op, status=r.status_code, detail=detail)
            raise UpstreamError(detail, status_code=r.status_code) from e
        except ValueError as e:
            log_event("upstream_bad_json", level="ERROR", op=op)
            raise UpstreamError(str(e)) from e

        if not isinstance(payload, dict):
            log_event("upstream_bad_payload", level="ERROR", op=op, payload_type=type(payload).__name__)
            raise UpstreamError("Unexpected provider payload")
        return payload

    def search_locations(self, keyword: str, limit: int = 10) -> Dict[str, Any]:
        return self._get("locations", LOCATIONS_PATH, {
            "keyword": keyword,
            "subType": "CITY",
            "page[limit]": limit,
        })

    def search_hotel_offers(self, params: Dict[str, Any]) -> Dict[str, Any]:
        # Drop unset optional filters rather than sending empty values
        query = {k: v for k, v in params.items() if v is not None}
        log_event("hotel_offers_request", params=query)
        return self._get("hotel_offers", HOTEL_OFFERS_PATH, query)

    def close(self) -> None:
        self._http.close()
