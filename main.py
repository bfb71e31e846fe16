from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.amadeus.client import AmadeusClient
from app.config import settings
from app.errors import ClientInputError, HotelFinderError
from app.hotels.search import HotelSearchService
from app.locations.resolver import LocationResolver
from app.obs.logger import log_event
from app.obs.metrics import get_metrics_snapshot
from app.obs.middleware import ObservabilityMiddleware
from app.types import HotelSearchRequest

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    print(f"[INFO] Starting Hotel Finder ({settings.APP_ENV})")
    print(f"[INFO] Using API endpoint: {settings.amadeus_base_url}")

    # One provider client per process; it owns the token cache
    app.state.amadeus = AmadeusClient()
    app.state.locations = LocationResolver(app.state.amadeus)
    app.state.hotels = HotelSearchService(app.state.amadeus)

    client_id, client_secret = settings.amadeus_credentials
    if not client_id or not client_secret:
        print("[WARNING] Amadeus credentials not set. Searches will fail with AUTH_ERROR.")
    else:
        try:
            app.state.amadeus.get_token()
            print("[INFO] Warmed Amadeus token")
        except HotelFinderError as e:
            print(f"[WARNING] Token warm-up failed: {e}")

    yield

    # Shutdown
    app.state.amadeus.close()
    print("[INFO] Shutting down Hotel Finder")


app = FastAPI(
    title="Hotel Finder",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(ObservabilityMiddleware)


def get_location_resolver(request: Request) -> LocationResolver:
    return request.app.state.locations


def get_hotel_search(request: Request) -> HotelSearchService:
    return request.app.state.hotels


@app.exception_handler(HotelFinderError)
async def hotel_finder_error_handler(request: Request, exc: HotelFinderError):
    log_event("api_error", level="WARNING", status=exc.status_code,
              code=exc.code, error=exc.message)
    return JSONResponse(exc.to_payload(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    err = ClientInputError("Invalid search parameters",
                           details=[{"loc": list(e.get("loc", ())), "msg": e.get("msg")}
                                    for e in exc.errors()])
    log_event("api_error", level="WARNING", status=err.status_code, code=err.code)
    return JSONResponse(err.to_payload(), status_code=err.status_code)


@app.get("/")
async def root():
    return {
        "service": "Hotel Finder",
        "version": "1.0.0",
        "status": "running",
        "environment": "production" if settings.is_production else "test",
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "hotel-finder"}


@app.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


# Plain `def` routes run in the threadpool; the provider client is synchronous.
@app.get("/api/v1/locations/search")
def search_locations(keyword: Optional[str] = None,
                     resolver: LocationResolver = Depends(get_location_resolver)):
    locations = resolver.resolve(keyword)
    return [loc.model_dump(by_alias=True, exclude_none=True) for loc in locations]


@app.post("/api/v1/hotels/search")
def search_hotels(body: HotelSearchRequest,
                  service: HotelSearchService = Depends(get_hotel_search)):
    result = service.search(body)
    return result.model_dump(by_alias=True)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.APP_ENV == "dev",
        log_level="info",
    )
