import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.airports import AirportDirectory, load_directory
from backend.config import load_settings, server_address
from backend.flow import FlightSearchFlow, SearchFailure
from backend.gateway import AmadeusGateway
from backend.models.api import (
    CitiesResponse,
    ErrorResponse,
    FlightSearchRequest,
    FlightSearchResponse,
)

# Configure logging; the validated LOG_LEVEL is applied at startup
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load configuration, the airport directory and the provider client once.

    Missing credentials raise here, so the server refuses to start instead of
    failing every request.
    """
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    app.state.directory = load_directory(settings.airports_path)
    app.state.gateway = AmadeusGateway.from_settings(settings)
    logger.info("Flight Finder API ready")
    yield
    logger.info("Shutting down Flight Finder API")


app = FastAPI(
    title="Flight Finder API",
    description="Search one-way flights between two cities via the Amadeus flight offers API",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware to allow frontend connections
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework errors with the same {message} body as search failures."""
    if exc.status_code == 405:
        return JSONResponse(
            status_code=405,
            content={"message": f"Method {request.method} Not Allowed"},
            headers={"Allow": "GET"},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def get_directory(request: Request) -> AirportDirectory:
    return request.app.state.directory


def get_gateway(request: Request) -> AmadeusGateway:
    return request.app.state.gateway


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Flight Finder API is running"}


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "service": "flight-finder-api"}


@app.get("/cities", response_model=CitiesResponse)
async def list_cities(
    q: str = "",
    limit: int = Query(10, ge=1, le=100),
    directory: AirportDirectory = Depends(get_directory),
):
    """City names for the search form's autocomplete."""
    cities = directory.suggest(q, limit=limit) if q.strip() else directory.cities[:limit]
    return CitiesResponse(cities=cities)


@app.get(
    "/search",
    response_model=FlightSearchResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def search_flights(
    from_city: Optional[str] = Query(None, alias="fromCity"),
    to_city: Optional[str] = Query(None, alias="toCity"),
    date: Optional[str] = Query(None),
    directory: AirportDirectory = Depends(get_directory),
    gateway: AmadeusGateway = Depends(get_gateway),
):
    """
    Search one-way flights between two cities on a date.
    """
    logger.info(f"Search received: fromCity={from_city}, toCity={to_city}, date={date}")

    flow = FlightSearchFlow(directory, gateway)
    outcome = await flow.kickoff(
        FlightSearchRequest(from_city=from_city, to_city=to_city, date=date)
    )

    if isinstance(outcome, SearchFailure):
        logger.warning(
            f"Search failed with {outcome.status_code} ({outcome.kind.value}): {outcome.message}"
        )
        return JSONResponse(
            status_code=outcome.status_code,
            content=outcome.to_response().model_dump(exclude_none=True),
        )

    logger.info(f"Returning {len(outcome.flights)} flights ({outcome.usage} raw offers)")
    return outcome


if __name__ == "__main__":
    import uvicorn

    host, port = server_address()
    uvicorn.run(app, host=host, port=port)
