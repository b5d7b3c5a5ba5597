import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from backend.airports import AirportDirectory
from backend.gateway import (
    AmadeusGateway,
    GatewayError,
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    ProviderValidationError,
)
from backend.models.api import ErrorResponse, FlightSearchRequest, FlightSearchResponse
from backend.models.flights import Flight
from backend.models.search import ResolvedRequest
from backend.normalize import MalformedOfferError, normalize_offer

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = (("from_city", "fromCity"), ("to_city", "toCity"), ("date", "date"))
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


class SearchStage(str, Enum):
    VALIDATING = "validating"
    RESOLVING_CODES = "resolving_codes"
    SEARCHING = "searching"
    NORMALIZING = "normalizing"
    RESPONDING = "responding"
    FAILED = "failed"


class FailureKind(str, Enum):
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


FAILURE_BY_ERROR = {
    ProviderValidationError: FailureKind.BAD_REQUEST,
    ProviderAuthError: FailureKind.UNAUTHORIZED,
    ProviderRateLimitError: FailureKind.RATE_LIMITED,
    ProviderUnavailableError: FailureKind.UNAVAILABLE,
    ProviderTimeoutError: FailureKind.TIMEOUT,
}

# Failures whose body carries only a message.
MESSAGE_ONLY = {FailureKind.RATE_LIMITED, FailureKind.UNAVAILABLE, FailureKind.TIMEOUT}


class SearchFailure(BaseModel):
    kind: FailureKind
    status_code: int
    message: str
    details: Optional[Any] = None

    def to_response(self) -> ErrorResponse:
        details = None if self.kind in MESSAGE_ONLY else self.details
        return ErrorResponse(message=self.message, details=details)


class FlightSearchState(BaseModel):
    stage: SearchStage = SearchStage.VALIDATING
    request: Optional[FlightSearchRequest] = None
    resolved: Optional[ResolvedRequest] = None
    raw_offers: Optional[list[dict]] = None
    carriers: dict[str, str] = {}
    flights: Optional[list[Flight]] = None
    failure: Optional[SearchFailure] = None


class SearchFailed(Exception):
    def __init__(self, failure: SearchFailure):
        super().__init__(failure.message)
        self.failure = failure


def bad_request(message: str, details: Any = None) -> SearchFailed:
    return SearchFailed(
        SearchFailure(
            kind=FailureKind.BAD_REQUEST, status_code=400, message=message, details=details
        )
    )


class FlightSearchFlow:
    """One pass of a flight search request, from raw query to response body."""

    def __init__(self, directory: AirportDirectory, gateway: AmadeusGateway):
        self.directory = directory
        self.gateway = gateway
        self.state = FlightSearchState()

    def validate(self, request: FlightSearchRequest) -> FlightSearchRequest:
        self.state.stage = SearchStage.VALIDATING
        cleaned = FlightSearchRequest(
            **{
                field: (getattr(request, field) or "").strip()
                for field, _ in REQUIRED_PARAMS
            }
        )
        missing = [param for field, param in REQUIRED_PARAMS if not getattr(cleaned, field)]
        if missing:
            raise bad_request(
                f"Missing required query parameters: {', '.join(missing)}",
                details={"missing": missing},
            )
        # strptime alone accepts unpadded fields such as 2025-6-1
        try:
            if not ISO_DATE.fullmatch(cleaned.date):
                raise ValueError(cleaned.date)
            datetime.strptime(cleaned.date, "%Y-%m-%d")
        except ValueError:
            raise bad_request(
                f"Invalid date '{cleaned.date}': expected YYYY-MM-DD",
            )
        self.state.request = cleaned
        return cleaned

    def resolve_codes(self, request: FlightSearchRequest) -> ResolvedRequest:
        self.state.stage = SearchStage.RESOLVING_CODES
        origin_codes = self.directory.resolve(request.from_city)
        destination_codes = self.directory.resolve(request.to_city)

        unresolved = []
        if origin_codes is None:
            logger.error(f"Origin city lookup failed for: {request.from_city}")
            unresolved.append(("origin", request.from_city))
        if destination_codes is None:
            logger.error(f"Destination city lookup failed for: {request.to_city}")
            unresolved.append(("destination", request.to_city))
        if unresolved:
            names = "; ".join(f"{role} city: {city}" for role, city in unresolved)
            raise bad_request(
                f"Could not find airport codes for {names}",
                details={role: city for role, city in unresolved},
            )

        resolved = ResolvedRequest(
            origin_codes=origin_codes,
            destination_codes=destination_codes,
            date=request.date,
        )
        self.state.resolved = resolved
        return resolved

    async def search(self, resolved: ResolvedRequest) -> list[dict]:
        self.state.stage = SearchStage.SEARCHING
        try:
            result = await self.gateway.search(
                resolved.origin_codes, resolved.destination_codes, resolved.date
            )
        except GatewayError as e:
            raise SearchFailed(
                SearchFailure(
                    kind=FAILURE_BY_ERROR.get(type(e), FailureKind.INTERNAL),
                    status_code=e.status_code,
                    message=e.message,
                    details=e.details,
                )
            )
        self.state.raw_offers = result.offers
        self.state.carriers = result.carriers
        return result.offers

    def normalize(self, offers: list[dict], resolved: ResolvedRequest) -> list[Flight]:
        self.state.stage = SearchStage.NORMALIZING
        flights = []
        for offer in offers:
            try:
                flights.append(
                    normalize_offer(
                        offer,
                        resolved.destination_codes,
                        carriers=self.state.carriers,
                        date=resolved.date,
                    )
                )
            except MalformedOfferError as e:
                logger.warning(f"Skipping offer: {e}")
        self.state.flights = flights
        return flights

    def respond(self, flights: list[Flight]) -> FlightSearchResponse:
        self.state.stage = SearchStage.RESPONDING
        request = self.state.request
        message = None
        if not flights:
            message = (
                f"No flights found from {request.from_city} to {request.to_city} "
                f"on {request.date}."
            )
        return FlightSearchResponse(
            flights=flights, usage=len(self.state.raw_offers or []), message=message
        )

    def fail(self, failure: SearchFailure) -> SearchFailure:
        self.state.stage = SearchStage.FAILED
        self.state.failure = failure
        return failure

    async def kickoff(
        self, request: FlightSearchRequest
    ) -> FlightSearchResponse | SearchFailure:
        """Run every stage; failures are returned, never raised."""
        try:
            cleaned = self.validate(request)
            resolved = self.resolve_codes(cleaned)
            offers = await self.search(resolved)
            flights = self.normalize(offers, resolved)
            return self.respond(flights)
        except SearchFailed as e:
            return self.fail(e.failure)
        except Exception as e:
            logger.exception(f"Unexpected error during {self.state.stage.value}")
            return self.fail(
                SearchFailure(
                    kind=FailureKind.INTERNAL,
                    status_code=500,
                    message="Failed to fetch flight offers.",
                    details=f"{type(e).__name__}: {e}",
                )
            )
