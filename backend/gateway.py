"""
Amadeus flight-offers gateway.

One search makes exactly one outbound call. Failures are never retried; they
are classified into the closed set of GatewayError subclasses below so the
request handler can turn each into an HTTP status without inspecting SDK
error shapes itself.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Optional, Sequence
from urllib.error import URLError
from urllib.request import urlopen

from amadeus import AuthenticationError, Client, NetworkError, ResponseError
from pydantic import BaseModel, Field

from backend.config import Settings
from backend.models.search import CODE_SEPARATOR

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base class for classified provider failures."""

    status_code = 500
    default_message = "Failed to fetch flight offers."

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class ProviderAuthError(GatewayError):
    status_code = 401
    default_message = (
        "Flight provider rejected the API credentials. Check the "
        "AMADEUS_API_KEY / AMADEUS_API_SECRET configuration and that the keys "
        "match the configured Amadeus environment."
    )


class ProviderValidationError(GatewayError):
    status_code = 400
    default_message = "Flight provider rejected the search parameters."


class ProviderRateLimitError(GatewayError):
    status_code = 429
    default_message = "Flight provider rate limit reached. Please try again shortly."


class ProviderUnavailableError(GatewayError):
    status_code = 503
    default_message = "Could not reach the flight provider. Please try again later."


class ProviderTimeoutError(GatewayError):
    status_code = 504
    default_message = "Flight provider did not answer in time."


class ProviderUnknownError(GatewayError):
    status_code = 500


class ProviderOffers(BaseModel):
    """Raw provider answer: offers untouched plus the carrier name dictionary."""

    offers: list[dict] = Field(default_factory=list)
    carriers: dict[str, str] = Field(default_factory=dict)


def _error_payload(error: ResponseError) -> Any:
    response = getattr(error, "response", None)
    result = getattr(response, "result", None)
    if isinstance(result, dict):
        return result.get("errors") or result
    return getattr(response, "body", None) or str(error) or None


def classify_error(error: Exception) -> GatewayError:
    """Map an exception raised by the SDK call onto a GatewayError."""
    if isinstance(error, GatewayError):
        return error
    if isinstance(error, NetworkError):
        return ProviderUnavailableError(details=str(error) or None)
    if isinstance(error, URLError):
        if isinstance(error.reason, TimeoutError):
            return ProviderTimeoutError()
        return ProviderUnavailableError(details=str(error.reason))
    if isinstance(error, ResponseError):
        status = getattr(getattr(error, "response", None), "status_code", None)
        details = _error_payload(error)
        if isinstance(error, AuthenticationError) or status in (401, 403):
            return ProviderAuthError(details=details)
        if status == 429:
            return ProviderRateLimitError(details=details)
        if status is not None and 400 <= status < 500 and status != 404:
            return ProviderValidationError(
                message=f"Flight provider rejected the search parameters ({status}).",
                details=details,
            )
        if not status:
            return ProviderUnavailableError(details=details)
        return ProviderUnknownError(details=details)
    return ProviderUnknownError(details=f"{type(error).__name__}: {error}")


class AmadeusGateway:
    """Searches flight offers through the Amadeus SDK."""

    def __init__(
        self,
        client: Client,
        max_results: int = 5,
        currency: str = "EUR",
        adults: int = 1,
        timeout: float = 20.0,
    ):
        self.client = client
        self.max_results = max_results
        self.currency = currency
        self.adults = adults
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "AmadeusGateway":
        client = Client(
            client_id=settings.amadeus_api_key,
            client_secret=settings.amadeus_api_secret,
            hostname=settings.amadeus_hostname,
            logger=logging.getLogger("amadeus"),
            # Socket reads give up after the search timeout as well
            http=partial(urlopen, timeout=settings.search_timeout),
        )
        return cls(
            client,
            max_results=settings.max_results,
            currency=settings.currency,
            adults=settings.adults,
            timeout=settings.search_timeout,
        )

    async def search(
        self,
        origin_codes: Sequence[str],
        destination_codes: Sequence[str],
        date: str,
        adults: Optional[int] = None,
        max_results: Optional[int] = None,
        currency: Optional[str] = None,
    ) -> ProviderOffers:
        params = {
            "originLocationCode": CODE_SEPARATOR.join(origin_codes),
            "destinationLocationCode": CODE_SEPARATOR.join(destination_codes),
            "departureDate": date,
            "adults": adults or self.adults,
            "max": max_results or self.max_results,
            "currencyCode": currency or self.currency,
        }
        logger.info(
            f"Searching offers {params['originLocationCode']} -> "
            f"{params['destinationLocationCode']} on {date}"
        )

        # The SDK is blocking; run it off the event loop so other requests keep flowing.
        loop = asyncio.get_running_loop()
        call = partial(self.client.shopping.flight_offers_search.get, **params)
        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(None, call), timeout=self.timeout
            )
        except (asyncio.TimeoutError, TimeoutError):
            logger.error(f"Provider timed out after {self.timeout}s for {params}")
            raise ProviderTimeoutError(
                message=f"Flight provider did not answer within {self.timeout:g} seconds."
            )
        except Exception as e:
            error = classify_error(e)
            logger.error(
                f"Provider error {error.status_code} ({type(error).__name__}) "
                f"for {params}: {error.details}"
            )
            raise error from e

        offers = list(getattr(response, "data", None) or [])
        result = getattr(response, "result", None)
        carriers = {}
        if isinstance(result, dict):
            carriers = (result.get("dictionaries") or {}).get("carriers") or {}
        logger.info(f"Provider returned {len(offers)} offers (raw)")
        return ProviderOffers(offers=offers, carriers=carriers)
