from typing import Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

from backend.models.flights import Flight

BOOKING_SEARCH_URL = "https://www.google.com/travel/flights"


class MalformedOfferError(ValueError):
    """Raised for offers that carry no itinerary segment to show."""


def build_booking_link(origin: str, destination: str, date: str) -> str:
    """Deterministic search link for a route and date."""
    query = f"Flights to {destination} from {origin} on {date}"
    return f"{BOOKING_SEARCH_URL}?{urlencode({'q': query})}"


def _codes(requested: Union[str, Sequence[str]]) -> set[str]:
    if isinstance(requested, str):
        return {requested}
    return set(requested)


def is_hidden_city(
    segments: list[dict], requested_destination: Union[str, Sequence[str]]
) -> bool:
    """
    Heuristic hidden-city flag for a connecting itinerary.

    True when the first leg lands somewhere other than the requested
    destination and the itinerary does not end there either. Direct flights
    are never flagged. This is a hint for the UI, not a fare rule.
    """
    if len(segments) < 2:
        return False
    requested = _codes(requested_destination)
    first_arrival = (segments[0].get("arrival") or {}).get("iataCode")
    last_arrival = (segments[-1].get("arrival") or {}).get("iataCode")
    return first_arrival not in requested and last_arrival not in requested


def normalize_offer(
    raw_offer: dict,
    requested_destination: Union[str, Sequence[str]],
    carriers: Optional[Mapping[str, str]] = None,
    date: Optional[str] = None,
) -> Flight:
    """
    Flatten a provider offer into a Flight.

    Only the first itinerary is used; its first segment gives the departure
    side and its last segment the arrival side, so intermediate legs are
    summarised by ``stop_count``.

    Args:
        raw_offer: One provider flight offer.
        requested_destination: The IATA code(s) the traveller asked to fly to.
        carriers: Optional carrier code to name dictionary.
        date: Search date used for the booking link; defaults to the
            departure date of the first segment.
    """
    itineraries = raw_offer.get("itineraries") or []
    itinerary = itineraries[0] if itineraries else {}
    segments = itinerary.get("segments") or []
    if not segments:
        raise MalformedOfferError(f"Offer {raw_offer.get('id')!r} has no segments")

    first, last = segments[0], segments[-1]
    departure = first.get("departure") or {}
    arrival = last.get("arrival") or {}
    price = raw_offer.get("price") or {}

    airline_code = first.get("carrierCode") or ""
    airline_name = (carriers or {}).get(airline_code) or airline_code
    flight_number = first.get("number") or ""

    origin = departure.get("iataCode") or ""
    destination = arrival.get("iataCode") or ""
    departure_time = departure.get("at") or ""
    link_date = date or departure_time[:10]

    return Flight(
        id=str(raw_offer.get("id") or ""),
        airline_code=airline_code,
        airline_name=airline_name,
        flight_number=f"{airline_code}{flight_number}" if flight_number else "",
        departure_time=departure_time,
        arrival_time=arrival.get("at") or "",
        origin=origin,
        destination=destination,
        duration_iso8601=itinerary.get("duration") or "",
        price=str(price.get("total") or ""),
        currency=price.get("currency") or "",
        stop_count=len(segments) - 1,
        is_hidden_city=is_hidden_city(segments, requested_destination),
        booking_link=build_booking_link(origin, destination, link_date),
    )
