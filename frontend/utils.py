import re
from datetime import datetime
from typing import Optional

import pandas as pd

from backend.models.flights import Flight

DURATION_RE = re.compile(r"^P(?:(\d+)D)?T?(?:(\d+)H)?(?:(\d+)M)?")


def format_duration(value: str) -> str:
    """Turn an ISO 8601 duration such as 'PT2H10M' into '2h 10m'."""
    match = DURATION_RE.match(value or "")
    if not match or not any(match.groups()):
        return value or "-"
    days, hours, minutes = (int(part or 0) for part in match.groups())
    hours += days * 24
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)


def format_time(timestamp: str) -> str:
    """HH:MM part of a local ISO timestamp."""
    try:
        return datetime.fromisoformat(timestamp).strftime("%H:%M")
    except (TypeError, ValueError):
        return timestamp or "-"


def stops_label(flight: Flight) -> str:
    """Describe the stops of a flight the way the results table shows them."""
    if flight.stop_count == 0:
        return "Direct"
    if flight.is_hidden_city:
        return "Layover (Hidden City)"
    return f"{flight.stop_count} Stop(s) (Final: {flight.destination})"


def airline_label(flight: Flight) -> str:
    if flight.airline_name and flight.airline_name != flight.airline_code:
        return f"{flight.airline_name} ({flight.airline_code})"
    return flight.airline_code or "-"


def flights_to_dataframe(flights: list[Flight]) -> pd.DataFrame:
    """Build the display table for a list of flights."""
    rows = [
        {
            "Airline": airline_label(flight),
            "Route": f"{flight.origin} → {flight.destination}",
            "Departure": format_time(flight.departure_time),
            "Arrival": format_time(flight.arrival_time),
            "Duration": format_duration(flight.duration_iso8601),
            "Price": f"{flight.price} {flight.currency}".strip(),
            "Stops": stops_label(flight),
            "Booking": flight.booking_link,
        }
        for flight in flights
    ]
    return pd.DataFrame(rows)


def missing_fields(from_city: str, to_city: str, departure_date: Optional[object]) -> list[str]:
    """Form fields the user still has to fill in."""
    missing = []
    if not (from_city or "").strip():
        missing.append("From city")
    if not (to_city or "").strip():
        missing.append("To city")
    if not departure_date:
        missing.append("Date")
    return missing
