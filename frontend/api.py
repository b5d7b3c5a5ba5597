from datetime import date

import requests

from backend.models.api import FlightSearchResponse
from frontend.config import (
    API_BASE_URL,
    API_TIMEOUT,
    HEALTH_CHECK_TIMEOUT,
    MAX_CITY_SUGGESTIONS,
)


def check_api_health() -> bool:
    """Check if the backend API is running."""
    try:
        response = requests.get(f"{API_BASE_URL}/health", timeout=HEALTH_CHECK_TIMEOUT)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


def fetch_cities(query: str = "", limit: int = MAX_CITY_SUGGESTIONS) -> list[str]:
    """City names known to the backend, for autocomplete."""
    try:
        response = requests.get(
            f"{API_BASE_URL}/cities",
            params={"q": query, "limit": limit},
            timeout=HEALTH_CHECK_TIMEOUT,
        )
        response.raise_for_status()
        return response.json().get("cities", [])
    except requests.exceptions.RequestException:
        return []


def error_message(response: requests.Response) -> str:
    """Best human-readable error from a failed backend response."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP error! Status: {response.status_code}"
    details = payload.get("details")
    if isinstance(details, str) and details:
        return details
    return payload.get("message") or f"HTTP error! Status: {response.status_code}"


def search_flights(from_city: str, to_city: str, departure_date: date) -> dict:
    """Send a flight search request to the backend API."""
    try:
        response = requests.get(
            f"{API_BASE_URL}/search",
            params={
                "fromCity": from_city,
                "toCity": to_city,
                "date": departure_date.isoformat(),
            },
            timeout=API_TIMEOUT,
        )
        if not response.ok:
            return {"success": False, "error": error_message(response)}

        return {
            "success": True,
            "results": FlightSearchResponse.model_validate(response.json()),
        }
    except requests.exceptions.Timeout:
        return {
            "success": False,
            "error": "Request timed out. Please try again.",
        }
    except requests.exceptions.RequestException as e:
        return {"success": False, "error": str(e)}
