import os
import tempfile

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from backend.airports import AirportDirectory
from backend.api import app, get_directory, get_gateway
from backend.gateway import ProviderOffers


class FakeGateway:
    """Stands in for AmadeusGateway: returns canned offers or raises an error."""

    def __init__(self, offers=None, carriers=None, error=None):
        self.offers = offers or []
        self.carriers = carriers or {}
        self.error = error
        self.calls = []

    async def search(self, origin_codes, destination_codes, date, **kwargs):
        self.calls.append((tuple(origin_codes), tuple(destination_codes), date))
        if self.error is not None:
            raise self.error
        return ProviderOffers(offers=self.offers, carriers=self.carriers)


def make_segment(origin, destination, departure_at, arrival_at, carrier="TP", number="123"):
    return {
        "departure": {"iataCode": origin, "at": departure_at},
        "arrival": {"iataCode": destination, "at": arrival_at},
        "carrierCode": carrier,
        "number": number,
        "duration": "PT2H",
    }


def make_offer(offer_id, route, total="123.45", currency="EUR", duration="PT2H30M"):
    """Build a provider offer from a route such as ["LIS", "FRA", "HAM"]."""
    segments = [
        make_segment(
            origin,
            destination,
            f"2025-06-01T{8 + 3 * i:02d}:00:00",
            f"2025-06-01T{10 + 3 * i:02d}:00:00",
        )
        for i, (origin, destination) in enumerate(zip(route, route[1:]))
    ]
    return {
        "type": "flight-offer",
        "id": offer_id,
        "itineraries": [{"duration": duration, "segments": segments}],
        "price": {"currency": currency, "total": total, "grandTotal": total},
    }


@pytest.fixture
def sample_directory():
    """Small airport directory for testing."""
    return AirportDirectory(
        [
            ("Lisbon", ["LIS"]),
            ("Hamburg", ["HAM"]),
            ("London", ["LHR", "LGW", "STN"]),
            ("New York", ["JFK", "EWR", "LGA"]),
        ]
    )


@pytest.fixture
def sample_offers():
    """A direct and a one-stop offer from Lisbon to Hamburg."""
    return [
        make_offer("1", ["LIS", "HAM"], total="89.99"),
        make_offer("2", ["LIS", "FRA", "HAM"], total="120.50", duration="PT6H"),
    ]


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def test_client(sample_directory, fake_gateway):
    """FastAPI test client with the directory and gateway overridden."""
    app.dependency_overrides[get_directory] = lambda: sample_directory
    app.dependency_overrides[get_gateway] = lambda: fake_gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_airport_data():
    """Sample city/IATA rows for testing."""
    return pd.DataFrame(
        [
            {"city": "London", "iata_code": "LHR"},
            {"city": "London", "iata_code": "LGW"},
            {"city": "Paris", "iata_code": "CDG"},
            {"city": "paris", "iata_code": "ORY"},
            {"city": "Lisbon", "iata_code": "LIS"},
        ]
    )


@pytest.fixture
def temp_airport_csv(sample_airport_data):
    """Temporary CSV file with airport data."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        sample_airport_data.to_csv(f.name, index=False)
        yield f.name
    os.unlink(f.name)


@pytest.fixture
def amadeus_env(monkeypatch):
    """Amadeus credentials in the environment."""
    monkeypatch.setenv("AMADEUS_API_KEY", "test-key")
    monkeypatch.setenv("AMADEUS_API_SECRET", "test-secret")
    for name in (
        "AMADEUS_HOSTNAME",
        "FLIGHT_SEARCH_MAX_RESULTS",
        "FLIGHT_SEARCH_CURRENCY",
        "FLIGHT_SEARCH_ADULTS",
        "FLIGHT_SEARCH_TIMEOUT",
        "AIRPORTS_PATH",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def offer_factory():
    return make_offer


@pytest.fixture
def segment_factory():
    return make_segment
