import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

import pandas as pd

from backend.config import DEFAULT_AIRPORTS_PATH

logger = logging.getLogger(__name__)


class AirportDataError(ValueError):
    """Raised when the airport directory file is unusable."""


def _normalise_city(name: str) -> str:
    return " ".join(name.split()).casefold()


class AirportDirectory:
    """Read-only mapping of city names to their IATA airport codes.

    A city may map to several airports (metro areas such as London or Milan);
    codes keep the order they were loaded in so callers can OR-search them.
    """

    def __init__(self, entries: Iterable[tuple[str, Iterable[str]]]):
        cities: dict[str, str] = {}
        codes: dict[str, tuple[str, ...]] = {}
        for city, city_codes in entries:
            key = _normalise_city(city)
            if not key:
                raise AirportDataError("Airport directory contains a blank city name")
            if key in codes:
                raise AirportDataError(f"Duplicate city in airport directory: {city}")
            ordered = tuple(dict.fromkeys(code.strip().upper() for code in city_codes))
            if not ordered:
                raise AirportDataError(f"City without airport codes: {city}")
            invalid = [code for code in ordered if len(code) != 3 or not code.isalpha()]
            if invalid:
                raise AirportDataError(
                    f"Invalid IATA code(s) for {city}: {', '.join(invalid) or repr('')}"
                )
            cities[key] = city.strip()
            codes[key] = ordered
        self._cities: Mapping[str, str] = MappingProxyType(cities)
        self._codes: Mapping[str, tuple[str, ...]] = MappingProxyType(codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, city: object) -> bool:
        return isinstance(city, str) and self.resolve(city) is not None

    @property
    def cities(self) -> list[str]:
        return list(self._cities.values())

    def resolve(self, city_name: str) -> Optional[tuple[str, ...]]:
        """Return the airport codes for a city, or None when it is unknown."""
        if not city_name:
            return None
        return self._codes.get(_normalise_city(city_name))

    def suggest(self, text: str, limit: int = 10) -> list[str]:
        """City names containing ``text`` (case-insensitive), for autocomplete."""
        needle = _normalise_city(text or "")
        if not needle:
            return []
        matches = [
            name for key, name in self._cities.items() if needle in key
        ]
        return matches[:limit]


def load_airport_codes(path: Path = DEFAULT_AIRPORTS_PATH) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str)


def load_directory(path: Path = DEFAULT_AIRPORTS_PATH) -> AirportDirectory:
    """Load the city/IATA CSV into an AirportDirectory.

    Rows for the same city (compared case-insensitively) are merged in file
    order; the first spelling seen becomes the canonical name.
    """
    all_codes = load_airport_codes(path)
    if not {"city", "iata_code"}.issubset(all_codes.columns):
        raise AirportDataError(
            f"{path} must have 'city' and 'iata_code' columns, got {list(all_codes.columns)}"
        )
    if all_codes[["city", "iata_code"]].isna().any().any():
        raise AirportDataError(f"{path} has rows with a missing city or IATA code")

    grouped: dict[str, tuple[str, list[str]]] = {}
    for _, row in all_codes.iterrows():
        city = row["city"].strip()
        key = _normalise_city(city)
        grouped.setdefault(key, (city, []))[1].append(row["iata_code"])

    directory = AirportDirectory(grouped.values())
    logger.info(f"Loaded {len(directory)} cities from {path}")
    return directory
