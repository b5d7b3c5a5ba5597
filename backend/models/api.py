from typing import Any, Optional

from pydantic import BaseModel, Field

from backend.models.flights import Flight


class FlightSearchRequest(BaseModel):
    from_city: Optional[str] = None
    to_city: Optional[str] = None
    date: Optional[str] = None


class FlightSearchResponse(BaseModel):
    flights: list[Flight] = Field(default_factory=list)
    usage: Optional[int] = Field(
        None, description="Number of raw offers the provider returned"
    )
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    message: str
    details: Optional[Any] = None


class CitiesResponse(BaseModel):
    cities: list[str]
