from pydantic import BaseModel, Field

CODE_SEPARATOR = ","


class ResolvedRequest(BaseModel):
    """Search parameters after city names were turned into airport codes."""

    origin_codes: tuple[str, ...] = Field(description="Origin airports, in order")
    destination_codes: tuple[str, ...] = Field(
        description="Destination airports, in order"
    )
    date: str = Field(description="Departure date (YYYY-MM-DD)")
