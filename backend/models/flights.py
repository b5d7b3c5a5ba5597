from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Flight(BaseModel):
    """Flat, UI-ready view of one provider offer.

    Only the first itinerary of an offer is represented, so round-trip offers
    show their outbound leg only.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="Provider offer id")
    airline_code: str = Field("", description="Carrier code of the first segment")
    airline_name: str = Field(
        "", description="Carrier name, or the carrier code when the name is unknown"
    )
    flight_number: str = Field("", description="Flight number of the first segment")
    departure_time: str = Field("", description="Local departure timestamp")
    arrival_time: str = Field("", description="Local arrival timestamp of the last segment")
    origin: str = Field("", description="IATA code the itinerary departs from")
    destination: str = Field("", description="IATA code the itinerary ends at")
    duration_iso8601: str = Field("", description="Itinerary duration, e.g. 'PT2H10M'")
    price: str = Field("", description="Total price exactly as quoted by the provider")
    currency: str = Field("", description="Currency of the total price")
    stop_count: int = Field(0, description="Number of stops (0 for direct)")
    is_hidden_city: bool = Field(
        False,
        description=(
            "Heuristic only: a connecting itinerary whose first leg lands somewhere "
            "other than the requested destination airports and whose final arrival "
            "is not one of them either. Not a guarantee that the fare can be used "
            "for hidden-city travel."
        ),
    )
    booking_link: str = Field(
        "", description="Search link derived from route and date, not from the provider"
    )
