import pytest

from backend.flow import (
    FailureKind,
    FlightSearchFlow,
    FlightSearchState,
    SearchFailure,
    SearchStage,
)
from backend.gateway import (
    ProviderAuthError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    ProviderUnknownError,
    ProviderValidationError,
)
from backend.models.api import FlightSearchRequest, FlightSearchResponse


def request(from_city="Lisbon", to_city="Hamburg", date="2025-06-01"):
    return FlightSearchRequest(from_city=from_city, to_city=to_city, date=date)


class TestFlightSearchState:
    """Test suite for FlightSearchState model."""

    def test_flight_search_state_creation(self):
        """Test creating a FlightSearchState."""
        state = FlightSearchState()
        assert state.stage == SearchStage.VALIDATING
        assert state.request is None
        assert state.resolved is None
        assert state.raw_offers is None
        assert state.carriers == {}
        assert state.flights is None
        assert state.failure is None


class TestFlightSearchFlow:
    """Test suite for FlightSearchFlow class."""

    @pytest.mark.asyncio
    async def test_successful_pass(self, sample_directory, fake_gateway, sample_offers):
        fake_gateway.offers = sample_offers
        flow = FlightSearchFlow(sample_directory, fake_gateway)

        outcome = await flow.kickoff(request())

        assert isinstance(outcome, FlightSearchResponse)
        assert len(outcome.flights) == 2
        assert outcome.usage == 2
        assert outcome.message is None
        assert flow.state.stage == SearchStage.RESPONDING
        assert flow.state.resolved.origin_codes == ("LIS",)
        assert flow.state.resolved.destination_codes == ("HAM",)
        assert flow.state.failure is None

    @pytest.mark.asyncio
    async def test_empty_result_is_not_a_failure(self, sample_directory, fake_gateway):
        flow = FlightSearchFlow(sample_directory, fake_gateway)

        outcome = await flow.kickoff(request())

        assert isinstance(outcome, FlightSearchResponse)
        assert outcome.flights == []
        assert outcome.message == "No flights found from Lisbon to Hamburg on 2025-06-01."
        assert flow.state.stage == SearchStage.RESPONDING

    @pytest.mark.asyncio
    async def test_validation_failure_stops_before_resolving(
        self, sample_directory, fake_gateway
    ):
        flow = FlightSearchFlow(sample_directory, fake_gateway)

        outcome = await flow.kickoff(request(date=None))

        assert isinstance(outcome, SearchFailure)
        assert outcome.kind == FailureKind.BAD_REQUEST
        assert outcome.status_code == 400
        assert flow.state.stage == SearchStage.FAILED
        assert flow.state.request is None
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_unpadded_date_is_rejected(self, sample_directory, fake_gateway):
        flow = FlightSearchFlow(sample_directory, fake_gateway)

        outcome = await flow.kickoff(request(date="2025-6-1"))

        assert outcome.status_code == 400
        assert outcome.message == "Invalid date '2025-6-1': expected YYYY-MM-DD"
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_resolution_failure(self, sample_directory, fake_gateway):
        flow = FlightSearchFlow(sample_directory, fake_gateway)

        outcome = await flow.kickoff(request(to_city="Atlantis"))

        assert outcome.kind == FailureKind.BAD_REQUEST
        assert "Atlantis" in outcome.message
        assert flow.state.request.to_city == "Atlantis"
        assert flow.state.resolved is None
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error,kind,status",
        [
            (ProviderAuthError(), FailureKind.UNAUTHORIZED, 401),
            (ProviderValidationError(details=["bad"]), FailureKind.BAD_REQUEST, 400),
            (ProviderRateLimitError(), FailureKind.RATE_LIMITED, 429),
            (ProviderUnavailableError(), FailureKind.UNAVAILABLE, 503),
            (ProviderTimeoutError(), FailureKind.TIMEOUT, 504),
            (ProviderUnknownError(), FailureKind.INTERNAL, 500),
        ],
    )
    async def test_gateway_errors_map_to_failures(
        self, sample_directory, fake_gateway, error, kind, status
    ):
        fake_gateway.error = error
        flow = FlightSearchFlow(sample_directory, fake_gateway)

        outcome = await flow.kickoff(request())

        assert isinstance(outcome, SearchFailure)
        assert outcome.kind == kind
        assert outcome.status_code == status
        assert outcome.details == error.details
        assert flow.state.stage == SearchStage.FAILED
        assert flow.state.failure == outcome


class TestSearchFailure:
    """Test suite for SearchFailure responses."""

    def test_details_kept_for_bad_request(self):
        failure = SearchFailure(
            kind=FailureKind.BAD_REQUEST, status_code=400, message="bad", details=["x"]
        )
        assert failure.to_response().model_dump() == {"message": "bad", "details": ["x"]}

    @pytest.mark.parametrize(
        "kind", [FailureKind.RATE_LIMITED, FailureKind.UNAVAILABLE, FailureKind.TIMEOUT]
    )
    def test_details_dropped_for_message_only_kinds(self, kind):
        failure = SearchFailure(kind=kind, status_code=503, message="later", details="x")
        assert failure.to_response().model_dump(exclude_none=True) == {"message": "later"}
