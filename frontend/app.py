from datetime import date

import streamlit as st

from frontend.api import check_api_health, fetch_cities, search_flights
from frontend.config import SUGGESTION_ROUTES
from frontend.utils import flights_to_dataframe, missing_fields

# Configure the page
st.set_page_config(
    page_title="Flight Finder",
    page_icon="✈️",
    layout="wide",
    initial_sidebar_state="collapsed",
)


def render_suggestion_buttons() -> None:
    """Render suggestion buttons for common routes."""
    st.markdown("##### 💡 Try these routes:")

    cols = st.columns(len(SUGGESTION_ROUTES))
    for i, (from_city, to_city) in enumerate(SUGGESTION_ROUTES):
        if cols[i].button(f"{from_city} → {to_city}", key=f"suggestion_{i}"):
            st.session_state.from_city = from_city
            st.session_state.to_city = to_city


def city_input(label: str, key: str, cities: list[str], placeholder: str) -> str:
    """Free-text city field with matching known cities shown as hints."""
    value = st.text_input(label, key=key, placeholder=placeholder)
    typed = value.strip().lower()
    if typed:
        matches = [city for city in cities if typed in city.lower()][:5]
        if matches and value.strip() not in matches:
            st.caption("Did you mean: " + ", ".join(matches))
    return value


def handle_search_results(result: dict, from_city: str, to_city: str, when: date) -> None:
    """Handle and display search results."""
    if not result.get("success"):
        st.error(f"❌ Error: {result.get('error', 'Unknown error')}")
        return

    response = result["results"]
    if not response.flights:
        st.info(
            response.message
            or f"No flights found matching your criteria for {from_city} to {to_city} on {when}."
        )
        return

    st.header(f"📋 Flight Results ({len(response.flights)})")
    st.dataframe(
        flights_to_dataframe(response.flights),
        use_container_width=True,
        hide_index=True,
        column_config={
            "Booking": st.column_config.LinkColumn("Booking", display_text="View Offer ↗️")
        },
    )
    if any(flight.is_hidden_city for flight in response.flights):
        st.caption(
            "Hidden City is a heuristic: neither the first stop nor the final airport "
            "is the requested destination. "
            "Check the fare rules before relying on it."
        )


def main():
    """Main application function."""
    st.title("✈️ Flight Finder")
    st.markdown("Search one-way flights between two cities")

    # Initialise session state
    for key in ("from_city", "to_city"):
        if key not in st.session_state:
            st.session_state[key] = ""

    # Check API health
    if not check_api_health():
        st.error("🔴 Backend API is not running. Please start the backend server.")
        st.stop()

    cities = fetch_cities(limit=100)

    st.header("🔍 Search Flights")
    render_suggestion_buttons()

    col1, col2 = st.columns(2)
    with col1:
        from_city = city_input(
            "From:", "from_city", cities, "Origin city (e.g., Lisbon)"
        )
    with col2:
        to_city = city_input(
            "To:", "to_city", cities, "Destination city (e.g., Hamburg)"
        )
    departure_date = st.date_input("Date:", value=date.today(), min_value=date.today())

    col1, col2, col3 = st.columns([1, 2, 1])
    with col2:
        search_button = st.button(
            "Find Cheap Flights", type="primary", use_container_width=True
        )

    if search_button:
        missing = missing_fields(from_city, to_city, departure_date)
        if missing:
            st.warning(f"⚠️ Please fill in: {', '.join(missing)}.")
            return
        with st.spinner("Loading flights... ✈️"):
            result = search_flights(from_city.strip(), to_city.strip(), departure_date)
        handle_search_results(result, from_city, to_city, departure_date)


if __name__ == "__main__":
    main()
