import os

# API configuration
API_BASE_URL = os.getenv("FLIGHT_FINDER_API_URL", "http://localhost:8000")
API_TIMEOUT = 30
HEALTH_CHECK_TIMEOUT = 5

# Display constants
MAX_CITY_SUGGESTIONS = 10

# Suggestion searches: (from city, to city)
SUGGESTION_ROUTES = [
    ("Lisbon", "Hamburg"),
    ("London", "Milan"),
    ("Paris", "New York"),
    ("Wroclaw", "Barcelona"),
]
