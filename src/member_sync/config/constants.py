"""
Application-wide constants.

Upstream endpoints, sentinel dates, and other magic values live here.
"""
from datetime import date
from typing import Optional

# API Base URLs
BIOGUIDE_BASE_URL = "https://bioguide.congress.gov"
PROPUBLICA_BASE_URL = "https://api.propublica.org/congress/v1"

# congress-legislators datasets (current + historical members)
LEGISLATORS_CURRENT_URL = "https://raw.githubusercontent.com/unitedstates/congress-legislators/main/legislators-current.yaml"
LEGISLATORS_HISTORICAL_URL = "https://raw.githubusercontent.com/unitedstates/congress-legislators/main/legislators-historical.yaml"

# Members missing from the congress-legislators datasets
EXTRA_MEMBER_IDS = ["M000564", "S000605"]

# Canonical date sentinels (YYYY-MM-DD)
OPEN_START_DATE = "0000-00-00"
OPEN_END_DATE = "9999-99-99"

NO_PARTY_DATA = "No Party Data"

# A combined role may span at most one six-year Senate term
MAX_CONGRESSES_PER_ROLE = 3

# Congress numbers
# Formula: Each Congress is 2 years, starting from 1st Congress in 1789,
# sworn in on January 3rd of odd years since the 74th (1935).
FIRST_CONGRESS_YEAR = 1789


def calculate_congress(year: int, month: int = 12, day: int = 31) -> int:
    """Congress in session on the given calendar date."""
    if month == 1 and day < 3:
        year -= 1
    return ((year - FIRST_CONGRESS_YEAR) // 2) + 1


def _calculate_current_congress(today: Optional[date] = None) -> int:
    """Calculate the current Congress number based on today's date."""
    today = today or date.today()
    return calculate_congress(today.year, today.month, today.day)


CURRENT_CONGRESS = _calculate_current_congress()
