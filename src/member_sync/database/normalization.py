"""
Data Normalization Module

Centralized functions to transform raw upstream values into our canonical
member format. Every source normalizer uses these so the merge engine
compares like with like.

Usage:
    from member_sync.database.normalization import normalize_date, DateType

    normalize_date("2019-01", DateType.START)   # "2019-01-00"
    normalize_date("", DateType.END)            # "9999-99-99"
"""
import logging
from enum import Enum
from typing import Optional

from member_sync.config.constants import NO_PARTY_DATA, OPEN_END_DATE, OPEN_START_DATE
from member_sync.models.member import Chamber, Gender

logger = logging.getLogger(__name__)


# ============================================================================
# Date Normalization
# ============================================================================

class DateType(str, Enum):
    """Whether a date opens or closes an interval."""
    START = "start"
    END = "end"


def normalize_date(raw: Optional[str], date_type: DateType) -> str:
    """
    Canonicalize a (possibly partial) date to YYYY-MM-DD.
    
    Missing components are filled so that the result still sorts
    correctly as a string: start dates fill with zeros (earliest),
    end dates with nines (latest). Numeric components are zero-padded.
    
    Args:
        raw: Date string such as "2019-01-03", "2019-01", "2019" or ""
        date_type: DateType.START or DateType.END
        
    Returns:
        Canonical date string; never raises
        
    Examples:
        >>> normalize_date("2019", DateType.START)
        "2019-00-00"
        >>> normalize_date("2019", DateType.END)
        "2019-99-99"
        >>> normalize_date("2019-1-3", DateType.START)
        "2019-01-03"
        >>> normalize_date(None, DateType.END)
        "9999-99-99"
    """
    if not raw:
        return OPEN_START_DATE if date_type == DateType.START else OPEN_END_DATE
    
    # Drop any time component ("2019-01-03T12:00:00")
    parts = str(raw).strip().split("T", 1)[0].split("-")
    
    if date_type == DateType.START:
        fillers = ("0000", "00", "00")
    else:
        fillers = ("9999", "99", "99")
    
    components = []
    for idx, filler in enumerate(fillers):
        value = parts[idx].strip() if idx < len(parts) else ""
        if not value:
            value = filler
        elif value.isdigit():
            # "2019-1-3" -> "2019-01-03"
            value = value.zfill(len(filler))
        components.append(value)
    
    return "-".join(components)


# ============================================================================
# State Normalization
# ============================================================================

STATE_NAME_TO_CODE = {
    "Alabama": "AL", "Alaska": "AK", "Arizona": "AZ", "Arkansas": "AR",
    "California": "CA", "Colorado": "CO", "Connecticut": "CT", "Delaware": "DE",
    "Florida": "FL", "Georgia": "GA", "Hawaii": "HI", "Idaho": "ID",
    "Illinois": "IL", "Indiana": "IN", "Iowa": "IA", "Kansas": "KS",
    "Kentucky": "KY", "Louisiana": "LA", "Maine": "ME", "Maryland": "MD",
    "Massachusetts": "MA", "Michigan": "MI", "Minnesota": "MN", "Mississippi": "MS",
    "Missouri": "MO", "Montana": "MT", "Nebraska": "NE", "Nevada": "NV",
    "New Hampshire": "NH", "New Jersey": "NJ", "New Mexico": "NM", "New York": "NY",
    "North Carolina": "NC", "North Dakota": "ND", "Ohio": "OH", "Oklahoma": "OK",
    "Oregon": "OR", "Pennsylvania": "PA", "Rhode Island": "RI", "South Carolina": "SC",
    "South Dakota": "SD", "Tennessee": "TN", "Texas": "TX", "Utah": "UT",
    "Vermont": "VT", "Virginia": "VA", "Washington": "WA", "West Virginia": "WV",
    "Wisconsin": "WI", "Wyoming": "WY",
    "District of Columbia": "DC", "Puerto Rico": "PR", "American Samoa": "AS",
    "Guam": "GU", "Northern Mariana Islands": "MP", "Virgin Islands": "VI",
}


def normalize_state(state: Optional[str]) -> Optional[str]:
    """
    Normalize a state or territory to its 2-letter code.
    
    Historical region codes (e.g. "DK" for Dakota Territory) are not in the
    lookup table; they are kept as upper-cased codes rather than dropped.
    
    Examples:
        >>> normalize_state("Utah")
        "UT"
        >>> normalize_state("ut")
        "UT"
        >>> normalize_state("dk")
        "DK"
    """
    if not state:
        return None
    
    state_clean = state.strip()
    
    if len(state_clean) == 2:
        return state_clean.upper()
    
    for full_name, code in STATE_NAME_TO_CODE.items():
        if full_name.lower() == state_clean.lower():
            return code
    
    logger.debug(f"Unknown state value '{state_clean}'")
    return None


# ============================================================================
# Party Normalization
# ============================================================================

PARTY_CODE_TO_NAME = {
    "R": "Republican",
    "D": "Democrat",
    "I": "Independent",
    "ID": "Independent",
}

PARTY_NAME_ALIASES = {
    "democratic": "Democrat",
}


def normalize_party_name(party: Optional[str]) -> str:
    """
    Normalize a party code or name to a full party name.
    
    Examples:
        >>> normalize_party_name("R")
        "Republican"
        >>> normalize_party_name("ID")
        "Independent"
        >>> normalize_party_name("Whig")
        "Whig"
        >>> normalize_party_name("")
        "No Party Data"
    """
    if not party:
        return NO_PARTY_DATA
    
    party_clean = party.strip()
    if not party_clean or party_clean.upper() == "NA":
        return NO_PARTY_DATA
    
    if party_clean.upper() in PARTY_CODE_TO_NAME:
        return PARTY_CODE_TO_NAME[party_clean.upper()]
    
    if party_clean.lower() in PARTY_NAME_ALIASES:
        return PARTY_NAME_ALIASES[party_clean.lower()]
    
    # Short unknown codes are a data quality issue; full names pass through
    if len(party_clean) <= 2:
        logger.warning(f"No party mapping for '{party_clean}'")
        return NO_PARTY_DATA
    
    return party_clean


# ============================================================================
# Chamber / Gender Normalization
# ============================================================================

CHAMBER_MAPPINGS = {
    "senate": Chamber.SENATE,
    "sen": Chamber.SENATE,
    "s": Chamber.SENATE,
    "house": Chamber.HOUSE,
    "house of representatives": Chamber.HOUSE,
    "rep": Chamber.HOUSE,
    "h": Chamber.HOUSE,
}


def normalize_chamber(chamber: Optional[str]) -> Optional[Chamber]:
    """
    Normalize chamber names and term types to a Chamber.
    
    Examples:
        >>> normalize_chamber("Senate")
        Chamber.SENATE
        >>> normalize_chamber("rep")
        Chamber.HOUSE
    """
    if not chamber:
        return None
    return CHAMBER_MAPPINGS.get(chamber.strip().lower())


def normalize_gender(gender: Optional[str]) -> Optional[Gender]:
    """Map the "M"/"F" codes used upstream; anything else is no data."""
    if not gender:
        return None
    
    gender_clean = gender.strip().upper()
    if gender_clean == "M":
        return Gender.MALE
    if gender_clean == "F":
        return Gender.FEMALE
    return None


def clean_text(value) -> Optional[str]:
    """Strip a scalar text value; empty strings become None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
