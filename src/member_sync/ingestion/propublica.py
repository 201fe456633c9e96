"""
ProPublica Congress API.

Member detail responses list one role per congress; a member who switched
party within a congress shows up as several roles that differ only in
party and dates, which are folded back into one.
"""
import json
import logging
from typing import List, Optional

from member_sync.config.constants import OPEN_START_DATE, PROPUBLICA_BASE_URL
from member_sync.config.settings import settings
from member_sync.database.normalization import (
    DateType,
    clean_text,
    normalize_date,
    normalize_gender,
    normalize_party_name,
    normalize_state,
)
from member_sync.errors import UpstreamUnavailable
from member_sync.models.member import Chamber, MemberRecord, PartyRecord, RoleRecord

logger = logging.getLogger(__name__)


def _headers() -> dict:
    headers = {}
    if settings.PROPUBLICA_API_KEY:
        headers["X-API-Key"] = settings.PROPUBLICA_API_KEY
    return headers


async def _get_results(transport, url: str) -> list:
    body = await transport.fetch(url, headers=_headers())
    
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise UpstreamUnavailable("propublica", f"invalid JSON from {url}: {e}") from e
    
    if payload.get("status") == "ERROR":
        errors = payload.get("errors") or [{}]
        raise UpstreamUnavailable("propublica", errors[0].get("error") or "status ERROR")
    
    results = payload.get("results")
    if not results:
        raise UpstreamUnavailable("propublica", f"no results from {url}")
    return results


async def fetch_propublica(transport, member_id: str) -> dict:
    """Fetch one member's ProPublica detail record."""
    results = await _get_results(transport, f"{PROPUBLICA_BASE_URL}/members/{member_id}.json")
    return results[0]


async def list_congress_member_ids(transport, chamber: Chamber, congress: int) -> List[str]:
    """
    Bioguide ids of everyone who served in one chamber of a congress.
    
    Args:
        chamber: Chamber.SENATE or Chamber.HOUSE
        congress: Congress number (e.g. 117)
    """
    url = f"{PROPUBLICA_BASE_URL}/{congress}/{chamber.value}/members.json"
    results = await _get_results(transport, url)
    return [m["id"] for m in results[0].get("members", []) if m.get("id")]


def _to_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _build_role(role: dict) -> Optional[RoleRecord]:
    chamber = role.get("chamber")
    start = normalize_date(role.get("start_date"), DateType.START)
    end = normalize_date(role.get("end_date"), DateType.END)
    
    common = {
        "congress_numbers": [int(role["congress"])],
        "start_date": start,
        "end_date": end,
        "parties": [PartyRecord(
            party=normalize_party_name(role.get("party")),
            start_date=start,
            end_date=end
        )],
        "state": normalize_state(role.get("state")),
    }
    
    if chamber == "Senate":
        return RoleRecord(
            chamber=Chamber.SENATE,
            senator_class=_to_int(role.get("senate_class")),
            **common
        )
    
    if chamber == "House":
        title = role.get("title")
        if title == "Representative":
            return RoleRecord(chamber=Chamber.HOUSE, district=_to_int(role.get("district")), **common)
        if title == "Delegate":
            district = _to_int(role.get("district")) or 0
            return RoleRecord(chamber=Chamber.HOUSE, district=district, **common)
    
    return None


def _same_seat(a: RoleRecord, b: RoleRecord) -> bool:
    """Same congress, chamber and seat; only party and dates may differ."""
    return (
        a.congress_numbers == b.congress_numbers
        and a.chamber == b.chamber
        and a.state == b.state
        and a.senator_class == b.senator_class
        and a.district == b.district
    )


def normalize_propublica(raw: dict) -> MemberRecord:
    """Transform a ProPublica member detail record to a MemberRecord."""
    member_id = raw.get("id")
    if not member_id:
        raise ValueError("Missing id in ProPublica record")
    
    roles: List[RoleRecord] = []
    for raw_role in raw.get("roles") or []:
        role = _build_role(raw_role)
        if role is None:
            continue
        
        same_idx = next((i for i, r in enumerate(roles) if _same_seat(r, role)), None)
        if same_idx is None:
            roles.append(role)
            continue
        
        # Party changed within the congress
        same = roles[same_idx]
        start_date = same.start_date
        if role.start_date != OPEN_START_DATE and role.start_date < start_date:
            start_date = role.start_date
        roles[same_idx] = same.model_copy(update={
            "parties": same.parties + role.parties,
            "start_date": start_date,
            "end_date": max(same.end_date, role.end_date),
        })
    
    return MemberRecord(
        id=member_id,
        first_name=clean_text(raw.get("first_name")),
        middle_name=clean_text(raw.get("middle_name")),
        last_name=clean_text(raw.get("last_name")),
        name_suffix=clean_text(raw.get("suffix")),
        gender=normalize_gender(raw.get("gender")),
        birthday=clean_text(raw.get("date_of_birth")),
        website=clean_text(raw.get("url")),
        office=clean_text(raw.get("office")),
        phone=clean_text(raw.get("phone")),
        cspan_id=clean_text(raw.get("cspan_id")),
        twitter_id=clean_text(raw.get("twitter_account")),
        facebook_id=clean_text(raw.get("facebook_account")),
        youtube_id=clean_text(raw.get("youtube_account")),
        congress_roles=roles,
    )
