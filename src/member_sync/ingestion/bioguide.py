"""
Biographical Directory of the U.S. Congress (bioguide.congress.gov).

One JSON document per member; the job positions become congress roles.
"""
import json
import logging
from typing import List, Optional

from member_sync.config.constants import BIOGUIDE_BASE_URL, NO_PARTY_DATA
from member_sync.database.normalization import (
    DateType,
    clean_text,
    normalize_date,
    normalize_party_name,
    normalize_state,
)
from member_sync.errors import UpstreamUnavailable
from member_sync.models.member import Chamber, MemberRecord, PartyRecord, RoleRecord

logger = logging.getLogger(__name__)

CONGRESS_JOBS = {
    "Senator": Chamber.SENATE,
    "Representative": Chamber.HOUSE,
    "Delegate": Chamber.HOUSE,
}


def bioguide_member_url(member_id: str) -> str:
    return f"{BIOGUIDE_BASE_URL}/search/bio/{member_id}.json"


async def fetch_bioguide(transport, member_id: str) -> dict:
    """
    Fetch one member's bioguide record.
    
    Returns:
        The ``data`` object of the bioguide response
    """
    body = await transport.fetch(bioguide_member_url(member_id))
    
    try:
        payload = json.loads(body)
    except ValueError as e:
        raise UpstreamUnavailable("bioguide", f"invalid JSON for {member_id}: {e}") from e
    
    data = payload.get("data") if isinstance(payload, dict) else None
    if not data:
        raise UpstreamUnavailable("bioguide", f"no data for {member_id}")
    return data


def _build_role(position: dict) -> Optional[RoleRecord]:
    job_name = (position.get("job") or {}).get("name")
    chamber = CONGRESS_JOBS.get(job_name)
    if chamber is None:
        return None
    
    affiliation = position.get("congressAffiliation") or {}
    congress = affiliation.get("congress") or {}
    
    # Skip the Continental/Confederation congresses
    if congress.get("congressType") != "USCongress":
        return None
    
    start = normalize_date(position.get("startDate") or congress.get("startDate"), DateType.START)
    end = normalize_date(position.get("endDate") or congress.get("endDate"), DateType.END)
    
    parties: List[PartyRecord] = []
    for party_data in affiliation.get("partyAffiliation") or [{"party": {"name": NO_PARTY_DATA}}]:
        parties.append(PartyRecord(
            party=normalize_party_name((party_data.get("party") or {}).get("name")),
            start_date=normalize_date(party_data.get("startDate"), DateType.START)
            if party_data.get("startDate") else start,
            end_date=normalize_date(party_data.get("endDate"), DateType.END)
            if party_data.get("endDate") else end,
        ))
    
    congress_numbers = []
    if congress.get("congressNumber") is not None:
        congress_numbers.append(int(congress["congressNumber"]))
    
    return RoleRecord(
        congress_numbers=congress_numbers,
        chamber=chamber,
        start_date=start,
        end_date=end,
        parties=parties,
        state=normalize_state((affiliation.get("represents") or {}).get("regionCode")),
    )


def normalize_bioguide(raw: dict) -> MemberRecord:
    """
    Transform a bioguide ``data`` object to a MemberRecord.
    
    Only Senator, Representative and Delegate positions in the U.S.
    Congress are kept.
    """
    member_id = raw.get("usCongressBioId")
    if not member_id:
        raise ValueError("Missing usCongressBioId in bioguide record")
    
    roles = []
    for position in raw.get("jobPositions") or []:
        role = _build_role(position)
        if role is not None:
            roles.append(role)
    
    return MemberRecord(
        id=member_id,
        first_name=clean_text(raw.get("givenName")),
        middle_name=clean_text(raw.get("middleName")),
        last_name=clean_text(raw.get("familyName")),
        birthday=clean_text(raw.get("birthDate")),
        congress_roles=roles,
    )
