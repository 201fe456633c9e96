"""
unitedstates/congress-legislators datasets.

Source: https://github.com/unitedstates/congress-legislators

The whole dataset (current and historical legislators) is fetched at once
and cached for a day; members are then looked up by bioguide id. The cache
is an explicit value owned by whoever creates it, so expiry is driven by
the injected clock rather than by module state.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import yaml

from member_sync.clock import Clock, now_millis
from member_sync.config.constants import (
    EXTRA_MEMBER_IDS,
    LEGISLATORS_CURRENT_URL,
    LEGISLATORS_HISTORICAL_URL,
)
from member_sync.config.settings import settings
from member_sync.database.normalization import (
    DateType,
    clean_text,
    normalize_chamber,
    normalize_date,
    normalize_gender,
    normalize_party_name,
    normalize_state,
)
from member_sync.errors import UpstreamUnavailable
from member_sync.models.member import Chamber, MemberRecord, PartyRecord, RoleRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LegislatorDataset:
    """Every legislator record plus the time it was fetched (epoch millis)."""
    data: List[dict]
    fetched_at: int
    by_id: Dict[str, dict] = field(default_factory=dict, compare=False, repr=False)
    
    @classmethod
    def build(cls, data: List[dict], fetched_at: int) -> "LegislatorDataset":
        by_id = {}
        for legislator in data:
            bioguide_id = (legislator.get("id") or {}).get("bioguide")
            if bioguide_id:
                by_id[bioguide_id] = legislator
        return cls(data=data, fetched_at=fetched_at, by_id=by_id)


class LegislatorDatasetCache:
    """
    Time-based cache of the congress-legislators datasets.
    
    Concurrent first fetches are not de-duplicated; a cold cache hit by two
    callers at once simply fetches twice.
    """
    
    def __init__(self, clock: Clock = now_millis, max_age_millis: Optional[int] = None):
        self.clock = clock
        self.max_age_millis = (
            settings.legislator_cache_millis if max_age_millis is None else max_age_millis
        )
        self.dataset: Optional[LegislatorDataset] = None
    
    def is_fresh(self) -> bool:
        if self.dataset is None or self.dataset.fetched_at == 0:
            return False
        return self.clock() - self.dataset.fetched_at <= self.max_age_millis
    
    def invalidate(self) -> None:
        self.dataset = None
    
    async def _fetch_yaml(self, transport, url: str) -> List[dict]:
        body = await transport.fetch(url)
        try:
            data = yaml.safe_load(body)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML from {url}: {e}")
            raise UpstreamUnavailable("unitedstates", f"invalid YAML from {url}") from e
        if not isinstance(data, list):
            raise UpstreamUnavailable("unitedstates", f"unexpected payload from {url}")
        return data
    
    async def get(self, transport) -> LegislatorDataset:
        """Return the cached dataset, refetching it when missing or stale."""
        if self.is_fresh():
            return self.dataset
        
        last = self.dataset.fetched_at if self.dataset else 0
        logger.info(f"Fetching congress-legislators datasets (last update: {last})")
        
        current = await self._fetch_yaml(transport, LEGISLATORS_CURRENT_URL)
        historical = await self._fetch_yaml(transport, LEGISLATORS_HISTORICAL_URL)
        
        self.dataset = LegislatorDataset.build(current + historical, self.clock())
        logger.info(
            f"Loaded {len(current)} current and {len(historical)} historical legislators"
        )
        return self.dataset
    
    async def fetch_member(self, transport, member_id: str) -> dict:
        """
        Look up one legislator record by bioguide id.
        
        Raises:
            UpstreamUnavailable: if the datasets cannot be fetched or do not
                contain the member
        """
        dataset = await self.get(transport)
        legislator = dataset.by_id.get(member_id)
        if legislator is None:
            raise UpstreamUnavailable("unitedstates", f"member {member_id} doesn't exist")
        return legislator
    
    async def list_member_ids(self, transport) -> List[str]:
        """All bioguide ids in the datasets, plus members they are known to miss."""
        dataset = await self.get(transport)
        return list(dataset.by_id) + [m for m in EXTRA_MEMBER_IDS if m not in dataset.by_id]


def _build_role(term: dict) -> Optional[RoleRecord]:
    chamber = normalize_chamber(term.get("type"))
    if chamber is None:
        return None
    
    start = normalize_date(term.get("start"), DateType.START)
    end = normalize_date(term.get("end"), DateType.END)
    
    if term.get("party_affiliations"):
        parties = [
            PartyRecord(
                party=normalize_party_name(affiliation.get("party")),
                start_date=normalize_date(affiliation.get("start"), DateType.START),
                end_date=normalize_date(affiliation.get("end"), DateType.END),
            )
            for affiliation in term["party_affiliations"]
        ]
    else:
        parties = [PartyRecord(party=normalize_party_name(term.get("party")), start_date=start, end_date=end)]
    
    role = RoleRecord(
        congress_numbers=[],  # terms carry no congress numbers
        chamber=chamber,
        start_date=start,
        end_date=end,
        parties=parties,
        state=normalize_state(term.get("state")),
    )
    if chamber == Chamber.SENATE and term.get("class") is not None:
        role.senator_class = int(term["class"])
    elif chamber == Chamber.HOUSE and term.get("district") is not None:
        role.district = int(term["district"])
    return role


def normalize_unitedstates(raw: dict) -> MemberRecord:
    """Transform a congress-legislators record to a MemberRecord."""
    member_id = (raw.get("id") or {}).get("bioguide")
    if not member_id:
        raise ValueError("Missing bioguide id in legislator record")
    
    name = raw.get("name") or {}
    bio = raw.get("bio") or {}
    
    roles = []
    for term in raw.get("terms") or []:
        role = _build_role(term)
        if role is not None:
            roles.append(role)
    
    return MemberRecord(
        id=member_id,
        first_name=clean_text(name.get("first")),
        middle_name=clean_text(name.get("middle")),
        last_name=clean_text(name.get("last")),
        name_suffix=clean_text(name.get("suffix")),
        nickname=clean_text(name.get("nickname")),
        gender=normalize_gender(bio.get("gender")),
        birthday=clean_text(bio.get("birthday")),
        congress_roles=roles,
    )
