"""
Member data models.

A member of Congress is stored as one aggregate holding a snapshot per
upstream source plus the projection derived from those snapshots.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class Chamber(str, Enum):
    """Legislative chamber."""
    SENATE = "senate"
    HOUSE = "house"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class SourceKind(str, Enum):
    """Where a member snapshot came from."""
    BIOGUIDE = "bioguide"
    PROPUBLICA = "propublica"
    UNITEDSTATES = "unitedstates"
    USER_OVERRIDE = "user_override"

    @property
    def is_data_sync(self) -> bool:
        """True for upstream providers, False for the user override layer."""
        return self is not SourceKind.USER_OVERRIDE


class PartyRecord(BaseModel):
    """Party affiliation over part (or all) of a role."""
    party: str
    start_date: str
    end_date: str


class RoleRecord(BaseModel):
    """
    One legislative term or assignment.
    
    Dates are canonical YYYY-MM-DD strings (see normalize_date), so they
    compare correctly as plain strings.
    """
    congress_numbers: List[int] = Field(default_factory=list)
    chamber: Chamber
    start_date: str
    end_date: str
    parties: List[PartyRecord] = Field(default_factory=list)
    state: Optional[str] = None
    senator_class: Optional[int] = Field(None, description="Senate class (Senators only)")
    district: Optional[int] = Field(None, description="House district (Representatives only)")

    def __str__(self) -> str:
        congresses = ",".join(str(n) for n in self.congress_numbers) or "?"
        return f"{self.chamber.value} {self.state} [{congresses}] {self.start_date}..{self.end_date}"


# Merge order of the scalar (non-role) fields
SCALAR_FIELDS = (
    "first_name",
    "middle_name",
    "last_name",
    "name_suffix",
    "nickname",
    "first_name_zh",
    "last_name_zh",
    "gender",
    "birthday",
    "website",
    "office",
    "phone",
    "cspan_id",
    "twitter_id",
    "facebook_id",
    "youtube_id",
)


class MemberRecord(BaseModel):
    """
    A member of Congress as reported by one source.
    
    The same shape is used for the outward-facing projection.
    """
    
    # Unique identifier (bioguide id)
    id: str = Field(..., description="Bioguide ID")
    
    # Names
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    name_suffix: Optional[str] = None
    nickname: Optional[str] = None
    first_name_zh: Optional[str] = None
    last_name_zh: Optional[str] = None
    
    # Bio
    gender: Optional[Gender] = None
    birthday: Optional[str] = None
    
    # Contact
    website: Optional[str] = None
    office: Optional[str] = None
    phone: Optional[str] = None
    
    # Social handles
    cspan_id: Optional[str] = None
    twitter_id: Optional[str] = None
    facebook_id: Optional[str] = None
    youtube_id: Optional[str] = None
    
    congress_roles: List[RoleRecord] = Field(default_factory=list)
    
    # Sync bookkeeping (epoch millis, 0 = never synced)
    update_timestamp: int = 0
    fail_count: int = 0
    
    def __str__(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return f"{self.id} {name}".strip()


class FieldChange(BaseModel):
    """One effective change made by the field merge engine."""
    field: str
    kind: str  # "added", "removed" or "changed"
    old: Any = None
    new: Any = None


class FieldConflict(BaseModel):
    """Two sources disagree on a scalar value."""
    field: str
    source: SourceKind
    current: Any = None
    incoming: Any = None


_SNAPSHOT_ATTRS = {
    SourceKind.BIOGUIDE: "bioguide_member",
    SourceKind.PROPUBLICA: "propublica_member",
    SourceKind.UNITEDSTATES: "unitedstates_member",
    SourceKind.USER_OVERRIDE: "user_member",
}


class MemberAggregate(BaseModel):
    """
    The persisted member entity.
    
    Each snapshot is owned by its source's sync step. The projection is
    derived from the snapshots on every sync cycle and never edited directly.
    """
    id: str
    
    bioguide_member: Optional[MemberRecord] = None
    propublica_member: Optional[MemberRecord] = None
    unitedstates_member: Optional[MemberRecord] = None
    user_member: Optional[MemberRecord] = None
    
    projection: Optional[MemberRecord] = None
    
    profile_picture_uri: Optional[str] = None
    picture_fail_count: int = 0
    
    # field -> synced value that a user override disagrees with
    override_conflicts: Dict[str, Any] = Field(default_factory=dict)
    source_conflicts: List[FieldConflict] = Field(default_factory=list)
    
    def get_snapshot(self, kind: SourceKind) -> Optional[MemberRecord]:
        return getattr(self, _SNAPSHOT_ATTRS[kind])
    
    def set_snapshot(self, kind: SourceKind, record: MemberRecord) -> None:
        setattr(self, _SNAPSHOT_ATTRS[kind], record)


class RoleSnapshot(BaseModel):
    """A member's role as it stood on one date."""
    role: RoleRecord
    congress_number: int
    party: Optional[str] = None
