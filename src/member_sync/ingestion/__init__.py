"""
Source adapters.

Each upstream has a fetch coroutine returning its raw record and a pure
normalizer mapping that record to a MemberRecord. ``normalize`` dispatches
on the source kind.
"""
from typing import Callable, Dict

from member_sync.ingestion.bioguide import fetch_bioguide, normalize_bioguide
from member_sync.ingestion.pictures import LocalPictureStore, ProfilePictureFetcher
from member_sync.ingestion.propublica import (
    fetch_propublica,
    list_congress_member_ids,
    normalize_propublica,
)
from member_sync.ingestion.transport import HttpTransport
from member_sync.ingestion.unitedstates import (
    LegislatorDataset,
    LegislatorDatasetCache,
    normalize_unitedstates,
)
from member_sync.ingestion.user_override import normalize_user_override
from member_sync.models.member import MemberRecord, SourceKind

NORMALIZERS: Dict[SourceKind, Callable[[dict], MemberRecord]] = {
    SourceKind.BIOGUIDE: normalize_bioguide,
    SourceKind.PROPUBLICA: normalize_propublica,
    SourceKind.UNITEDSTATES: normalize_unitedstates,
    SourceKind.USER_OVERRIDE: normalize_user_override,
}


def normalize(source: SourceKind, raw) -> MemberRecord:
    """Map one source's raw record to the common MemberRecord shape."""
    return NORMALIZERS[source](raw)


__all__ = [
    "HttpTransport",
    "LegislatorDataset",
    "LegislatorDatasetCache",
    "LocalPictureStore",
    "ProfilePictureFetcher",
    "NORMALIZERS",
    "normalize",
    "fetch_bioguide",
    "fetch_propublica",
    "list_congress_member_ids",
    "normalize_bioguide",
    "normalize_propublica",
    "normalize_unitedstates",
    "normalize_user_override",
]
