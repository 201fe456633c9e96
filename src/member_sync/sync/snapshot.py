"""Point-in-time views of a member's projection."""
from typing import Dict, Optional

from member_sync.config.constants import calculate_congress
from member_sync.models.member import MemberRecord, RoleSnapshot


def congress_for_date(date_str: str) -> int:
    """
    Congress in session on a YYYY-MM-DD date.
    
    Examples:
        >>> congress_for_date("2021-01-02")
        116
        >>> congress_for_date("2021-01-03")
        117
    """
    parts = date_str.split("-")
    year = int(parts[0])
    month = int(parts[1]) if len(parts) > 1 and parts[1] else 12
    day = int(parts[2]) if len(parts) > 2 and parts[2] else 31
    return calculate_congress(year, month, day)


def role_snapshot(record: MemberRecord, date_str: str) -> Optional[RoleSnapshot]:
    """The role a member held on ``date_str`` and the party in effect then."""
    congress = congress_for_date(date_str)
    
    for role in record.congress_roles:
        if congress not in role.congress_numbers:
            continue
        if not (role.start_date <= date_str <= role.end_date):
            continue
        
        party = next(
            (p.party for p in role.parties if p.start_date <= date_str <= p.end_date),
            None
        )
        return RoleSnapshot(role=role, congress_number=congress, party=party)
    
    return None


def display_name(record: MemberRecord) -> Dict[str, str]:
    en = " ".join(p for p in (record.first_name, record.last_name) if p)
    zh = "·".join(p for p in (record.first_name_zh, record.last_name_zh) if p) or en
    return {"en": en, "zh": zh}
