"""
Human-curated override payloads.

Overrides only ever add or replace scalar values; they never carry
congress roles into the merge. Each field is validated on its own: a value
that does not fit its field is dropped with a warning and the rest of the
payload still applies.
"""
import logging
from typing import Any, Union

from pydantic import ValidationError

from member_sync.database.normalization import clean_text, normalize_gender
from member_sync.models.member import SCALAR_FIELDS, MemberRecord

logger = logging.getLogger(__name__)


def _prepare(field: str, value: Any) -> Any:
    if isinstance(value, str):
        value = clean_text(value)
    if field == "gender" and isinstance(value, str):
        # Accept the upstream "M"/"F" codes as well as the enum values
        return normalize_gender(value) or value.lower()
    return value


def normalize_user_override(payload: Union[dict, MemberRecord]) -> MemberRecord:
    """
    Build a MemberRecord from an override payload.

    Args:
        payload: Dict (or record) with ``id`` and any scalar fields

    Returns:
        Record with stripped text values, no roles, and without the fields
        whose values failed validation

    Raises:
        ValueError: if the payload has no id
    """
    if isinstance(payload, MemberRecord):
        data = payload.model_dump()
    else:
        data = dict(payload)

    member_id = data.get("id")
    if not member_id:
        raise ValueError("Missing id in override payload")

    values = {}
    for field in SCALAR_FIELDS:
        if field not in data:
            continue
        value = _prepare(field, data[field])
        try:
            MemberRecord.model_validate({"id": member_id, field: value})
        except ValidationError as e:
            logger.warning(
                f"[Member][user_override] {member_id} {field}: dropping invalid value "
                f"{data[field]!r} ({e.errors()[0]['msg']})"
            )
            continue
        values[field] = value

    return MemberRecord.model_validate({"id": member_id, **values})
