"""Exceptions raised by the member sync engine."""


class MemberSyncError(Exception):
    """Base class for member sync errors."""


class UpstreamUnavailable(MemberSyncError):
    """
    An upstream source could not provide data for a member.
    
    Covers network/HTTP failures, unparseable payloads and members the
    source does not know about. Counted as a source failure, never fatal
    to the sync cycle.
    """
    
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"{source} unavailable: {reason}")


class OverrideRejected(MemberSyncError):
    """An override payload does not belong to the member being synced."""
    
    def __init__(self, member_id: str, payload_id):
        self.member_id = member_id
        self.payload_id = payload_id
        super().__init__(
            f"Override payload for '{payload_id}' cannot be applied to member '{member_id}'"
        )
