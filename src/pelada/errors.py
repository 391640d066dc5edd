"""Error taxonomy shared by the balancing and voting layers."""

from __future__ import annotations


class PeladaError(Exception):
    """Base class for every error raised by the engine."""


class ValidationError(PeladaError):
    """A precondition was violated.

    ``check`` names the failed constraint (``assignment``, ``same_team``,
    ``self_vote``, ``duplicate``, ``ratings``, ``locked``, ``membership``,
    ``roster``) and ``field`` the offending input when there is one.
    """

    def __init__(self, message: str, *, check: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.check = check
        self.field = field

    def to_dict(self) -> dict[str, str | None]:
        return {"message": self.message, "check": self.check, "field": self.field}


class CapacityError(PeladaError):
    """Roster would exceed the goalkeeper/field caps."""

    def __init__(self, message: str, *, limit: int, slot: str):
        super().__init__(message)
        self.message = message
        self.limit = limit
        self.slot = slot


class NotFoundError(PeladaError):
    """Referenced record does not exist."""

    def __init__(self, message: str, *, kind: str, key: str):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.key = key


class StoreError(PeladaError):
    """Opaque persistence failure; not retried by the engine."""


class DuplicateVoteError(StoreError):
    """Unique (match, voter, target) constraint rejected a write."""

    def __init__(self, match_id: str, voter_id: str, target_id: str):
        super().__init__(
            f"Vote already recorded for match={match_id!r} voter={voter_id!r} target={target_id!r}"
        )
        self.match_id = match_id
        self.voter_id = voter_id
        self.target_id = target_id
