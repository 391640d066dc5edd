"""Persisted team splits and the edits allowed on them."""

from .service import TeamAssignmentStore, is_populated, move_player

__all__ = ["TeamAssignmentStore", "is_populated", "move_player"]
