"""Peer vote collection and completion tracking."""

from .collector import VoteCollector
from .tracker import PlayerVotingStatus, VoteCompletionTracker

__all__ = ["PlayerVotingStatus", "VoteCollector", "VoteCompletionTracker"]
