"""Team balancing for a match roster."""

from .service import balance_teams, team_overall

__all__ = ["balance_teams", "team_overall"]
