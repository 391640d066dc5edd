"""Match format rules: capacity caps, ideal formation and rating scale."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping

from pelada.models.player import Position


logger = logging.getLogger("uvicorn.error")
logger.setLevel(logging.INFO)


def _formation(attack: int, midfield: int, defense: int) -> Mapping[Position, int]:
    return MappingProxyType(
        {
            Position.ATTACK: attack,
            Position.MIDFIELD: midfield,
            Position.DEFENSE: defense,
        }
    )


@dataclass(frozen=True)
class MatchRules:
    name: str
    max_goalkeepers: int = 2
    max_field_players: int = 12
    max_players: int = 14
    ideal_formation: Mapping[Position, int] = field(
        default_factory=lambda: _formation(2, 1, 2), hash=False
    )
    min_rating: int = 1
    max_rating: int = 5
    neutral_rating: int = 3
    score_scale: int = 20

    @property
    def balanced_positions(self) -> tuple[Position, ...]:
        """Field positions in the order the balancer fills them."""

        return tuple(self.ideal_formation)


_MATCH_RULES: Dict[str, MatchRules] = {
    "default": MatchRules(name="default"),
}

DEFAULT_RULES = _MATCH_RULES["default"]


def iter_rules() -> Iterable[MatchRules]:
    """Return an iterator of all configured rule sets."""

    return _MATCH_RULES.values()


def get_rules(name: str) -> MatchRules:
    """Fetch a rule set by name, raising KeyError if missing."""

    key = name.strip().lower()
    if key not in _MATCH_RULES:
        raise KeyError(f"No match rules configured for name={name!r}")
    return _MATCH_RULES[key]


def rules_from_env(name: str = "PELADA_RULES") -> MatchRules:
    """Resolve the rule set named by an environment variable."""

    raw = os.getenv(name)
    if not raw:
        return DEFAULT_RULES
    try:
        return get_rules(raw)
    except KeyError:
        logger.warning("Unknown match rules %s=%s; using default", name, raw)
        return DEFAULT_RULES
