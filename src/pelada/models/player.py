"""Canonical player models shared across balancing and rating layers."""

from __future__ import annotations

from enum import Enum
from typing import Any, Tuple

from pydantic import BaseModel, Field, model_validator
from pydantic.config import ConfigDict


class Position(str, Enum):
    ATTACK = "Attack"
    MIDFIELD = "Midfield"
    DEFENSE = "Defense"
    GOALKEEPER = "Goalkeeper"


FIELD_POSITIONS = (Position.ATTACK, Position.MIDFIELD, Position.DEFENSE)

ATTRIBUTE_NAMES = ("speed", "finishing", "passing", "dribbling", "defense", "physical")

# Attributes a goalkeeper is judged on.
GOALKEEPER_ATTRIBUTES = ("passing", "defense")

MAX_DECLARED_POSITIONS = 2


class SkillAttributes(BaseModel):
    """Long-term skill profile on the 0-5 scale."""

    speed: float = Field(default=0.0, ge=0.0, le=5.0)
    finishing: float = Field(default=0.0, ge=0.0, le=5.0)
    passing: float = Field(default=0.0, ge=0.0, le=5.0)
    dribbling: float = Field(default=0.0, ge=0.0, le=5.0)
    defense: float = Field(default=0.0, ge=0.0, le=5.0)
    physical: float = Field(default=0.0, ge=0.0, le=5.0)

    model_config = ConfigDict(frozen=True)


class Player(BaseModel):
    """Registered player with declared positions and current ratings."""

    player_id: str = Field(..., min_length=1)
    name: str
    is_goalkeeper: bool = False
    positions: Tuple[Position, ...] = ()
    attributes: SkillAttributes = Field(default_factory=SkillAttributes)
    overall: float = Field(default=0.0, ge=0.0, le=5.0)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _goalkeeper_position(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not data.get("is_goalkeeper"):
            return data
        declared = data.get("positions") or ()
        if any(pos != Position.GOALKEEPER.value for pos in declared):
            raise ValueError("goalkeepers cannot declare field positions")
        return {**data, "positions": (Position.GOALKEEPER,)}

    @model_validator(mode="after")
    def _check_positions(self) -> "Player":
        if self.is_goalkeeper:
            return self
        if Position.GOALKEEPER in self.positions:
            raise ValueError("only goalkeepers can declare the Goalkeeper position")
        if len(self.positions) > MAX_DECLARED_POSITIONS:
            raise ValueError(f"at most {MAX_DECLARED_POSITIONS} positions may be declared")
        if len(set(self.positions)) != len(self.positions):
            raise ValueError("positions must not repeat")
        return self

    @property
    def primary_position(self) -> Position | None:
        if not self.positions:
            return None
        return self.positions[0]

    @property
    def overall_display(self) -> int:
        return round(self.overall * 20)

    def plays(self, position: Position) -> bool:
        return position in self.positions
