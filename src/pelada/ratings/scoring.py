"""Per-vote score on the 0-100 scale."""

from __future__ import annotations

from statistics import fmean
from typing import Sequence

from pelada.config import DEFAULT_RULES, MatchRules
from pelada.models import ATTRIBUTE_NAMES, GOALKEEPER_ATTRIBUTES, VoteRatings


def scored_attributes(is_goalkeeper: bool) -> Sequence[str]:
    return GOALKEEPER_ATTRIBUTES if is_goalkeeper else ATTRIBUTE_NAMES


def score_vote(ratings: VoteRatings, *, is_goalkeeper: bool, rules: MatchRules = DEFAULT_RULES) -> float:
    """Average the relevant ratings and map 1-5 stars onto 0-100.

    Goalkeepers are judged on passing and defense only; the other four
    ratings are kept on the vote but ignored here.
    """

    values = [getattr(ratings, name) for name in scored_attributes(is_goalkeeper)]
    return fmean(values) * rules.score_scale
