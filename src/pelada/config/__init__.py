"""Configuration helpers for match rules."""

from .rules import DEFAULT_RULES, MatchRules, get_rules, iter_rules, rules_from_env

__all__ = [
    "DEFAULT_RULES",
    "MatchRules",
    "get_rules",
    "iter_rules",
    "rules_from_env",
]
