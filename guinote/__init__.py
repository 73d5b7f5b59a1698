"""Rules engine for Guiñote, the four-player partnership trick-taking game."""

__all__ = [
    "cards",
    "deck",
    "dealing",
    "state",
    "trick",
    "mechanics",
    "scoring",
    "game",
    "session",
    "validator",
    "codec",
    "rules_schema",
    "service",
]
