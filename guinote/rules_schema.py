"""Validation schema for Guiñote rules configuration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ScoringConfig(_Frozen):
    winning_score: int = Field(101, description="Points needed to win a partida.")
    minimum_card_points: int = Field(
        30, ge=0, description="Card points (melds excluded) a team needs to claim a partida."
    )
    last_trick_bonus: int = Field(10, ge=0, description="Bonus for the team taking the final trick.")

    @field_validator("winning_score")
    @classmethod
    def ensure_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Winning score must be positive.")
        return value


class MeldConfig(_Frozen):
    plain_points: int = Field(20, gt=0, description="Rey + Sota in a non-trump suit.")
    trump_points: int = Field(40, gt=0, description="Rey + Sota in the trump suit.")

    @model_validator(mode="after")
    def trump_meld_worth_more(self) -> "MeldConfig":
        if self.trump_points <= self.plain_points:
            raise ValueError("Trump meld must be worth more than a plain meld.")
        return self


class MatchConfig(_Frozen):
    partidas_per_coto: int = Field(3, ge=1, description="Partidas needed to take a coto.")
    cotos_per_match: int = Field(2, ge=1, description="Cotos needed to win the match.")


class PlayConfig(_Frozen):
    partner_exempts_trumping: bool = Field(
        True,
        description="In arrastre, a player void in the led suit need not trump while their partner is winning.",
    )
    vueltas_victory_requires_last_trick: bool = Field(
        True, description="During vueltas only the team that took the last trick may claim the partida."
    )
    allow_trump_seven_exchange: bool = Field(True, description="Enable exchanging the trump seven.")


class RuleSet(_Frozen):
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    melds: MeldConfig = Field(default_factory=MeldConfig)
    match: MatchConfig = Field(default_factory=MatchConfig)
    play: PlayConfig = Field(default_factory=PlayConfig)


DEFAULT_RULES = RuleSet()


def load_rules(path: Union[str, Path]) -> RuleSet:
    """Read a JSON rules file; missing sections fall back to defaults."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    return RuleSet.model_validate(payload)
