import json

import pytest
from pydantic import ValidationError

from guinote.rules_schema import DEFAULT_RULES, MeldConfig, RuleSet, ScoringConfig, load_rules


def test_defaults():
    assert DEFAULT_RULES.scoring.winning_score == 101
    assert DEFAULT_RULES.scoring.minimum_card_points == 30
    assert DEFAULT_RULES.scoring.last_trick_bonus == 10
    assert (DEFAULT_RULES.melds.plain_points, DEFAULT_RULES.melds.trump_points) == (20, 40)
    assert DEFAULT_RULES.play.partner_exempts_trumping
    assert DEFAULT_RULES.play.vueltas_victory_requires_last_trick


def test_invalid_values_are_rejected():
    with pytest.raises(ValidationError):
        ScoringConfig(winning_score=0)
    with pytest.raises(ValidationError):
        MeldConfig(plain_points=40, trump_points=20)
    with pytest.raises(ValidationError):
        RuleSet.model_validate({"scoring": {"target": 120}})


def test_load_rules_merges_with_defaults(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"play": {"partner_exempts_trumping": False}}), encoding="utf-8")
    rules = load_rules(path)
    assert not rules.play.partner_exempts_trumping
    assert rules.scoring == DEFAULT_RULES.scoring


def test_rules_are_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_RULES.scoring.winning_score = 90
