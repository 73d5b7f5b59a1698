"""Simple bot arena for Guiñote: four seats, one full match."""

from __future__ import annotations

import argparse
import logging
from typing import Collection, Dict, Iterable, List, Optional, Sequence

from guinote.game import is_last_trick
from guinote.rules_schema import DEFAULT_RULES, RuleSet, load_rules
from guinote.scoring import calculate_hand_points, match_winner
from guinote.session import GameSession
from guinote.state import Phase

from .base import BotStrategy
from .random_bot import RandomBot

logger = logging.getLogger(__name__)

BOT_REGISTRY: Dict[str, type[BotStrategy]] = {
    "first": BotStrategy,
    "random": RandomBot,
}

PLAY_PHASES = (Phase.PLAYING, Phase.ARRASTRE)


def _seat_bots(bots: Sequence[BotStrategy]) -> List[BotStrategy]:
    """Accept one bot per seat, or one per team (seats 0+2 and 1+3)."""
    if len(bots) == 4:
        return list(bots)
    if len(bots) == 2:
        return [bots[0], bots[1], bots[0], bots[1]]
    raise ValueError("Provide either 2 (per team) or 4 (per seat) bots.")


def _offer_melds(
    session: GameSession, seats: Sequence[BotStrategy], skip: Collection[str] = ()
) -> None:
    state = session.state
    winner = state.last_trick_winner
    if winner is None or not state.current_trick.is_empty():
        return
    partner = state.partner_of(winner)
    for player_id in (winner, partner):
        if player_id is None or player_id in skip:
            continue
        while session.state.phase is Phase.PLAYING:
            seat = session.state.player_index(player_id)
            assert seat is not None
            suit = seats[seat].choose_meld(session.state, player_id)
            if suit is None:
                break
            session.declare_meld(player_id, suit)


def _take_turn(session: GameSession, seats: Sequence[BotStrategy]) -> None:
    state = session.state
    player = state.current_player
    bot = seats[state.current_player_index]
    if bot.wants_exchange(state, player.id):
        session.exchange_trump_seven(player.id)
    card = bot.play_card(session.state, player.id)
    session.play_card(player.id, card)


def play_hand(session: GameSession, bots: Sequence[BotStrategy]) -> None:
    """Play the current hand from dealing until it reaches scoring or game over."""
    seats = _seat_bots(bots)
    if session.state.phase is Phase.DEALING:
        for seat, player in enumerate(session.state.players):
            seats[seat].on_hand_start(session.state, player.id)
        session.begin_play()

    while session.state.phase in PLAY_PHASES:
        _offer_melds(session, seats)
        if session.state.phase not in PLAY_PHASES:
            break
        _take_turn(session, seats)


def advance_bots(session: GameSession, bots: Sequence[BotStrategy], human_ids: Collection[str]) -> None:
    """Let bot seats act until a human is to move or play stops."""
    seats = _seat_bots(bots)
    while session.state.phase in PLAY_PHASES:
        _offer_melds(session, seats, skip=human_ids)
        state = session.state
        if state.phase not in PLAY_PHASES or state.current_player.id in human_ids:
            break
        _take_turn(session, seats)


def _hand_summary(session: GameSession) -> dict:
    state = session.state
    winner = state.partida_winner
    return {
        "is_vueltas": state.is_vueltas,
        "scores": [team.score for team in state.teams],
        "effective_scores": [state.effective_score(index) for index in range(len(state.teams))],
        "card_points": [calculate_hand_points(pile) for pile in state.team_trick_piles],
        "completed": is_last_trick(state),
        "partida_winner": state.teams[winner].id if winner is not None else None,
    }


def run_match(
    bots: Sequence[BotStrategy],
    *,
    seed: Optional[int] = None,
    rules: RuleSet = DEFAULT_RULES,
    max_hands: int = 200,
    validate_states: bool = False,
) -> dict:
    """Play hands until the match is decided (or ``max_hands`` is reached)."""
    session = GameSession(seed=seed, rules=rules, validate_states=validate_states)
    history = []
    for _ in range(max_hands):
        play_hand(session, bots)
        summary = _hand_summary(session)
        history.append(summary)
        logger.info(
            f"Hand {len(history)}: scores {summary['effective_scores']}, "
            f"winner {summary['partida_winner']}, match {session.state.match_score}"
        )
        if session.is_over:
            break
        session.next_hand()

    winner_index = match_winner(session.state.match_score, rules)
    return {
        "winner": session.state.teams[winner_index].id if winner_index is not None else None,
        "match_score": session.state.match_score,
        "hands": len(history),
        "history": history,
        "violations": list(session.violations),
        "session": session,
    }


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a Guiñote bot match.")
    parser.add_argument("--team-a", default="first", choices=BOT_REGISTRY.keys())
    parser.add_argument("--team-b", default="random", choices=BOT_REGISTRY.keys())
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--rules", default=None, help="Path to a JSON rules file.")
    parser.add_argument("--validate", action="store_true", help="Check invariants after every action.")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(None if argv is None else list(argv))

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    rules = load_rules(args.rules) if args.rules else DEFAULT_RULES
    team_a = BOT_REGISTRY[args.team_a]()
    team_b = BOT_REGISTRY[args.team_b]()
    results = run_match([team_a, team_b], seed=args.seed, rules=rules, validate_states=args.validate)

    print(f"Winner: {results['winner']} after {results['hands']} hands")
    print(f"Match score: {results['match_score']}")
    if results["violations"]:
        print(f"Invariant violations: {len(results['violations'])}")


if __name__ == "__main__":
    main()
