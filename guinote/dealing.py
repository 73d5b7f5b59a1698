"""Seating rotation and card distribution.

Seats are numbered 0-3 and play proceeds counter-clockwise, which in seat
numbers means stepping down: 0 -> 3 -> 2 -> 1 -> 0.

The draw pile is stored as a tuple whose *last* element is the top card.
The trump card shown at deal time sits at index 0, so it is drawn last.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .cards import Card
from .deck import check_deck

NUM_PLAYERS = 4
HAND_SIZE = 6
CARDS_PER_ROUND = 3
INITIAL_ROUNDS = 2


def next_player_index(index: int, total_players: int = NUM_PLAYERS) -> int:
    """Counter-clockwise successor of a seat."""
    return (index - 1) % total_players


def counter_clockwise_order(dealer_index: int) -> List[int]:
    """Seats in dealing order, starting with the player counter-clockwise of the dealer."""
    if not 0 <= dealer_index < NUM_PLAYERS:
        raise ValueError(f"Dealer index must be in 0..{NUM_PLAYERS - 1}, got {dealer_index}.")
    order = []
    current = next_player_index(dealer_index)
    for _ in range(NUM_PLAYERS):
        order.append(current)
        current = next_player_index(current)
    return order


def post_trick_order(winner_index: int) -> List[int]:
    """Draw order after a trick: the winner first, then counter-clockwise."""
    order = [winner_index]
    current = winner_index
    for _ in range(NUM_PLAYERS - 1):
        current = next_player_index(current)
        order.append(current)
    return order


def initial_deal_rounds(dealer_index: int, deck: Sequence[Card]) -> List[Tuple[int, List[Card]]]:
    """Return the 8 packets of the initial deal as ``(seat, cards)`` pairs.

    Cards are taken from the front of ``deck``: two rounds of three cards to
    each seat in counter-clockwise order.
    """
    order = counter_clockwise_order(dealer_index)
    rounds: List[Tuple[int, List[Card]]] = []
    position = 0
    for _ in range(INITIAL_ROUNDS):
        for seat in order:
            packet = list(deck[position : position + CARDS_PER_ROUND])
            position += len(packet)
            rounds.append((seat, packet))
    return rounds


@dataclass(frozen=True)
class InitialDeal:
    hands: Tuple[Tuple[Card, ...], ...]
    draw_pile: Tuple[Card, ...]
    trump_card: Card


def deal_initial(deck: Sequence[Card], dealer_index: int) -> InitialDeal:
    """Deal 24 cards, turn up the next one as trump and stack the rest on top of it."""
    cards = check_deck(deck)
    hands: List[List[Card]] = [[] for _ in range(NUM_PLAYERS)]
    for seat, packet in initial_deal_rounds(dealer_index, cards):
        hands[seat].extend(packet)

    dealt = NUM_PLAYERS * HAND_SIZE
    trump_card = cards[dealt]
    remainder = cards[dealt + 1 :]
    # remainder[0] must be the next card drawn, i.e. the top (last) of the pile.
    draw_pile = (trump_card,) + tuple(reversed(remainder))
    return InitialDeal(
        hands=tuple(tuple(hand) for hand in hands),
        draw_pile=draw_pile,
        trump_card=trump_card,
    )


def draw_after_trick(
    hands: Sequence[Sequence[Card]],
    draw_pile: Sequence[Card],
    winner_index: int,
    hand_size: int = HAND_SIZE,
) -> Tuple[Tuple[Tuple[Card, ...], ...], Tuple[Card, ...], Tuple[Tuple[int, Card], ...]]:
    """Refill hands from the pile, winner first.

    Returns the new hands, the remaining pile and the ``(seat, card)`` draws
    in the order they happened.
    """
    new_hands = [list(hand) for hand in hands]
    pile = list(draw_pile)
    draws: List[Tuple[int, Card]] = []
    for seat in post_trick_order(winner_index):
        while pile and len(new_hands[seat]) < hand_size:
            card = pile.pop()
            new_hands[seat].append(card)
            draws.append((seat, card))
    return tuple(tuple(hand) for hand in new_hands), tuple(pile), tuple(draws)
