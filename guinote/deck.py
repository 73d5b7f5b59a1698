"""Deck creation utilities for Guiñote."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence

from .cards import Card, Rank, Suit

DECK_SIZE = 40


def build_deck() -> List[Card]:
    """Return the ordered 40-card Spanish deck (no eights or nines)."""
    return [Card(suit, rank) for suit in Suit for rank in Rank]


def shuffle_deck(rng: Optional[Random] = None, deck: Optional[Sequence[Card]] = None) -> List[Card]:
    cards = list(deck) if deck is not None else build_deck()
    if rng is None:
        rng = Random()
    rng.shuffle(cards)
    return cards


def check_deck(deck: Sequence[Card]) -> List[Card]:
    """Return the deck as a list after checking it is a complete 40-card deck."""
    cards = list(deck)
    if len(cards) != DECK_SIZE:
        raise ValueError(f"Deck must contain exactly {DECK_SIZE} cards, got {len(cards)}.")
    if len(set(cards)) != DECK_SIZE:
        raise ValueError("Deck contains duplicate cards.")
    return cards
