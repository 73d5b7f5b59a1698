"""Card-related data structures and helpers for Guiñote."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping, Optional, Set


class Suit(Enum):
    OROS = "oros"
    COPAS = "copas"
    ESPADAS = "espadas"
    BASTOS = "bastos"

    def __str__(self) -> str:
        return self.value


class Rank(Enum):
    AS = 1
    DOS = 2
    TRES = 3
    CUATRO = 4
    CINCO = 5
    SEIS = 6
    SIETE = 7
    SOTA = 10
    CABALLO = 11
    REY = 12

    def __str__(self) -> str:
        return self.name.lower()


# Card point values; a full deck is worth 120.
CARD_POINTS: dict[Rank, int] = {
    Rank.AS: 11,
    Rank.TRES: 10,
    Rank.REY: 4,
    Rank.SOTA: 3,
    Rank.CABALLO: 2,
    Rank.SIETE: 0,
    Rank.SEIS: 0,
    Rank.CINCO: 0,
    Rank.CUATRO: 0,
    Rank.DOS: 0,
}

# Rank order from lowest to highest for trick resolution. Sota outranks Caballo.
RANK_ORDER: list[Rank] = [
    Rank.DOS,
    Rank.CUATRO,
    Rank.CINCO,
    Rank.SEIS,
    Rank.SIETE,
    Rank.CABALLO,
    Rank.SOTA,
    Rank.REY,
    Rank.TRES,
    Rank.AS,
]

RANK_STRENGTH: dict[Rank, int] = {rank: index for index, rank in enumerate(RANK_ORDER)}

# Rey + Sota of one suit form a meld (cante).
MELD_RANKS = frozenset({Rank.REY, Rank.SOTA})


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    suit: Suit
    rank: Rank

    @property
    def id(self) -> str:
        return f"{self.suit.value}_{self.rank.value}"

    def point_value(self) -> int:
        return CARD_POINTS[self.rank]

    def __str__(self) -> str:
        return self.id


def card_strength(card: Card) -> int:
    """Return an integer strength used for ordering cards within a suit."""
    return RANK_STRENGTH[card.rank]


def card_points(card: Card) -> int:
    return CARD_POINTS[card.rank]


def has_meld(cards: Iterable[Card], suit: Suit) -> bool:
    """Return True if the iterable contains both Rey and Sota of the given suit."""
    seen: Set[Rank] = {card.rank for card in cards if card.suit is suit}
    return MELD_RANKS.issubset(seen)


def beats(candidate: Card, current: Card, led_suit: Suit, trump: Optional[Suit]) -> bool:
    """Return True if candidate wins over current within the trick context."""
    if candidate == current:
        return False

    candidate_trump = trump is not None and candidate.suit is trump
    current_trump = trump is not None and current.suit is trump

    if candidate_trump and not current_trump:
        return True
    if current_trump and not candidate_trump:
        return False

    if candidate.suit is current.suit:
        return card_strength(candidate) > card_strength(current)

    if candidate.suit is led_suit and current.suit is not led_suit:
        return True

    return False


def card_from_id(card_id: str) -> Card:
    """Parse an id of the form ``"<suit>_<rank>"`` back into a Card."""
    try:
        suit_name, rank_value = card_id.rsplit("_", 1)
        return Card(Suit(suit_name), Rank(int(rank_value)))
    except ValueError as exc:
        raise ValueError(f"Unknown card id: {card_id!r}") from exc


def serialize_card(card: Card) -> dict[str, object]:
    return {"id": card.id, "suit": card.suit.value, "rank": card.rank.value}


def deserialize_card(payload: Mapping[str, object]) -> Card:
    if "id" in payload and "suit" not in payload:
        return card_from_id(str(payload["id"]))
    return Card(Suit(str(payload["suit"])), Rank(int(payload["rank"])))  # type: ignore[arg-type]


def card_label(card: Card) -> str:
    return f"{card.rank.name.title()} de {card.suit.name.title()}"
