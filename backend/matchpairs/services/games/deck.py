"""Deck generation: every symbol twice, uniformly shuffled."""

import hashlib
import hmac
import json
import random
from typing import List, Optional, Sequence


def build_deck(symbols: Sequence[str], rng: Optional[random.Random] = None) -> List[str]:
    """Return ``2 * len(symbols)`` cards with each symbol exactly twice.

    ``random.shuffle`` is a Fisher-Yates shuffle, so every ordering of the
    positions is equally likely. Pass ``rng`` for reproducible decks.
    """
    symbols = list(symbols)
    if not symbols:
        raise ValueError('symbol set must not be empty')
    if len(set(symbols)) != len(symbols):
        raise ValueError('symbols must be distinct')
    cards = symbols + symbols
    (rng or random).shuffle(cards)
    return cards


def deck_token(secret: str, session_id: str, cards: Sequence[str]) -> str:
    """Commitment to a deck that reveals nothing about card positions."""
    message = f"{session_id}:{json.dumps(list(cards), ensure_ascii=False)}".encode('utf-8')
    return hmac.new(secret.encode('utf-8'), message, hashlib.sha256).hexdigest()
