"""Plausibility checks applied when a game is declared finished.

These are heuristics: they raise the cost of trivial cheating (scripted
or instant solves) but prove nothing about a result.
"""

from flask import current_app

from matchpairs.errors import ImplausibleTiming, InvalidRequest


def min_completion_ms() -> int:
    return int(current_app.config.get('MIN_COMPLETION_MS', 5000))


def check_elapsed(elapsed_ms: int) -> int:
    """Reject completions faster than a human could manage."""
    minimum = min_completion_ms()
    if elapsed_ms < minimum:
        current_app.logger.warning(
            f"[anticheat] implausible elapsed={elapsed_ms}ms minimum={minimum}ms"
        )
        raise ImplausibleTiming(elapsed_ms, minimum)
    return elapsed_ms


def check_claimed_moves(claimed_moves: int, pair_count: int) -> int:
    """A claimed move count can never be below one move per pair."""
    if claimed_moves < pair_count:
        current_app.logger.warning(
            f"[anticheat] implausible moves={claimed_moves} pairs={pair_count}"
        )
        raise InvalidRequest(
            f'Claimed move count {claimed_moves} is below the {pair_count} pairs in the deck'
        )
    return claimed_moves
