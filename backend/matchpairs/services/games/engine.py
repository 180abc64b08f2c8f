"""Session state machine: created -> in_progress -> completed -> retired.

The server holds the deck and observes every flip, so the client never
needs (or gets) symbols for cards it has not turned over.
"""

from typing import Any, Dict, Optional, Sequence

from flask import current_app

from matchpairs.errors import IncompleteGame, InvalidMove, InvalidRequest, InvalidSession, RateLimited
from matchpairs.models import GameSession
from . import anticheat, clock, store
from .deck import build_deck, deck_token


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def new_session(symbols: Optional[Sequence[str]] = None, rng=None, now: Optional[int] = None) -> Dict[str, Any]:
    """Deal a fresh deck and persist it. The response never carries symbols."""
    if symbols is None:
        symbols = current_app.config.get('CARD_SYMBOLS')
    cards = build_deck(symbols, rng=rng)
    record = store.create(cards, now=now)
    current_app.logger.info(f"[new-session] session={record.id} cards={len(cards)}")
    return {
        'session_id': record.id,
        'card_count': len(cards),
        'pairs': len(cards) // 2,
        'created_at': record.created_at_ms,
        'deck_token': deck_token(current_app.config['SECRET_KEY'], record.id, cards),
    }


def get_progress(session_id: str) -> Dict[str, Any]:
    return store.get_or_404(session_id).to_dict()


def _check_rate(record: GameSession, now: int) -> None:
    interval = int(current_app.config.get('MIN_MOVE_INTERVAL_MS', 500))
    if record.last_move_at_ms is None or interval <= 0:
        return
    since = now - record.last_move_at_ms
    if since < interval:
        raise RateLimited(interval - since)


def _log_tracked_completion(session_id: str, elapsed: int, moves: int) -> None:
    """Completion by observed moves; timing is checked when the score is submitted."""
    minimum = anticheat.min_completion_ms()
    if elapsed < minimum:
        current_app.logger.warning(
            f"[complete] session={session_id} tracked elapsed={elapsed}ms below minimum={minimum}ms, score will be refused"
        )
    else:
        current_app.logger.info(f"[complete] session={session_id} tracked elapsed={elapsed}ms moves={moves}")


def submit_move(session_id: str, position, now: Optional[int] = None) -> Dict[str, Any]:
    """Flip the card at ``position`` and resolve the pair when two are up.

    A non-matching pair stays recorded as revealed until the next accepted
    flip, which hides it before turning over the new card.
    """
    now = clock.now_ms() if now is None else now

    def _flip(record: GameSession) -> Dict[str, Any]:
        if record.retired or record.completed:
            raise InvalidSession('Invalid or completed game session')
        _check_rate(record, now)

        cards = record.cards
        if not _is_int(position) or not 0 <= position < len(cards):
            raise InvalidMove(f'Position must be an integer between 0 and {len(cards) - 1}')

        revealed = record.revealed_positions
        if len(revealed) >= 2:
            revealed = []
        matched = set(record.matched_positions)
        if position in matched:
            raise InvalidMove(f'Card {position} is already matched')
        if position in revealed:
            raise InvalidMove(f'Card {position} is already face up')

        revealed.append(position)
        shown = [{'position': p, 'symbol': cards[p]} for p in revealed]
        newly_matched = []

        if len(revealed) == 2:
            record.move_count += 1
            first, second = revealed
            if cards[first] == cards[second]:
                record.matched_count += 1
                matched.update(revealed)
                newly_matched = [first, second]
                revealed = []
                if record.matched_count == record.pair_count:
                    record.completed = True
                    record.completed_at_ms = now

        record.revealed_positions = revealed
        record.matched_positions = matched
        record.last_move_at_ms = now
        outcome = {
            'move_count': record.move_count,
            'matched_count': record.matched_count,
            'completed': record.completed,
            'revealed': shown,
            'matched': newly_matched,
            'pending': len(shown) == 1,
        }
        if record.completed:
            outcome['elapsed_ms'] = record.elapsed_ms
        return outcome

    result = store.update(session_id, _flip)
    elapsed = result.pop('elapsed_ms', None)
    current_app.logger.info(
        f"[move] session={session_id} position={position} moves={result['move_count']} "
        f"matched={result['matched_count']} completed={result['completed']}"
    )
    if elapsed is not None:
        _log_tracked_completion(session_id, elapsed, result['move_count'])
    return result


def finalize_completion(session_id: str, claimed_end_time, claimed_moves, now: Optional[int] = None) -> Dict[str, Any]:
    """Record a completion declared by the client.

    Idempotent: a session that is already completed reports the values
    recorded the first time. Sessions whose moves the server tracked can only
    be completed by those moves; client claims are trusted only for sessions
    that were never played through the move endpoint.
    """
    if not _is_int(claimed_end_time) or not _is_int(claimed_moves) or claimed_moves < 0:
        raise InvalidRequest('end_time and moves must be non-negative integers')
    now = clock.now_ms() if now is None else now

    def _finalize(record: GameSession) -> Dict[str, Any]:
        if record.retired:
            raise InvalidSession('Game session already submitted')
        if record.completed:
            return {'success': True, 'moves': record.move_count, 'time': record.elapsed_ms, 'replayed': True}
        if record.last_move_at_ms is not None:
            raise IncompleteGame(
                f'Game not finished: {record.matched_count} of {record.pair_count} pairs matched'
            )

        end_time = min(claimed_end_time, now)
        elapsed = anticheat.check_elapsed(end_time - record.created_at_ms)
        moves = anticheat.check_claimed_moves(claimed_moves, record.pair_count)

        record.completed = True
        record.completed_at_ms = end_time
        record.move_count = moves
        record.matched_count = record.pair_count
        record.matched_positions = range(record.card_count)
        record.revealed_positions = []
        record.client_reported = True
        return {'success': True, 'moves': moves, 'time': elapsed, 'replayed': False}

    result = store.update(session_id, _finalize)
    if result.pop('replayed'):
        current_app.logger.info(f"[complete] session={session_id} already completed, returning recorded result")
    else:
        current_app.logger.warning(
            f"[complete] session={session_id} client-reported completion accepted "
            f"moves={result['moves']} time={result['time']}ms (untracked)"
        )
    return result
