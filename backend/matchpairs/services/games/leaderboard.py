"""Leaderboard ranking: record completed games and list them fastest first."""

import math
from typing import Any, Dict, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from matchpairs import db
from matchpairs.errors import InvalidRequest, InvalidSession
from matchpairs.models import GameSession, LeaderboardEntry
from . import anticheat, clock, store
from .store import storage_guard

RANK_ORDER = (LeaderboardEntry.elapsed_ms, LeaderboardEntry.submitted_at_ms, LeaderboardEntry.id)


def clean_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidRequest('Name is required')
    name = name.strip()
    limit = int(current_app.config.get('NAME_MAX_LENGTH', 32))
    if len(name) > limit:
        raise InvalidRequest(f'Name must be at most {limit} characters')
    return name


def clean_country(country) -> str:
    default = current_app.config.get('DEFAULT_COUNTRY', '🌎')
    if not isinstance(country, str) or not country.strip():
        return default
    country = country.strip()
    # Anything longer than a short code is not a country code
    if len(country) > 8:
        return default
    return country.upper() if country.isascii() else country


def submit(session_id: str, name, country=None, now: Optional[int] = None) -> LeaderboardEntry:
    """Record the result of a completed session and retire it.

    Elapsed time and move count come from the server-side session record,
    never from the client.
    """
    name = clean_name(name)
    country = clean_country(country)
    now = clock.now_ms() if now is None else now

    def _retire(record: GameSession) -> LeaderboardEntry:
        if record.retired:
            raise InvalidSession('Score already submitted for this game session')
        if not record.completed:
            raise InvalidSession('Game session is not completed')
        elapsed = anticheat.check_elapsed(record.elapsed_ms)
        entry = LeaderboardEntry(
            session_id=record.id,
            name=name,
            elapsed_ms=elapsed,
            move_count=record.move_count,
            country=country,
            submitted_at_ms=now,
        )
        db.session.add(entry)
        db.session.flush()
        # Ranked before commit so a failure here leaves nothing recorded
        entry.rank = rank_of(entry)
        record.retired = True
        record.retired_at_ms = now
        return entry

    try:
        entry = store.update(session_id, _retire)
    except IntegrityError:
        # Unique session_id: a concurrent submit for the same session won
        db.session.rollback()
        raise InvalidSession('Score already submitted for this game session')
    current_app.logger.info(
        f"[score] session={session_id} entry={entry.id} time={entry.elapsed_ms}ms moves={entry.move_count}"
    )
    return entry


def rank_of(entry: LeaderboardEntry) -> int:
    """1-based position of ``entry`` in the full ranking."""
    with storage_guard('rank'):
        ahead = LeaderboardEntry.query.filter(
            db.or_(
                LeaderboardEntry.elapsed_ms < entry.elapsed_ms,
                db.and_(
                    LeaderboardEntry.elapsed_ms == entry.elapsed_ms,
                    db.or_(
                        LeaderboardEntry.submitted_at_ms < entry.submitted_at_ms,
                        db.and_(
                            LeaderboardEntry.submitted_at_ms == entry.submitted_at_ms,
                            LeaderboardEntry.id < entry.id,
                        ),
                    ),
                ),
            )
        ).count()
    return ahead + 1


def _page_size(page_size) -> int:
    default = int(current_app.config.get('LEADERBOARD_PAGE_SIZE', 10))
    maximum = int(current_app.config.get('LEADERBOARD_MAX_PAGE_SIZE', 100))
    if page_size is None:
        return default
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        raise InvalidRequest('page_size must be a positive integer')
    return min(page_size, maximum)


def list_page(page=1, page_size=None, as_of: Optional[int] = None) -> Dict[str, Any]:
    """One page of the ranking, fastest first, ties by earliest submission.

    ``as_of`` pins the listing to entries that existed when the first page
    was read (the returned ``as_of``), so concatenated pages neither repeat
    nor skip rows when scores arrive in between. Without it, consistency
    across requests is best effort.
    """
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise InvalidRequest('page must be a positive integer')
    page_size = _page_size(page_size)
    if as_of is not None and (isinstance(as_of, bool) or not isinstance(as_of, int) or as_of < 0):
        raise InvalidRequest('as_of must be a non-negative integer')

    with storage_guard('list'):
        if as_of is None:
            as_of = db.session.query(db.func.coalesce(db.func.max(LeaderboardEntry.id), 0)).scalar()
        query = LeaderboardEntry.query.filter(LeaderboardEntry.id <= as_of).order_by(*RANK_ORDER)
        total = query.count()
        rows = query.offset((page - 1) * page_size).limit(page_size).all()

    first_rank = (page - 1) * page_size + 1
    return {
        'entries': [row.to_dict(rank=first_rank + i) for i, row in enumerate(rows)],
        'page': page,
        'page_size': page_size,
        'total': total,
        'total_pages': max(1, math.ceil(total / page_size)),
        'as_of': as_of,
    }
