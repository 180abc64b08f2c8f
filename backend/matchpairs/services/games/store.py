"""Durable session store.

All reads and writes of ``GameSession`` rows go through here. ``update``
is a read-modify-write guarded by the row's ``version_id``: a concurrent
writer makes the commit fail with ``StaleDataError`` and the mutator is
re-run against the freshly loaded row, so no update is ever lost.
"""

from contextlib import contextmanager
import json
from typing import Any, Callable, Optional, Sequence

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from matchpairs import db
from matchpairs.errors import GameError, SessionNotFound, StorageUnavailable
from matchpairs.models import GameSession
from . import clock


@contextmanager
def storage_guard(action: str):
    """Roll back and translate driver failures into ``StorageUnavailable``."""
    try:
        yield
    except (StaleDataError, IntegrityError):
        db.session.rollback()
        raise
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception(f"[storage-error] action={action}")
        raise StorageUnavailable()


def create(cards: Sequence[str], now: Optional[int] = None) -> GameSession:
    now = clock.now_ms() if now is None else now
    record = GameSession(
        created_at_ms=now,
        deck=json.dumps(list(cards), ensure_ascii=False),
        revealed='[]',
        matched='[]',
        matched_count=0,
        move_count=0,
        completed=False,
        client_reported=False,
        retired=False,
    )
    with storage_guard('create'):
        db.session.add(record)
        db.session.commit()
    return record


def get(session_id: str) -> Optional[GameSession]:
    if not session_id:
        return None
    with storage_guard('get'):
        return db.session.get(GameSession, session_id, populate_existing=True)


def get_or_404(session_id: str) -> GameSession:
    record = get(session_id)
    if record is None:
        raise SessionNotFound(session_id)
    return record


def update(session_id: str, mutator: Callable[[GameSession], Any]) -> Any:
    """Apply ``mutator`` to the latest persisted session atomically.

    The mutator may raise ``GameError`` to abort without writing anything.
    Returns the mutator's return value, or the session when it returns None.
    """
    if not session_id:
        raise SessionNotFound(session_id)
    retries = int(current_app.config.get('STORE_UPDATE_RETRIES', 3))
    for attempt in range(retries + 1):
        with storage_guard('update'):
            record = db.session.get(
                GameSession, session_id, with_for_update=True, populate_existing=True
            )
            if record is None:
                db.session.rollback()
                raise SessionNotFound(session_id)
            try:
                result = mutator(record)
            except GameError:
                db.session.rollback()
                raise
            try:
                db.session.commit()
            except StaleDataError:
                db.session.rollback()
                current_app.logger.info(
                    f"[update-conflict] session={session_id} attempt={attempt + 1}"
                )
                continue
            return record if result is None else result
    raise StorageUnavailable('Too much contention on game session')


def delete(session_id: str) -> bool:
    with storage_guard('delete'):
        deleted = GameSession.query.filter_by(id=session_id).delete()
        db.session.commit()
    return bool(deleted)


def purge_idle(idle_before_ms: int) -> int:
    """Delete sessions idle since before ``idle_before_ms``; returns the count.

    The idle condition is part of the DELETE itself, so a session touched
    by a move while the sweep runs is never removed.

    Unfinished sessions are judged on their last accepted move (or creation
    when none); retired sessions on their retirement time. Completed but
    unsubmitted sessions use their completion time.
    """
    last_activity = db.func.coalesce(
        GameSession.retired_at_ms,
        GameSession.completed_at_ms,
        GameSession.last_move_at_ms,
        GameSession.created_at_ms,
    )
    with storage_guard('purge'):
        purged = GameSession.query.filter(last_activity < idle_before_ms).delete(synchronize_session=False)
        db.session.commit()
    return purged
