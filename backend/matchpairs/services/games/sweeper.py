import time
from typing import Optional

from flask import current_app

from matchpairs import socketio
from . import clock
from .store import purge_idle


def purge_expired_sessions(now: Optional[int] = None) -> int:
    """Delete sessions idle for longer than SESSION_IDLE_TTL_SEC.

    Expiry is advisory: a purged session simply becomes unknown to later
    requests.
    """
    now = clock.now_ms() if now is None else now
    ttl_ms = int(current_app.config.get('SESSION_IDLE_TTL_SEC', 1800)) * 1000
    purged = purge_idle(now - ttl_ms)
    if purged:
        current_app.logger.info(f"[sweep] purged={purged} ttl={ttl_ms // 1000}s")
    return purged


def start_sweeper(app) -> None:
    """Run purge_expired_sessions periodically in a background task.

    - No-ops in TESTING mode or when SESSION_SWEEP_INTERVAL_SEC is 0
    """
    try:
        interval = int(app.config.get('SESSION_SWEEP_INTERVAL_SEC', 0))
    except (TypeError, ValueError):
        interval = 0
    if interval <= 0 or app.config.get('TESTING'):
        return

    def _worker():
        while True:
            time.sleep(interval)
            with app.app_context():
                try:
                    purge_expired_sessions()
                except Exception:
                    app.logger.exception("[sweep] failed")

    app.logger.info(f"[sweep] started interval={interval}s")
    socketio.start_background_task(_worker)
