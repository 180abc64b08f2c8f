"""Error taxonomy shared by the game services and the HTTP layer.

Every failure a caller can see is a ``GameError`` carrying a
machine-readable ``kind`` and an HTTP-equivalent ``status``.
"""

import math


class GameError(Exception):
    kind = 'GameError'
    status = 400

    def __init__(self, message=None, **extra):
        super().__init__(message or self.kind)
        self.message = message or self.kind
        self.extra = extra

    def to_dict(self):
        payload = {'error': self.message, 'kind': self.kind}
        payload.update(self.extra)
        return payload


class InvalidRequest(GameError):
    kind = 'InvalidRequest'


class InvalidSession(GameError):
    """Unknown, completed or retired session for the attempted operation."""
    kind = 'InvalidSession'


class SessionNotFound(InvalidSession):
    status = 404

    def __init__(self, session_id):
        super().__init__(f'Game session {session_id} not found')
        self.session_id = session_id


class InvalidMove(GameError):
    kind = 'InvalidMove'


class RateLimited(GameError):
    kind = 'RateLimited'
    status = 429

    def __init__(self, retry_after_ms: int):
        super().__init__('Move submitted too soon', retry_after_ms=retry_after_ms)
        self.retry_after_ms = retry_after_ms

    @property
    def retry_after_sec(self) -> int:
        return max(1, math.ceil(self.retry_after_ms / 1000.0))


class ImplausibleTiming(GameError):
    kind = 'ImplausibleTiming'

    def __init__(self, elapsed_ms: int, minimum_ms: int):
        super().__init__('Suspicious game time', elapsed_ms=elapsed_ms, minimum_ms=minimum_ms)
        self.elapsed_ms = elapsed_ms
        self.minimum_ms = minimum_ms


class IncompleteGame(GameError):
    kind = 'IncompleteGame'


class StorageUnavailable(GameError):
    kind = 'StorageUnavailable'
    status = 500

    def __init__(self, message='Storage temporarily unavailable'):
        super().__init__(message)
