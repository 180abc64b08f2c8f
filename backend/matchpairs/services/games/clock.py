import time


def now_ms() -> int:
    """Server wall clock in epoch milliseconds."""
    return int(time.time() * 1000)
