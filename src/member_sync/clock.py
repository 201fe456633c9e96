"""Epoch-millisecond clock used for sync timestamps and cache expiry."""
import time
from typing import Callable

Clock = Callable[[], int]


def now_millis() -> int:
    return int(time.time() * 1000)
