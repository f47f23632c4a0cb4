"""Wall clock in epoch milliseconds, the unit the credential store persists."""

import time
from collections.abc import Callable

Clock = Callable[[], int]


def current_time_ms() -> int:
    return int(time.time() * 1000)
