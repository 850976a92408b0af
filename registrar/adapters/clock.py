"""System clock adapter - Implements Clock protocol."""

import time


class SystemClock:
    """Current unix time from the host clock."""

    def now(self) -> int:
        return int(time.time())
