"""
Retry policies applied to failed registry interactions.
"""

import threading


class RetryPolicy:
    """
    Decides how long to pause before the controller falls back to re-registration
    """

    def wait(self, cancelled: threading.Event) -> bool:
        """
        Block before the next attempt

        Args:
            cancelled: Cancellation token of the running lifecycle

        Returns:
            True to retry, False when cancellation was requested meanwhile
        """
        raise NotImplementedError


class FixedIntervalRetry(RetryPolicy):
    """
    Constant delay between attempts, unbounded attempt count
    """

    def __init__(self, interval: float = 10.0):
        if interval < 0:
            raise ValueError("retry interval must not be negative")
        self.interval = interval

    def wait(self, cancelled: threading.Event) -> bool:
        return not cancelled.wait(self.interval)

    def __repr__(self):
        return f"FixedIntervalRetry(interval={self.interval})"
