"""
Graceful deregistration on process termination.
"""

import logging
import signal
import threading
import time
from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from .lifecycle import LifecycleController

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownState(Enum):
    RUNNING = "running"
    STOPPING = "stopping"
    TERMINATED = "terminated"


class ShutdownCoordinator:
    """
    Stops the heartbeat, deregisters, and waits out a grace period

    The coordinator never exits the process itself; an optional exit hook
    supplied by the embedding application runs once TERMINATED is reached.

    A signal handler only marks the coordinator STOPPING and retires the
    controller. The blocking part of the sequence runs on a separate thread,
    so it never re-enters an HTTP call the interrupted thread was making.

    Registration requests are drained before DOWN is sent. If the heartbeat
    thread does not finish within the join timeout, DOWN is sent anyway and
    only that thread's liveness PUT can still be in flight.
    """

    def __init__(self, controller: LifecycleController, grace_period: Optional[float] = None,
                 exit_hook: Optional[Callable[[], None]] = None,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize shutdown coordinator

        Args:
            controller: Lifecycle controller to deregister
            grace_period: Seconds to wait after DOWN is sent, taken from the controller config when omitted
            exit_hook: Called after the grace period on the thread that ran the shutdown
            sleep: Blocking wait used for the grace period
        """
        self.controller = controller
        self.grace_period = controller.config.grace_period if grace_period is None else grace_period
        self.exit_hook = exit_hook
        self._sleep = sleep
        self._state = ShutdownState.RUNNING
        # reentrant: a signal may land while the lock is held on the same thread
        self._lock = threading.RLock()
        self._terminated = threading.Event()
        self._previous_handlers: Dict[int, object] = {}

    @property
    def state(self) -> ShutdownState:
        return self._state

    def install(self, signals: Iterable[int] = DEFAULT_SIGNALS):
        """
        Route termination signals to the shutdown sequence. Must be called from the main thread.
        """
        for sig in signals:
            self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)

    def uninstall(self):
        """
        Restore the signal handlers replaced by install()
        """
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

    def _handle_signal(self, signum, frame):
        logger.info("Received %s, stopping Eureka agent...", signal.Signals(signum).name)
        if not self._begin():
            return
        threading.Thread(target=self._complete, name="eureka-shutdown").start()

    def shutdown(self) -> bool:
        """
        Run the stop -> deregister -> grace period sequence on the calling thread

        Returns:
            True when this call performed the shutdown, False if it was already under way
        """
        if not self._begin():
            return False
        self._complete()
        return True

    def _begin(self) -> bool:
        with self._lock:
            if self._state is not ShutdownState.RUNNING:
                return False
            self._state = ShutdownState.STOPPING
        self.controller.retire()
        return True

    def _complete(self):
        if not self.controller.stop_heartbeat():
            logger.warning("Deregistering while a heartbeat request is still in flight")
        self.controller.down()

        logger.info("Terminating in %s seconds", self.grace_period)
        self._sleep(self.grace_period)

        self._state = ShutdownState.TERMINATED
        self._terminated.set()
        if self.exit_hook is not None:
            self.exit_hook()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until TERMINATED

        Returns:
            True if terminated, False on timeout
        """
        return self._terminated.wait(timeout)
