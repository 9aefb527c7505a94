"""
Registration lifecycle controller.

Drives an instance through STARTING -> UP -> heartbeat loop -> DOWN against
the registry. Any failure after the initial registration is recovered by
registering again; the pause before each retry comes from the retry policy.
Only HTTP 200 and 204 count as success, so client errors such as 400 are
retried through re-registration like any other rejection.
"""

import logging
import threading
from typing import Callable, Optional

from .address import resolve_external_address
from .config import AgentConfig, InstanceIdentity
from .descriptor import InstanceStatus, build_descriptor
from .errors import RegistryRejected, SerializationError, TransportError
from .retry import FixedIntervalRetry, RetryPolicy
from .transport import RegistryTransport, is_success

logger = logging.getLogger(__name__)


class _ReregisterRequested(Exception):
    """Raised into an active register() loop instead of recursing into it"""


class LifecycleController:
    """
    Owns the instance registration and its heartbeat loop
    """

    def __init__(self, config: AgentConfig, transport: Optional[RegistryTransport] = None,
                 retry_policy: Optional[RetryPolicy] = None,
                 resolver: Callable[[], str] = resolve_external_address):
        """
        Initialize lifecycle controller

        Args:
            config: Agent configuration
            transport: Registry transport, built from config when omitted
            retry_policy: Pause between attempts, fixed interval from config when omitted
            resolver: External address lookup used for every descriptor
        """
        self.config = config
        self.identity = InstanceIdentity.from_config(config)
        self.transport = transport or RegistryTransport(
            config.registry_url,
            config.username,
            config.password,
            timeout=config.request_timeout,
        )
        self.retry_policy = retry_policy or FixedIntervalRetry(config.retry_interval)
        self.resolver = resolver

        self._status = InstanceStatus.STARTING
        self._cancelled = threading.Event()
        # plain attribute so retire() is safe to call from a signal handler
        self._retired = False
        # registry POSTs never overlap; a check of _abandoned() and the POST it guards are atomic
        self._send_lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None
        self._local = threading.local()

    @property
    def status(self) -> InstanceStatus:
        return self._status

    @property
    def heartbeat_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def retired(self) -> bool:
        return self._retired

    def retire(self):
        """
        Refuse any further registration for the rest of this process

        Takes no locks and performs no I/O. Only down() may still reach the
        registry afterwards.
        """
        self._retired = True

    def register(self):
        """
        Register the instance, retrying until the registry accepts it

        Blocks the caller until registration and the following up() succeed,
        or until stop_heartbeat() cancels the lifecycle. Does nothing once the
        controller is retired.
        """
        if getattr(self._local, "registering", False):
            raise _ReregisterRequested()
        if not self._on_heartbeat_thread() and not self._retired:
            # a fresh run issued by the caller
            self._cancelled.clear()

        self._local.registering = True
        try:
            self._register_loop()
        finally:
            self._local.registering = False

    def _register_loop(self):
        while True:
            logger.info("Registering %s to [%s] on port %s",
                        self.identity.app_name, self.config.registry_url, self.identity.port)
            try:
                if not self._post_descriptor(InstanceStatus.STARTING):
                    return
            except SerializationError as e:
                logger.error("Registration aborted: %s", e)
                return
            except (TransportError, RegistryRejected) as e:
                logger.error("Registration FAILED. %s", e)
                if not self._wait_before_retry():
                    return
                continue

            logger.info("Successfully registered to Eureka")
            try:
                self.up()
            except _ReregisterRequested:
                continue
            return

    def up(self):
        """
        Mark the instance UP and start the heartbeat loop

        On failure the instance is registered again from scratch.
        """
        try:
            if not self._post_descriptor(InstanceStatus.UP):
                return
        except SerializationError as e:
            logger.error("Sending UP status aborted: %s", e)
            return
        except (TransportError, RegistryRejected) as e:
            logger.error("Error sending UP status. %s", e)
            if self._wait_before_retry():
                self.register()
            return

        logger.info("Successfully updated status 'UP' to Eureka")
        self._start_heartbeat()

    def down(self):
        """
        Mark the instance DOWN, once, without retrying
        """
        try:
            self._post_descriptor(InstanceStatus.DOWN, guarded=False)
        except SerializationError as e:
            logger.error("Sending DOWN status aborted: %s", e)
            return
        except (TransportError, RegistryRejected) as e:
            logger.error("Error sending DOWN status. %s", e)
            return
        logger.info("Successfully updated status 'DOWN' to Eureka")

    def send_heartbeat(self):
        """
        Renew the registry lease; a missed heartbeat triggers re-registration
        """
        try:
            status_code = self.transport.send_heartbeat(self.identity.app_name, self.identity.instance_id)
            self._check_status(status_code, self.transport.instance_url(self.identity.app_name,
                                                                         self.identity.instance_id))
        except (TransportError, RegistryRejected) as e:
            logger.error("Heartbeat to Eureka [FAILED]. %s", e)
            if self._wait_before_retry():
                self.register()
            return

        logger.log(logging.INFO if self.config.verbose else logging.DEBUG, "Heartbeat to Eureka [OK]")

    def stop_heartbeat(self, timeout: Optional[float] = None) -> bool:
        """
        Cancel the heartbeat loop and wait for its thread to finish

        Once this returns, no STARTING or UP request is in flight and none
        will be sent until a fresh register().

        Args:
            timeout: Seconds to wait for the thread, derived from the request timeout when omitted

        Returns:
            True once no heartbeat thread is running
        """
        self._cancelled.set()
        with self._send_lock:
            # drains a registration POST already under way on another thread
            pass
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return True

        if timeout is None:
            # an in-flight heartbeat may be followed by one registration request
            timeout = self.config.request_timeout * 2 + 1
        thread.join(timeout)
        if thread.is_alive():
            logger.warning("Heartbeat thread still running after %.1f seconds", timeout)
            return False
        logger.info("Heartbeat stopped")
        return True

    def _start_heartbeat(self):
        if self.heartbeat_running:
            return
        if self._retired or self._cancelled.is_set():
            return
        self._thread = threading.Thread(
            target=self._heartbeat_loop,
            name=f"eureka-heartbeat-{self.identity.app_name}",
            daemon=True,
        )
        self._thread.start()
        logger.info("Heartbeat started every %s seconds for %s",
                    self.config.heartbeat_interval, self.identity.instance_id)

    def _heartbeat_loop(self):
        # the wait only starts once the previous tick has fully completed
        while not self._cancelled.wait(self.config.heartbeat_interval):
            try:
                self.send_heartbeat()
            except Exception as e:
                logger.exception("Unexpected error in heartbeat loop: %s", e)

    def _post_descriptor(self, status: InstanceStatus, guarded: bool = True) -> bool:
        with self._send_lock:
            if guarded and self._abandoned():
                return False
            self._status = status
            body = build_descriptor(self.identity, status, self.config, self.resolver).encode()
            status_code = self.transport.post_instance(self.identity.app_name, body)
            self._check_status(status_code, self.transport.app_url(self.identity.app_name))
            return True

    def _check_status(self, status_code: int, url: str):
        if not is_success(status_code):
            raise RegistryRejected(status_code, url=url)

    def _wait_before_retry(self) -> bool:
        if not self.retry_policy.wait(self._cancelled):
            logger.info("Shutdown requested, abandoning registration retries")
            return False
        return True

    def _abandoned(self) -> bool:
        if self._retired or self._cancelled.is_set():
            logger.info("Lifecycle cancelled, not contacting registry")
            return True
        return False

    def _on_heartbeat_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread
