"""
Lifecycle coordination.

Runs the producer (watch -> queue) and the pipeline worker (queue -> command)
and decides when to stop. The main thread only waits: for a terminal watch
condition, a failed command, or SIGINT/SIGTERM. Whatever the cause, shutdown
follows the same path: stop accepting events, release the watch, drain the
queue, then report the first fatal error if there was one.
"""

import logging
import signal
import threading
from typing import Dict, Optional

from watchhook.errors import CommandInvocationError, WatchHookError, WatchStreamError
from watchhook.modules.dispatch.pipeline import DispatchPipeline, PipelineState
from watchhook.modules.watch.source import EventType, EventWatchSource

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# How often the main thread checks for a received signal while waiting
SIGNAL_POLL_INTERVAL = 0.1


class WatchHookRunner:
    """Drives one watch-to-command run from start to orderly shutdown."""

    def __init__(
        self,
        source: EventWatchSource,
        pipeline: DispatchPipeline,
        install_signal_handlers: bool = True,
    ):
        """
        Initialize runner.

        Args:
            source: Open-able watch for the target
            pipeline: Not yet started dispatch pipeline
            install_signal_handlers: Handle SIGINT/SIGTERM (main thread only)
        """
        self.source = source
        self.pipeline = pipeline
        self.pipeline.on_failure = self._on_command_failure
        self.single_object = source.target.single_object
        self.install_signal_handlers = install_signal_handlers

        self.reason: Optional[str] = None
        self.error: Optional[WatchHookError] = None
        self._done = threading.Event()
        self._signal_name: Optional[str] = None
        self._outcome_lock = threading.Lock()

    @property
    def state(self) -> PipelineState:
        return self.pipeline.state

    def request_stop(self, reason: str = "interrupted") -> None:
        """Begin a graceful shutdown. Queued events are still dispatched."""
        self._finish(reason)

    def _finish(self, reason: str, error: Optional[WatchHookError] = None) -> None:
        with self._outcome_lock:
            if self.reason is None:
                self.reason = reason
            # A failure always wins over an earlier graceful reason
            if error is not None and self.error is None:
                self.error = error
        self._done.set()

    def _on_command_failure(self, error: CommandInvocationError) -> None:
        self._finish(str(error), error)

    def _handle_signal(self, signum, frame) -> None:
        # Runs on the main thread between bytecodes, possibly inside
        # Event.wait(). It must not take locks; run() acts on the flag.
        self._signal_name = signal.Signals(signum).name

    def _wait_for_terminal_condition(self) -> None:
        while not self._done.wait(SIGNAL_POLL_INTERVAL):
            name = self._signal_name
            if name is not None:
                logger.info(f"Received {name}, shutting down")
                self.request_stop(f"interrupted by {name}")

    def _install_signal_handlers(self) -> Dict[int, object]:
        if not self.install_signal_handlers:
            return {}
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread, signal handlers not installed")
            return {}
        previous = {}
        for signum in SHUTDOWN_SIGNALS:
            previous[signum] = signal.signal(signum, self._handle_signal)
        return previous

    @staticmethod
    def _restore_signal_handlers(previous: Dict[int, object]) -> None:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    def _produce(self) -> None:
        """Producer thread: read the watch and feed the pipeline."""
        try:
            for event in self.source:
                if self._done.is_set():
                    break
                if not event.type.dispatchable:
                    raise WatchStreamError(f"unexpected event type: {event.type.value}")
                if not self.pipeline.submit(event):
                    break
                if event.type is EventType.DELETED:
                    logger.info(f"object deleted: {event.object_name}")
                    if self.single_object:
                        # The only object we were watching is gone
                        self._finish("object deleted")
                        return
            self._finish("watch stopped")
        except WatchHookError as e:
            self._finish(str(e), e)
        except Exception as e:
            logger.exception(f"Unexpected error reading watch: {e}")
            self._finish(str(e), WatchStreamError(f"unexpected error: {e}"))

    def _shutdown(self) -> None:
        logger.info(f"Shutting down: {self.reason}")
        self._done.set()
        self.source.stop()
        self.pipeline.close()
        try:
            self.pipeline.join()
        except CommandInvocationError as e:
            self._finish(str(e), e)

    def run(self) -> None:
        """
        Run until a terminal condition, then shut down in order.

        Raises:
            WatchHookError: the first fatal condition (watch or command failure)
        """
        previous = self._install_signal_handlers()
        producer = threading.Thread(target=self._produce, name="watchhook-producer", daemon=True)
        try:
            self.pipeline.start()
            producer.start()
            self._wait_for_terminal_condition()
        finally:
            try:
                self._shutdown()
            finally:
                self._restore_signal_handlers(previous)

        if self.error is not None:
            raise self.error
        logger.info(f"Stopped after {self.pipeline.dispatched} invocation(s)")
