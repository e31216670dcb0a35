"""
Dispatch pipeline.

Decouples watch reading from command execution. A bounded queue absorbs
events while a command runs; a single worker thread takes them out strictly
in arrival order and runs one invocation at a time.

State machine:
    RUNNING  -> DRAINING  close(): no more events accepted, queue drains
    DRAINING -> STOPPED   join(): worker has emptied the queue and exited
"""

import logging
from enum import Enum
from queue import Queue
from threading import Lock, Thread
from typing import Callable, Optional

from watchhook.config.provider import DEFAULT_QUEUE_SIZE
from watchhook.errors import CommandInvocationError, WatchHookError
from watchhook.modules.dispatch.invoker import CommandInvoker
from watchhook.modules.watch.source import Event

logger = logging.getLogger(__name__)

# Close marker placed on the queue behind the last accepted event
_CLOSED = object()


class PipelineState(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class DispatchPipeline:
    """Hand-off queue plus the worker that runs the hook command."""

    def __init__(
        self,
        invoker: CommandInvoker,
        max_queue_size: int = DEFAULT_QUEUE_SIZE,
        on_failure: Optional[Callable[[CommandInvocationError], None]] = None,
    ):
        """
        Initialize pipeline.

        Args:
            invoker: Runs the command for one event
            max_queue_size: Events buffered before submit() blocks
            on_failure: Called from the worker thread on the first failed invocation
        """
        self.invoker = invoker
        self.queue: Queue = Queue(maxsize=max_queue_size)
        self.on_failure = on_failure
        self.state = PipelineState.RUNNING
        self.error: Optional[CommandInvocationError] = None
        self.dispatched = 0

        # Serializes submit() against close() so nothing lands behind the close marker
        self._lock = Lock()
        self._closed = False
        self._worker = Thread(target=self._process_events, name="watchhook-worker", daemon=True)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        self._worker.start()

    def submit(self, event: Event) -> bool:
        """
        Hand an event to the worker, blocking while the queue is full.

        Returns:
            False if the pipeline is closed and the event was not accepted
        """
        with self._lock:
            if self._closed:
                logger.debug(f"Pipeline closed, not accepting {event.type.value} for {event.object_name}")
                return False
            self.queue.put(event)
            return True

    def close(self) -> None:
        """Stop accepting events. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self.state = PipelineState.DRAINING
            pending = self.queue.qsize()
            self.queue.put(_CLOSED)
        logger.debug(f"Pipeline draining ({pending} queued)")

    def join(self) -> None:
        """
        Wait for the worker to drain the queue and exit.

        Raises:
            CommandInvocationError: an invocation failed while running
        """
        if self._worker.is_alive():
            self._worker.join()
        self.state = PipelineState.STOPPED
        if self.error is not None:
            raise self.error

    def _fail(self, error: CommandInvocationError) -> None:
        self.error = error
        if self.on_failure is not None:
            self.on_failure(error)

    def _process_events(self) -> None:
        """
        Worker loop.

        After the first failure remaining events are discarded, not dispatched,
        so a producer blocked on a full queue can still finish.
        """
        logger.debug("Command worker started")

        while True:
            event = self.queue.get()
            try:
                if event is _CLOSED:
                    break
                if self.error is not None:
                    logger.debug(f"Discarding {event.type.value} for {event.object_name}")
                    continue
                try:
                    self.invoker.invoke(event)
                    self.dispatched += 1
                except CommandInvocationError as e:
                    self._fail(e)
                except WatchHookError as e:
                    self._fail(CommandInvocationError(str(e)))
                except Exception as e:
                    logger.exception(f"Unexpected error running command: {e}")
                    self._fail(CommandInvocationError(f"unexpected error: {e}"))
            finally:
                self.queue.task_done()

        logger.debug(f"Command worker stopped after {self.dispatched} invocation(s)")
