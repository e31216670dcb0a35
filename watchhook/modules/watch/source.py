"""
Event watch source.

Wraps one live watch connection and turns raw watch events into Event
objects, in the order the server sent them. The stream is not restartable:
once it ends, for whatever reason, it stays ended.
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Mapping, Optional

from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import DynamicApiError
from urllib3.exceptions import HTTPError

from watchhook.errors import WatchClosed, WatchEstablishError, WatchStreamError
from watchhook.modules.resource.accessor import ResourceHandle, WatchStream
from watchhook.modules.resource.identifier import ResourceRef

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"
    BOOKMARK = "BOOKMARK"

    @property
    def dispatchable(self) -> bool:
        """Whether events of this type are handed to the hook command."""
        return self in (EventType.ADDED, EventType.MODIFIED, EventType.DELETED)


@dataclass(frozen=True)
class WatchTarget:
    """What is being watched."""
    resource_ref: ResourceRef
    namespace: str
    name: Optional[str] = None

    @property
    def single_object(self) -> bool:
        return bool(self.name)


@dataclass(frozen=True)
class Event:
    """One watch notification. The payload is the object as the API returned it."""
    type: EventType
    payload: Mapping[str, Any]

    @property
    def object_name(self) -> str:
        metadata = self.payload.get("metadata") or {}
        name = metadata.get("name", "<unknown>")
        namespace = metadata.get("namespace")
        return f"{namespace}/{name}" if namespace else name

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Event":
        """
        Build an Event from a watch event dict.

        Raises:
            WatchStreamError: unknown event type
        """
        try:
            event_type = EventType(raw.get("type"))
        except ValueError:
            raise WatchStreamError(f"unexpected event type: {raw.get('type')}") from None

        payload = raw.get("raw_object")
        if payload is None:
            obj = raw.get("object")
            payload = obj.to_dict() if hasattr(obj, "to_dict") else obj
        return cls(type=event_type, payload=payload or {})


def _error_message(payload: Mapping[str, Any]) -> str:
    message = payload.get("message") or payload.get("reason") or "unknown error"
    code = payload.get("code")
    return f"error event received: {message} (code {code})" if code else f"error event received: {message}"


class EventWatchSource:
    """
    Iterable of Events from a single watch.

    Iteration ends quietly after stop(). Any other ending raises:
    WatchEstablishError if the watch never produced an event,
    WatchClosed if the server closed the stream, and
    WatchStreamError for error events or broken connections.
    """

    def __init__(self, handle: ResourceHandle, target: WatchTarget):
        self.handle = handle
        self.target = target
        self._stream: Optional[WatchStream] = None
        self._stopped = False
        self._lock = threading.Lock()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def _open(self) -> Optional[WatchStream]:
        with self._lock:
            if self._stopped:
                return None
            try:
                self._stream = self.handle.watch(self.target.name)
            except (ApiException, DynamicApiError, HTTPError) as e:
                raise WatchEstablishError(f"failed to establish watch: {e}") from e
            return self._stream

    def __iter__(self) -> Iterator[Event]:
        stream = self._open()
        if stream is None:
            return

        logger.info(f"Watching {self.handle.describe()}"
                    + (f", object {self.target.name}" if self.target.name else ""))

        received = 0
        try:
            for raw in stream.events:
                if self._stopped:
                    return
                event = Event.from_raw(raw)
                if event.type is EventType.ERROR:
                    raise WatchStreamError(_error_message(event.payload))
                received += 1
                logger.debug(f"Received {event.type.value} for {event.object_name}")
                yield event
        except (ApiException, DynamicApiError, HTTPError) as e:
            if self._stopped:
                return
            if received == 0:
                raise WatchEstablishError(f"watch failed before any event was received: {e}") from e
            raise WatchStreamError(f"watch failed: {e}") from e

        if not self._stopped:
            raise WatchClosed("watch closed")

    def stop(self) -> None:
        """Release the watch connection. Safe to call more than once, from any thread."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            stream = self._stream
        if stream is not None:
            logger.debug("Stopping watch")
            stream.stop()
