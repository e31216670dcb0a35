"""
Shared pytest fixtures for watchhook tests.

This module provides common fixtures including:
- FakeHandle: stands in for a ResourceHandle, replaying canned watch events
- RecordingInvoker: records invocations instead of spawning processes
- hook_command: a real hook command (the current interpreter) that logs each call
"""

import json
import os
import sys
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from watchhook.errors import CommandInvocationError
from watchhook.modules.resource.accessor import WatchStream


def raw_event(event_type: str, name: str, namespace: str = "default", **data) -> Dict[str, Any]:
    """Build a watch event dict as the dynamic client yields it."""
    return {
        "type": event_type,
        "raw_object": {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": {"name": name, "namespace": namespace},
            "data": data,
        },
    }


# =============================================================================
# Watch Mocking Infrastructure
# =============================================================================

class FakeHandle:
    """
    Replays a scripted watch.

    Items in ``events`` are yielded in order; exceptions are raised and
    callables are called (for triggering things mid-stream). With
    ``block_at_end`` the stream stays open until the watcher is stopped,
    like a real watch with no more traffic.
    """

    def __init__(self, events: Optional[List[Any]] = None, block_at_end: bool = False):
        self.events = list(events or [])
        self.block_at_end = block_at_end
        self.watch_calls: List[Optional[str]] = []
        self.stopped = threading.Event()
        self.watcher = MagicMock()
        self.watcher.stop.side_effect = self.stopped.set

    def describe(self) -> str:
        return "configmaps (core/v1) in namespace default"

    def watch(self, name: Optional[str] = None) -> WatchStream:
        self.watch_calls.append(name)
        return WatchStream(events=self._iterate(), watcher=self.watcher)

    def _iterate(self):
        for item in self.events:
            if isinstance(item, BaseException):
                raise item
            if callable(item):
                item()
                continue
            yield item
        if self.block_at_end:
            self.stopped.wait(timeout=10)


@dataclass
class InvocationRecord:
    event_type: str
    name: str
    start: float
    end: float


class RecordingInvoker:
    """Invoker double that records calls and can fail on a chosen object."""

    def __init__(self, delay: float = 0.0, fail_on: Optional[str] = None,
                 on_invoke: Optional[Callable[[Any], None]] = None):
        self.delay = delay
        self.fail_on = fail_on
        self.on_invoke = on_invoke
        self.calls: List[InvocationRecord] = []
        self.active = 0
        self.max_active = 0
        self._lock = threading.Lock()

    @property
    def names(self) -> List[str]:
        return [c.name for c in self.calls]

    def invoke(self, event) -> None:
        with self._lock:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        start = time.monotonic()
        try:
            if self.on_invoke is not None:
                self.on_invoke(event)
            time.sleep(self.delay)
        finally:
            name = event.payload["metadata"]["name"]
            with self._lock:
                self.active -= 1
                self.calls.append(InvocationRecord(event.type.value, name, start, time.monotonic()))
        if name == self.fail_on:
            raise CommandInvocationError(f"failed calling command: exit status 1 (boom {name})")


@pytest.fixture
def recording_invoker():
    return RecordingInvoker()


# =============================================================================
# Real hook command
# =============================================================================

HOOK_SCRIPT = """
import json, sys, time
log_path, delay, exit_code, event_type = sys.argv[1], float(sys.argv[2]), int(sys.argv[3]), sys.argv[4]
start = time.time()
document = sys.stdin.read()
time.sleep(delay)
with open(log_path, "a") as f:
    print(json.dumps({"type": event_type, "argv": sys.argv[1:], "stdin": document,
                      "start": start, "end": time.time()}), file=f)
if exit_code:
    print("hook failed for " + event_type)
sys.exit(exit_code)
"""


class HookCommand:
    """Builds command lines for a hook that appends one JSON line per call."""

    def __init__(self, log_path):
        self.log_path = log_path

    def command(self, delay: float = 0.0, exit_code: int = 0) -> List[str]:
        return [sys.executable, "-c", HOOK_SCRIPT, str(self.log_path), str(delay), str(exit_code)]

    def records(self) -> List[Dict[str, Any]]:
        if not self.log_path.exists():
            return []
        return [json.loads(line) for line in self.log_path.read_text().splitlines() if line]


@pytest.fixture
def hook_command(tmp_path):
    return HookCommand(tmp_path / "hook.log")
