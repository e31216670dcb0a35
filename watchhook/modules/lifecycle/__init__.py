"""
Lifecycle Module - Black Box Interface

Purpose: Start the watch pipeline and stop it in order
Interface: WatchHookRunner.run(), WatchHookRunner.request_stop()
Hidden: Producer thread, signal handling, shutdown sequencing
"""

from .coordinator import WatchHookRunner

__all__ = ["WatchHookRunner"]
