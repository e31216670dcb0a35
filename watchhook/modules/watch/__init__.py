"""
Watch Module - Black Box Interface

Purpose: Deliver resource change events in server order
Interface: EventWatchSource (iterable of Event), EventWatchSource.stop()
Hidden: Watch connection handling, raw event decoding, error event detection
"""

from .source import Event, EventType, EventWatchSource, WatchTarget

__all__ = ["Event", "EventType", "EventWatchSource", "WatchTarget"]
