"""
watchhook - run a command for every change to a Kubernetes resource

Watches a resource kind (optionally one named object) and hands every
ADDED/MODIFIED/DELETED event to an external command, one at a time.

Architecture:
- Each module is self-contained with clear interfaces
- The watch and the command runner only meet at a bounded hand-off queue
- Errors propagate up to the command line, which reports them once

Modules:
- resource: identifier parsing, connection loading, REST mapping
- watch: the live event stream
- dispatch: hand-off queue, worker and command invocation
- lifecycle: startup, signals and orderly shutdown
"""

__version__ = "1.0.0"
