"""Error taxonomy shared by every watchhook module."""


class WatchHookError(Exception):
    """Base class for all fatal watchhook conditions."""


class ConfigurationError(WatchHookError):
    """Invalid command line or connection configuration."""


class MappingError(WatchHookError):
    """Resource identifier does not resolve to a known API resource."""


class WatchEstablishError(WatchHookError):
    """The watch request itself failed."""


class WatchStreamError(WatchHookError):
    """The watch stream delivered an error or closed unexpectedly."""


class SerializationError(WatchHookError):
    """An event object could not be rendered as text."""


class CommandInvocationError(WatchHookError):
    """The hook command failed to start or exited non-zero."""


class WatchClosed(WatchStreamError):
    """The server closed the watch stream."""
