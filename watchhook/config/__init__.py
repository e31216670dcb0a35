"""
Config Module - Black Box Interface

Purpose: Runtime settings for the watch pipeline
Interface: EnvConfigProvider.get_settings(), WatchHookSettings.override()
Hidden: Environment parsing, range validation

Command line flags override whatever the environment provides.
"""

from .provider import DEFAULT_QUEUE_SIZE, EnvConfigProvider, WatchHookSettings

__all__ = ["DEFAULT_QUEUE_SIZE", "EnvConfigProvider", "WatchHookSettings"]
