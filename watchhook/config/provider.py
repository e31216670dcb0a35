"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, replace
from typing import Optional

from watchhook.errors import ConfigurationError

DEFAULT_QUEUE_SIZE = 100
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class WatchHookSettings:
    """Runtime settings that are not part of the watch target itself."""
    queue_size: int = DEFAULT_QUEUE_SIZE
    hook_timeout: Optional[float] = None
    log_level: str = DEFAULT_LOG_LEVEL

    def validate(self) -> "WatchHookSettings":
        """Check value ranges, returning self for chaining."""
        if self.queue_size < 1:
            raise ConfigurationError(f"queue size must be at least 1, got {self.queue_size}")
        if self.hook_timeout is not None and self.hook_timeout <= 0:
            raise ConfigurationError(f"hook timeout must be positive, got {self.hook_timeout}")
        return self

    def override(self, **values) -> "WatchHookSettings":
        """Return a copy with every non-None value applied."""
        changes = {key: value for key, value in values.items() if value is not None}
        return replace(self, **changes).validate()


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_settings(self) -> WatchHookSettings:
        """Get runtime settings from environment variables."""
        hook_timeout = os.getenv("WATCHHOOK_HOOK_TIMEOUT")

        try:
            settings = WatchHookSettings(
                queue_size=int(os.getenv("WATCHHOOK_QUEUE_SIZE", str(DEFAULT_QUEUE_SIZE))),
                hook_timeout=float(hook_timeout) if hook_timeout else None,
                log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
            )
        except ValueError as e:
            raise ConfigurationError(f"invalid environment setting: {e}") from e

        return settings.validate()
