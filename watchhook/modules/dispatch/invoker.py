"""
Hook command invocation.

Each event runs the configured command once, with the event type label as
the last argument and the event object, as YAML, on standard input.
"""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from watchhook.errors import CommandInvocationError, ConfigurationError, SerializationError
from watchhook.modules.dispatch.serializer import serialize_object
from watchhook.modules.watch.source import Event

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandInvocation:
    executable: str
    args: Tuple[str, ...]
    event_type_appended: str

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.args, self.event_type_appended]

    def __str__(self) -> str:
        return " ".join(self.argv)


def build_invocation(command: Sequence[str], event_type: str) -> CommandInvocation:
    """Combine the configured command line with an event type label."""
    if not command:
        raise ConfigurationError("<command> is required")
    return CommandInvocation(
        executable=command[0],
        args=tuple(command[1:]),
        event_type_appended=event_type,
    )


def _output_suffix(output: Optional[str]) -> str:
    output = (output or "").rstrip("\n")
    return f" ({output})" if output else ""


class CommandInvoker:
    """Runs the hook command for one event and waits for it to exit."""

    def __init__(self, command: Sequence[str], timeout: Optional[float] = None):
        """
        Initialize invoker.

        Args:
            command: Executable followed by its static arguments
            timeout: Kill the command after this many seconds (None = wait forever)
        """
        if not command:
            raise ConfigurationError("<command> is required")
        self.command = list(command)
        self.timeout = timeout

    def invoke(self, event: Event) -> None:
        """
        Run the command for an event.

        Raises:
            CommandInvocationError: serialization failure, launch failure,
                timeout, or non-zero exit
        """
        try:
            document = serialize_object(event.payload)
        except SerializationError as e:
            raise CommandInvocationError(f"failed to get event string: {e}") from e

        invocation = build_invocation(self.command, event.type.value)
        logger.info(f"Calling {invocation.executable} for {event.type.value} {event.object_name}")

        try:
            # communicate() feeds stdin while reading output, and closes stdin afterwards.
            # Output the locale cannot decode is replaced, never fatal.
            process = subprocess.run(
                invocation.argv,
                input=document,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            output = e.output.decode(errors="replace") if isinstance(e.output, bytes) else e.output
            raise CommandInvocationError(
                f"failed calling command: timed out after {self.timeout}s{_output_suffix(output)}"
            ) from e
        except OSError as e:
            raise CommandInvocationError(f"failed calling command: {e}") from e

        if process.returncode != 0:
            raise CommandInvocationError(
                f"failed calling command: exit status {process.returncode}"
                f"{_output_suffix(process.stdout)}"
            )

        if process.stdout:
            logger.debug(f"Command output: {process.stdout.rstrip()}")
