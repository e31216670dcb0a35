#!/usr/bin/env python3
"""
watchhook - Main Entry Point

This is the thin orchestration layer that:
1. Separates tool arguments from the hook command line
2. Loads configuration and the cluster connection
3. Resolves the resource and runs the watch pipeline

All watch and dispatch logic is in the modules.
"""

import logging
import sys
from typing import List, Optional, Sequence, Tuple

import click
from dotenv import load_dotenv

from watchhook import __version__
from watchhook.config.provider import EnvConfigProvider, WatchHookSettings
from watchhook.errors import ConfigurationError, WatchHookError
from watchhook.logging_config import configure_logging
from watchhook.modules.dispatch import CommandInvoker, DispatchPipeline
from watchhook.modules.lifecycle import WatchHookRunner
from watchhook.modules.resource import (
    ClusterResourceAccessor,
    load_connection,
    parse_resource_identifier,
)
from watchhook.modules.watch import EventWatchSource, WatchTarget

logger = logging.getLogger(__name__)

COMMAND_SEPARATOR = "--"

EXAMPLE = """\b
Examples:
  watchhook pod my-pod -- sh my-cmd.sh
  watchhook deployment.v1.apps -n web -- ./on-change.py
"""


def split_command_line(argv: Sequence[str]) -> Tuple[List[str], Optional[List[str]]]:
    """
    Split the raw argument vector at the first "--".

    Args:
        argv: Arguments without the program name

    Returns:
        (tool arguments, hook command line); the command is None when no "--" is present
    """
    argv = list(argv)
    if COMMAND_SEPARATOR not in argv:
        return argv, None
    idx = argv.index(COMMAND_SEPARATOR)
    return argv[:idx], argv[idx + 1:]


def build_target(positional: Sequence[str], namespace: str) -> WatchTarget:
    """Validate the positional arguments and build the watch target."""
    if len(positional) == 0:
        raise ConfigurationError("kind is required")
    if len(positional) > 2:
        raise ConfigurationError(
            f"expected <kind> [<name>], got {len(positional)} arguments: {' '.join(positional)}"
        )
    name = positional[1] if len(positional) == 2 else None
    return WatchTarget(
        resource_ref=parse_resource_identifier(positional[0]),
        namespace=namespace,
        name=name,
    )


def validate_command(command: Optional[Sequence[str]]) -> List[str]:
    if command is None:
        raise ConfigurationError("-- arg is required")
    if not command:
        raise ConfigurationError("<command> is required")
    return list(command)


def run_watchhook(
    positional: Sequence[str],
    command: Optional[Sequence[str]],
    settings: WatchHookSettings,
    kubeconfig: Optional[str] = None,
    context: Optional[str] = None,
    namespace: Optional[str] = None,
) -> None:
    """
    Run one watch until it ends.

    Raises:
        WatchHookError: any fatal condition, configuration errors first
    """
    command = validate_command(command)
    # Positional validation happens before any cluster access
    build_target(positional, namespace or "")

    connection = load_connection(kubeconfig=kubeconfig, context=context, namespace=namespace)
    target = build_target(positional, connection.namespace)

    accessor = ClusterResourceAccessor.from_api_client(connection.api_client)
    handle = accessor.resolve(target.resource_ref, target.namespace)
    logger.debug(f"Hook command: {' '.join(command)} <EVENT_TYPE>")

    pipeline = DispatchPipeline(
        CommandInvoker(command, timeout=settings.hook_timeout),
        max_queue_size=settings.queue_size,
    )
    runner = WatchHookRunner(EventWatchSource(handle, target), pipeline)
    runner.run()


@click.command(
    epilog=EXAMPLE,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.argument(
    "positional",
    nargs=-1,
    metavar="<kind>[.<version>][.<group>] [<name>] -- <command> [<command-arg>...]",
)
@click.option("--kubeconfig", type=click.Path(dir_okay=False), default=None,
              help="Path to the kubeconfig file (default: $KUBECONFIG or ~/.kube/config).")
@click.option("--context", envvar="WATCHHOOK_CONTEXT", default=None,
              help="Kubeconfig context to use.")
@click.option("-n", "--namespace", envvar="WATCHHOOK_NAMESPACE", default=None,
              help="Namespace to watch (default: from the context).")
@click.option("--queue-size", type=click.IntRange(min=1), default=None,
              help="Events buffered while a command runs [env: WATCHHOOK_QUEUE_SIZE, default: 100].")
@click.option("--hook-timeout", type=click.FloatRange(min=0, min_open=True), default=None,
              help="Kill a command running longer than this many seconds "
                   "[env: WATCHHOOK_HOOK_TIMEOUT, default: no limit].")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default=None, help="Log level [env: LOG_LEVEL, default: INFO].")
@click.version_option(__version__, prog_name="watchhook")
@click.pass_context
def cli(
    ctx: click.Context,
    positional: Tuple[str, ...],
    kubeconfig: Optional[str],
    context: Optional[str],
    namespace: Optional[str],
    queue_size: Optional[int],
    hook_timeout: Optional[float],
    log_level: Optional[str],
):
    """Watch objects and call a command on every event.

    The event object is written to the command's standard input as YAML and
    the event type (ADDED, MODIFIED or DELETED) is appended as the last
    argument.
    """
    try:
        settings = EnvConfigProvider().get_settings().override(
            queue_size=queue_size,
            hook_timeout=hook_timeout,
            log_level=log_level.upper() if log_level else None,
        )
        configure_logging(settings.log_level)
        run_watchhook(
            positional,
            ctx.obj,
            settings,
            kubeconfig=kubeconfig,
            context=context,
            namespace=namespace,
        )
    except WatchHookError as e:
        raise click.ClickException(str(e)) from e


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point."""
    load_dotenv()
    tool_args, command = split_command_line(sys.argv[1:] if argv is None else argv)
    cli.main(args=tool_args, prog_name="watchhook", obj=command)


if __name__ == "__main__":
    main()
