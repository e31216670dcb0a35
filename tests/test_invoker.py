"""
Tests for hook command invocation, using the current interpreter as the hook.
"""

import sys

import pytest
import yaml

from watchhook.errors import CommandInvocationError, ConfigurationError
from watchhook.modules.dispatch.invoker import CommandInvoker, build_invocation
from watchhook.modules.watch.source import Event

from conftest import raw_event


def _event(event_type="ADDED", name="settings", **data):
    return Event.from_raw(raw_event(event_type, name, **data))


class TestBuildInvocation:
    """Test command line construction."""

    def test_event_type_appended(self):
        invocation = build_invocation(["sh", "hook.sh", "--verbose"], "MODIFIED")
        assert invocation.executable == "sh"
        assert invocation.args == ("hook.sh", "--verbose")
        assert invocation.argv == ["sh", "hook.sh", "--verbose", "MODIFIED"]

    def test_command_without_arguments(self):
        assert build_invocation(["./hook"], "DELETED").argv == ["./hook", "DELETED"]

    def test_empty_command(self):
        with pytest.raises(ConfigurationError, match="<command> is required"):
            build_invocation([], "ADDED")


class TestCommandInvoker:
    """Test running the hook command."""

    def test_stdin_and_arguments(self, hook_command):
        """Test the command gets the YAML object on stdin and the type last."""
        invoker = CommandInvoker(hook_command.command())

        invoker.invoke(_event("MODIFIED", "settings", color="blue"))

        [record] = hook_command.records()
        assert record["type"] == "MODIFIED"
        assert record["argv"][-1] == "MODIFIED"
        document = yaml.safe_load(record["stdin"])
        assert document["metadata"]["name"] == "settings"
        assert document["data"] == {"color": "blue"}

    def test_non_zero_exit_includes_output(self, hook_command):
        invoker = CommandInvoker(hook_command.command(exit_code=3))

        with pytest.raises(CommandInvocationError) as exc_info:
            invoker.invoke(_event("ADDED"))

        message = str(exc_info.value)
        assert "exit status 3" in message
        assert "(hook failed for ADDED)" in message

    def test_stderr_is_captured(self):
        invoker = CommandInvoker(
            [sys.executable, "-c", "import sys; sys.stderr.write('bad input\\n'); sys.exit(1)"]
        )
        with pytest.raises(CommandInvocationError, match=r"\(bad input\)"):
            invoker.invoke(_event())

    def test_no_output_no_parentheses(self):
        invoker = CommandInvoker([sys.executable, "-c", "import sys; sys.exit(2)"])
        with pytest.raises(CommandInvocationError) as exc_info:
            invoker.invoke(_event())
        assert str(exc_info.value) == "failed calling command: exit status 2"

    def test_missing_executable(self, tmp_path):
        invoker = CommandInvoker([str(tmp_path / "does-not-exist")])
        with pytest.raises(CommandInvocationError, match="failed calling command"):
            invoker.invoke(_event())

    def test_command_ignoring_stdin(self):
        """Test a hook that never reads its input still succeeds."""
        CommandInvoker([sys.executable, "-c", "pass"]).invoke(_event())

    def test_undecodable_output_on_success(self):
        """Test a hook printing invalid UTF-8 and exiting 0 is still a success."""
        invoker = CommandInvoker(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'caf\\xe9\\n')"]
        )
        invoker.invoke(_event())

    def test_undecodable_output_on_failure(self):
        invoker = CommandInvoker(
            [sys.executable, "-c", "import sys; sys.stdout.buffer.write(b'caf\\xe9\\n'); sys.exit(4)"]
        )
        with pytest.raises(CommandInvocationError) as exc_info:
            invoker.invoke(_event())
        assert "exit status 4 (caf" in str(exc_info.value)

    def test_timeout_kills_command(self):
        invoker = CommandInvoker([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)
        with pytest.raises(CommandInvocationError, match="timed out after 0.5s"):
            invoker.invoke(_event())

    def test_serialization_failure(self, hook_command):
        invoker = CommandInvoker(hook_command.command())
        event = Event(type=_event().type, payload={"metadata": {"name": "x"}, "bad": object()})

        with pytest.raises(CommandInvocationError, match="failed to get event string"):
            invoker.invoke(event)
        assert hook_command.records() == []

    def test_requires_command(self):
        with pytest.raises(ConfigurationError):
            CommandInvoker([])
