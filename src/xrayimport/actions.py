"""GitHub Actions workflow commands: diagnostics, secret masking and outputs."""

import os
import uuid

import click


def escape_data(value: str) -> str:
    """Escape a message so the runner reads it as a single command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def issue_command(command: str, message: str = "") -> None:
    """Write ``::command::message`` to stdout for the runner to pick up."""
    click.echo(f"::{command}::{escape_data(message)}")


def debug(message: str) -> None:
    issue_command("debug", message)


def warning(message: str) -> None:
    issue_command("warning", message)


def error(message: str) -> None:
    issue_command("error", message)


def set_secret(value: str) -> None:
    """Register a value the runner must redact from all further output."""
    if value:
        issue_command("add-mask", value)


def set_output(name: str, value: str) -> None:
    """Set a step output. Does nothing outside a runner."""
    output_file = os.environ.get("GITHUB_OUTPUT")
    if not output_file:
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
