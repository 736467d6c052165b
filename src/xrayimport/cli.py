"""Command line interface."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Optional

import click

from . import actions, config
from .models import DeploymentConfig, ImportContext, ImportSummary, TestFormat
from .xray_client import XrayAuthError, XrayClient, XrayClientError


FORMATS = [test_format.value for test_format in TestFormat]


def load_execution_json(path: Optional[str]) -> Optional[dict[str, Any]]:
    """Read a test execution descriptor from a JSON file."""
    if not path:
        return None

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Test execution JSON must be an object: {path}")
    return data


async def import_files(
    client: XrayClient,
    paths: list[Path],
    combine: bool = False,
    fail_on_error: bool = False,
    summary: Optional[ImportSummary] = None,
) -> ImportSummary:
    """Import result files one after another.

    With ``combine`` the first execution key Xray returns is reused for the
    remaining files, unless a key was configured up front. Progress is
    recorded in ``summary`` as it happens, so a caller still has the counts
    when ``fail_on_error`` aborts the run.
    """
    if summary is None:
        summary = ImportSummary()
    summary.count = len(paths)
    summary.test_exec_key = client.context.test_exec_key or ""

    for path in paths:
        actions.debug(f"Importing {path}")
        try:
            key = await client.import_results(path.read_bytes())
        except (OSError, XrayClientError) as e:
            summary.failed += 1
            if fail_on_error:
                raise
            actions.warning(f"Failed to import {path}: {e}")
            continue

        summary.completed += 1
        if key:
            if combine and not client.context.test_exec_key:
                client.update_test_exec_key(key)
            summary.test_exec_key = key

    return summary


async def run(
    deployment: DeploymentConfig,
    context: ImportContext,
    paths: list[Path],
    combine: bool,
    fail_on_error: bool,
    summary: ImportSummary,
) -> ImportSummary:
    client = XrayClient(deployment, context)
    await client.auth()
    return await import_files(
        client, paths, combine=combine, fail_on_error=fail_on_error, summary=summary,
    )


def write_outputs(summary: ImportSummary) -> None:
    actions.set_output("count", str(summary.count))
    actions.set_output("completed", str(summary.completed))
    actions.set_output("failed", str(summary.failed))
    actions.set_output("testExecKey", summary.test_exec_key)


@click.command()
@click.argument("result_files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--server/--cloud",
    "xray_server",
    default=lambda: config.XRAY_SERVER,
    help="Xray server (Jira DC, basic auth) or Xray Cloud (token auth)",
)
@click.option("--base-url", default=lambda: config.XRAY_BASE_URL, help="Jira host for Xray server, e.g. jira.example.com")
@click.option("-u", "--username", default=lambda: config.XRAY_USERNAME, help="Username, or client id on cloud")
@click.option("-p", "--password", default=lambda: config.XRAY_PASSWORD, help="Password, or client secret on cloud")
@click.option("-k", "--project-key", default=lambda: config.PROJECT_KEY, help="Jira project key")
@click.option(
    "-f", "--test-format",
    type=click.Choice(FORMATS, case_sensitive=False),
    default=lambda: config.TEST_FORMAT,
    help="Result file format (default: xray)",
)
@click.option("--test-exec-key", default=lambda: config.TEST_EXEC_KEY, help="Existing test execution to import into")
@click.option("--test-plan-key", default=lambda: config.TEST_PLAN_KEY, help="Test plan to link the execution to")
@click.option("--test-environments", default=lambda: config.TEST_ENVIRONMENTS, help="Test environments, ';' separated")
@click.option("--revision", default=lambda: config.REVISION, help="Source code revision")
@click.option("--fix-version", default=lambda: config.FIX_VERSION, help="Fix version of the execution")
@click.option(
    "--test-exec-json",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="JSON file describing a new test execution (multipart import)",
)
@click.option(
    "--combine/--no-combine",
    default=False,
    help="Import all files into the test execution created by the first one",
)
@click.option(
    "--fail-on-error",
    is_flag=True,
    default=False,
    help="Stop at the first failed import instead of continuing",
)
def main(
    result_files: tuple[str, ...],
    xray_server: bool,
    base_url: str,
    username: str,
    password: str,
    project_key: str,
    test_format: str,
    test_exec_key: str,
    test_plan_key: str,
    test_environments: str,
    revision: str,
    fix_version: str,
    test_exec_json: Optional[str],
    combine: bool,
    fail_on_error: bool,
):
    """Import test results into Xray.

    RESULT_FILES: One or more result files, imported in the given order.
    """
    if not project_key:
        click.echo("Error: Missing option '--project-key'.", err=True)
        sys.exit(1)
    if xray_server and not base_url:
        click.echo("Error: '--base-url' is required with '--server'.", err=True)
        sys.exit(1)

    try:
        execution_json = load_execution_json(test_exec_json)
    except ValueError as e:
        actions.error(f"Could not read test execution JSON: {e}")
        sys.exit(1)

    deployment = DeploymentConfig(
        xray_server=xray_server,
        base_url=base_url,
        username=username,
        password=password,
    )
    context = ImportContext(
        project_key=project_key,
        test_exec_key=test_exec_key or None,
        test_plan_key=test_plan_key or None,
        test_environments=test_environments or None,
        revision=revision or None,
        fix_version=fix_version or None,
        test_format=TestFormat.from_string(test_format),
        test_execution_json=execution_json,
    )
    paths = [Path(p) for p in result_files]
    summary = ImportSummary(count=len(paths))

    try:
        asyncio.run(run(deployment, context, paths, combine, fail_on_error, summary))
    except XrayAuthError as e:
        actions.error(f"Authentication failed: {e}")
        sys.exit(1)
    except (OSError, XrayClientError) as e:
        write_outputs(summary)
        actions.error(f"Import failed: {e}")
        sys.exit(1)

    write_outputs(summary)
    click.echo(
        f"Imported {summary.completed}/{summary.count} files"
        f" ({summary.failed} failed) {summary.test_exec_key}".rstrip(),
        err=True,
    )


if __name__ == "__main__":
    main()
