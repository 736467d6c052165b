"""Query parameters and execution metadata for Xray imports.

Both submission paths carry the same context fields: the raw endpoint as
query-string parameters, the multipart endpoint inside the ``xrayFields``
object of the execution descriptor.
"""

from typing import Any

from .models import ImportContext


# Optional context fields in the order Xray documents them
OPTIONAL_FIELDS = [
    ("testExecKey", "test_exec_key"),
    ("testPlanKey", "test_plan_key"),
    ("testEnvironments", "test_environments"),
    ("revision", "revision"),
    ("fixVersion", "fix_version"),
]


def present_fields(ctx: ImportContext) -> list[tuple[str, str]]:
    """Return (wire name, value) for each optional field that is set."""
    fields = []
    for wire_name, attribute in OPTIONAL_FIELDS:
        value = getattr(ctx, attribute)
        if value:
            fields.append((wire_name, value))
    return fields


def build_query_parameters(ctx: ImportContext) -> list[tuple[str, str]]:
    """Build query parameters for the raw import endpoint.

    ``projectKey`` always comes first. The list is built from scratch on
    every call so a changed context never leaves stale keys behind.
    """
    return [("projectKey", ctx.project_key)] + present_fields(ctx)


def _ensure_object(parent: dict[str, Any], key: str) -> dict[str, Any]:
    value = parent.get(key)
    if not isinstance(value, dict):
        value = {}
        parent[key] = value
    return value


def merge_execution_descriptor(ctx: ImportContext, descriptor: dict[str, Any]) -> dict[str, Any]:
    """Merge the import context into a test execution descriptor.

    The descriptor is updated in place and returned. ``fields.project.key``
    is always overwritten with the active project key. Missing nested
    objects are created. Applying the merge twice gives the same result.
    """
    fields = _ensure_object(descriptor, "fields")
    project = _ensure_object(fields, "project")
    project["key"] = ctx.project_key

    xray_fields = _ensure_object(descriptor, "xrayFields")
    for wire_name, value in present_fields(ctx):
        xray_fields[wire_name] = value

    return descriptor


def build_test_info(ctx: ImportContext) -> dict[str, Any]:
    """Minimal issue fields for tests created by a multipart import."""
    return {"fields": {"project": {"key": ctx.project_key}}}
