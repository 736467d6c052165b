"""Data models for Xray imports."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class TestFormat(Enum):
    """Result file formats understood by the Xray import endpoints."""
    __test__ = False

    XRAY = "xray"
    CUCUMBER = "cucumber"
    BEHAVE = "behave"
    JUNIT = "junit"
    TESTNG = "testng"
    NUNIT = "nunit"
    XUNIT = "xunit"
    ROBOT = "robot"

    @classmethod
    def from_string(cls, value: str) -> "TestFormat":
        """Create format from string, case-insensitive."""
        normalized = value.lower().strip()
        for test_format in cls:
            if test_format.value == normalized:
                return test_format
        raise ValueError(f"Unknown test format: {value}")

    @property
    def is_json(self) -> bool:
        """Native, cucumber and behave results are JSON; the rest are XML."""
        return self in (TestFormat.XRAY, TestFormat.CUCUMBER, TestFormat.BEHAVE)

    @property
    def content_type(self) -> str:
        return "application/json" if self.is_json else "text/xml"

    @property
    def file_extension(self) -> str:
        return "json" if self.is_json else "xml"


@dataclass(frozen=True)
class DeploymentConfig:
    """Where Xray lives and how to authenticate against it.

    On Xray Cloud ``username`` and ``password`` hold the API client id and
    client secret.
    """
    xray_server: bool
    base_url: str
    username: str
    password: str


@dataclass
class ImportContext:
    """Jira metadata attached to every import.

    Empty strings and ``None`` are both treated as "not set".
    """
    project_key: str
    test_exec_key: Optional[str] = None
    test_plan_key: Optional[str] = None
    test_environments: Optional[str] = None
    revision: Optional[str] = None
    fix_version: Optional[str] = None
    test_format: TestFormat = TestFormat.XRAY
    test_execution_json: Optional[dict[str, Any]] = None


@dataclass
class ImportSummary:
    """Outcome of importing a batch of result files."""
    count: int = 0
    completed: int = 0
    failed: int = 0
    test_exec_key: str = ""
