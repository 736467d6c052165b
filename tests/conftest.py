"""Pytest fixtures for xray-import tests."""

import json

import httpx
import pytest

from xrayimport.models import DeploymentConfig, ImportContext, TestFormat


SAMPLE_JUNIT = b"""<?xml version="1.0" encoding="UTF-8"?>
<testsuite name="login" tests="2" failures="1">
  <testcase classname="tests.test_login" name="test_login_success" time="0.12"/>
  <testcase classname="tests.test_login" name="test_login_invalid" time="0.30">
    <failure message="AssertionError">expected 200 got 401</failure>
  </testcase>
</testsuite>
"""


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it answered."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def server_deployment():
    return DeploymentConfig(
        xray_server=True,
        base_url="jira.example.com",
        username="jenkins",
        password="s3cret",
    )


@pytest.fixture
def cloud_deployment():
    return DeploymentConfig(
        xray_server=False,
        base_url="",
        username="client-id",
        password="client-secret",
    )


@pytest.fixture
def import_context():
    return ImportContext(project_key="PROJ", test_format=TestFormat.JUNIT)


@pytest.fixture
def full_context():
    return ImportContext(
        project_key="PROJ",
        test_exec_key="PROJ-100",
        test_plan_key="PROJ-7",
        test_environments="chrome;linux",
        revision="a1b2c3d",
        fix_version="1.4.0",
        test_format=TestFormat.JUNIT,
    )


@pytest.fixture
def junit_file(tmp_path):
    path = tmp_path / "junit.xml"
    path.write_bytes(SAMPLE_JUNIT)
    return path


@pytest.fixture
def execution_json_file(tmp_path):
    path = tmp_path / "test-execution.json"
    path.write_text(json.dumps({
        "fields": {
            "summary": "Nightly regression",
            "issuetype": {"name": "Test Execution"},
        }
    }))
    return path


@pytest.fixture
def github_output(tmp_path, monkeypatch):
    """Point GITHUB_OUTPUT at a temp file."""
    path = tmp_path / "github_output"
    path.write_text("")
    monkeypatch.setenv("GITHUB_OUTPUT", str(path))
    return path


@pytest.fixture(autouse=True)
def no_github_output(monkeypatch):
    """Keep step outputs away from a real runner's output file."""
    monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
