"""Xray API client for importing test execution results."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import httpx

from . import actions
from .config import CLOUD_HOST, HTTP2, IMPORT_TIMEOUT, PROTOCOL, REQUEST_TIMEOUT, RETRIES
from .metadata import build_query_parameters, build_test_info, merge_execution_descriptor
from .models import DeploymentConfig, ImportContext, TestFormat


class XrayClientError(Exception):
    """Error communicating with the Xray API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class XrayAuthError(XrayClientError):
    """Credentials were rejected or the backend could not be reached."""
    pass


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class ConnectionSettings:
    """Base endpoint and default request options for one deployment."""
    base_url: str
    auth: Optional[httpx.BasicAuth] = None
    headers: dict[str, str] = field(default_factory=lambda: {"Accept": "application/json"})
    timeout: float = REQUEST_TIMEOUT
    retries: int = RETRIES
    http2: bool = HTTP2


def connection_settings(deployment: DeploymentConfig) -> ConnectionSettings:
    """Derive connection settings from the deployment. Performs no I/O."""
    if deployment.xray_server:
        host = deployment.base_url.rstrip("/")
        return ConnectionSettings(
            base_url=f"{PROTOCOL}://{host}/rest/raven/1.0",
            auth=httpx.BasicAuth(deployment.username, deployment.password),
        )
    # Cloud bearer token is only attached once auth() succeeds
    return ConnectionSettings(base_url=f"{PROTOCOL}://{CLOUD_HOST}/api/v1")


def import_endpoint(test_format: TestFormat, multipart: bool = False) -> str:
    """Endpoint path for a format. The native xray format has no sub-path."""
    endpoint = "/import/execution"
    if test_format != TestFormat.XRAY:
        endpoint += f"/{test_format.value}"
    if multipart:
        endpoint += "/multipart"
    return endpoint


def parse_import_response(response: httpx.Response) -> str:
    """Pull the test execution key out of an import response.

    The response shape differs between Xray versions and deployments, so a
    body without a usable ``key`` yields an empty string and a warning
    instead of an error.
    """
    try:
        key = response.json()["key"]
    except (ValueError, KeyError, TypeError):
        key = None

    if not isinstance(key, str) or not key:
        actions.warning(f"Response did not match expected format: {response.text}")
        return ""
    return key


def _extract_token(response: httpx.Response) -> str:
    """Xray Cloud answers /authenticate with a bare, JSON-quoted token."""
    try:
        token = response.json()
    except ValueError:
        token = response.text.strip()

    if not isinstance(token, str) or not token:
        raise XrayAuthError(
            "Xray Cloud returned a malformed authentication token",
            status_code=response.status_code,
        )
    return token


def _status_code(error: httpx.HTTPError) -> Optional[int]:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code
    return None


class XrayClient:
    """Client for the Xray import API (Server/DC and Cloud).

    Call ``auth()`` once before the first ``import_results()``. A single
    instance is meant for sequential use: ``update_test_exec_key()`` while an
    import is in flight does not affect that import, which keeps the query
    parameters it started with.
    """

    def __init__(
        self,
        deployment: DeploymentConfig,
        context: ImportContext,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.deployment = deployment
        self.context = context
        self.settings = connection_settings(deployment)
        self.state = AuthState.UNAUTHENTICATED
        self._headers = dict(self.settings.headers)
        self._transport = transport
        self.query_parameters = build_query_parameters(context)

    @property
    def is_authenticated(self) -> bool:
        return self.state == AuthState.AUTHENTICATED

    @property
    def headers(self) -> dict[str, str]:
        """Headers sent with every request, including the bearer token once set."""
        return dict(self._headers)

    def update_test_exec_key(self, test_exec_key: str) -> None:
        """Point later imports at a test execution and rebuild query parameters."""
        self.context.test_exec_key = test_exec_key
        self.query_parameters = build_query_parameters(self.context)

    def uses_multipart(self) -> bool:
        """Multipart creates a new execution from the descriptor.

        An existing test execution key always goes through the raw endpoint.
        """
        return self.context.test_execution_json is not None and not self.context.test_exec_key

    def _get_client(self) -> httpx.AsyncClient:
        """Create an HTTP client for a single request/response cycle."""
        transport = self._transport or httpx.AsyncHTTPTransport(
            retries=self.settings.retries,
            http2=self.settings.http2,
        )
        return httpx.AsyncClient(
            base_url=self.settings.base_url,
            auth=self.settings.auth,
            headers=self._headers,
            timeout=self.settings.timeout,
            transport=transport,
        )

    async def auth(self) -> None:
        """Validate server credentials, or exchange cloud credentials for a token.

        Raises:
            XrayAuthError: If the backend rejects the credentials or cannot
                be reached.
        """
        if self.deployment.xray_server:
            await self._auth_server()
        else:
            await self._auth_cloud()

    async def _auth_server(self) -> None:
        host = self.deployment.base_url.rstrip("/")
        url = f"{PROTOCOL}://{host}/api/2/myself"
        actions.debug(f"Validating Jira credentials: {url}")

        try:
            async with self._get_client() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise XrayAuthError(
                f"Failed to authenticate with Jira server: {e}",
                status_code=_status_code(e),
            ) from e

        self.state = AuthState.AUTHENTICATED

    async def _auth_cloud(self) -> None:
        self.state = AuthState.AUTHENTICATING
        try:
            async with self._get_client() as client:
                response = await client.post(
                    "/authenticate",
                    json={
                        "client_id": self.deployment.username,
                        "client_secret": self.deployment.password,
                    },
                )
                response.raise_for_status()
            token = _extract_token(response)
        except httpx.HTTPError as e:
            self.state = AuthState.UNAUTHENTICATED
            raise XrayAuthError(
                f"Failed to authenticate with Xray Cloud: {e}",
                status_code=_status_code(e),
            ) from e
        except XrayAuthError:
            self.state = AuthState.UNAUTHENTICATED
            raise

        actions.set_secret(token)
        self._headers = {**self._headers, "Authorization": f"Bearer {token}"}
        self.state = AuthState.AUTHENTICATED

    async def import_results(self, data: bytes) -> str:
        """Upload one result file.

        Returns:
            The test execution key, or an empty string when the response
            does not contain one.

        Raises:
            XrayClientError: If the request fails or Xray rejects it.
        """
        if self.uses_multipart():
            return await self._import_multipart(data)
        return await self._import_raw(data)

    async def _import_raw(self, data: bytes) -> str:
        test_format = self.context.test_format
        endpoint = import_endpoint(test_format)
        params = list(self.query_parameters)
        actions.debug(f"Using endpoint: {self.settings.base_url}{endpoint}")

        try:
            async with self._get_client() as client:
                response = await client.post(
                    endpoint,
                    params=params,
                    content=data,
                    headers={"Content-Type": test_format.content_type},
                    timeout=IMPORT_TIMEOUT,
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise XrayClientError(
                f"Failed to import results: {e}", status_code=_status_code(e)
            ) from e

        return parse_import_response(response)

    async def _import_multipart(self, data: bytes) -> str:
        test_format = self.context.test_format
        endpoint = import_endpoint(test_format, multipart=True)
        info = merge_execution_descriptor(self.context, self.context.test_execution_json)
        files = {
            "info": ("info.json", json.dumps(info), "application/json"),
            "results": (
                f"results.{test_format.file_extension}",
                data.decode("utf-8", errors="replace"),
                test_format.content_type,
            ),
            "testInfo": ("testInfo.json", json.dumps(build_test_info(self.context)), "application/json"),
        }
        actions.debug(f"Using multipart endpoint: {self.settings.base_url}{endpoint}")

        try:
            async with self._get_client() as client:
                response = await client.post(endpoint, files=files)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise XrayClientError(
                f"Failed to import results: {e}", status_code=_status_code(e)
            ) from e

        return parse_import_response(response)
