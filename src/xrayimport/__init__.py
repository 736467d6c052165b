"""xray-import - import automated test results into Xray."""

__version__ = "1.0.0"

from .metadata import build_query_parameters, merge_execution_descriptor
from .models import DeploymentConfig, ImportContext, ImportSummary, TestFormat
from .xray_client import AuthState, XrayAuthError, XrayClient, XrayClientError

__all__ = [
    "__version__",
    "AuthState",
    "DeploymentConfig",
    "ImportContext",
    "ImportSummary",
    "TestFormat",
    "XrayAuthError",
    "XrayClient",
    "XrayClientError",
    "build_query_parameters",
    "merge_execution_descriptor",
]
