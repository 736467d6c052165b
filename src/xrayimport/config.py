"""Configuration via environment variables."""

import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


# Deployment: Xray server (Jira DC, basic auth) or Xray Cloud (token auth)
XRAY_SERVER = _env_flag("XRAY_SERVER")
XRAY_BASE_URL = os.environ.get("XRAY_BASE_URL", "")

# Username/password on server, client id/secret on cloud
XRAY_USERNAME = os.environ.get("XRAY_USERNAME", "")
XRAY_PASSWORD = os.environ.get("XRAY_PASSWORD", "")

# Import context
PROJECT_KEY = os.environ.get("XRAY_PROJECT_KEY", "")
TEST_FORMAT = os.environ.get("XRAY_TEST_FORMAT", "xray")
TEST_EXEC_KEY = os.environ.get("XRAY_TEST_EXEC_KEY", "")
TEST_PLAN_KEY = os.environ.get("XRAY_TEST_PLAN_KEY", "")
TEST_ENVIRONMENTS = os.environ.get("XRAY_TEST_ENVIRONMENTS", "")
REVISION = os.environ.get("XRAY_REVISION", "")
FIX_VERSION = os.environ.get("XRAY_FIX_VERSION", "")

# Transport policy
PROTOCOL = "https"
CLOUD_HOST = "xray.cloud.xpand-it.com"
REQUEST_TIMEOUT = float(os.environ.get("XRAY_TIMEOUT", "30"))
# Ingestion on the raw import endpoint can be slow
IMPORT_TIMEOUT = float(os.environ.get("XRAY_IMPORT_TIMEOUT", "60"))
RETRIES = int(os.environ.get("XRAY_RETRIES", "2"))
HTTP2 = _env_flag("XRAY_HTTP2", "true")
