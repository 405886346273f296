"""Centralized configuration for the scheduling agent.

Secret resolution order (per variable):
  1. Environment variable / ``.env`` file  (local dev)
  2. AWS SSM Parameter Store SecureString  (when ``AWS_EXECUTION_ENV`` is set)

The SSM paths follow the convention ``/scheduling-agent/<VARIABLE_NAME>``.
Only the backend API token is treated as a secret; everything else is plain
environment configuration with defaults.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# ── Feature flag: running on AWS? ────────────────────────────────────
_ON_AWS = bool(os.getenv("AWS_EXECUTION_ENV"))


# ── Secret resolution ────────────────────────────────────────────────

def _get_ssm_parameter(name: str) -> str | None:
    """Fetch a SecureString from SSM Parameter Store.

    Returns ``None`` if the parameter does not exist or boto3 is
    unavailable.  Errors are logged but never raised so that local-dev
    fallback still works.
    """
    try:
        import boto3  # noqa: PLC0415

        ssm = boto3.client("ssm")
        resp = ssm.get_parameter(Name=f"/scheduling-agent/{name}", WithDecryption=True)
        return resp["Parameter"]["Value"]
    except Exception:
        logger.debug("SSM lookup for %s failed (expected locally)", name)
        return None


def _optional_secret(name: str) -> str | None:
    """Return a secret from env-var or SSM, or ``None`` when unset."""
    value = os.getenv(name)
    if value and not value.startswith("your_"):
        return value

    if _ON_AWS:
        return _get_ssm_parameter(name)
    return None


def _choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    """Read an enum-like setting, failing loudly on typos."""
    value = os.getenv(name, default).strip().lower()
    if value not in choices:
        raise OSError(
            f"Invalid configuration: {name}={value!r}. "
            f"Expected one of: {', '.join(choices)}."
        )
    return value


# ── Scheduling backend ──────────────────────────────────────────────
SCHEDULING_BACKEND: str = _choice_env("SCHEDULING_BACKEND", "memory", ("memory", "http"))
SCHEDULING_API_BASE_URL: str = os.getenv(
    "SCHEDULING_API_BASE_URL", "http://localhost:8000/api/scheduling",
)
SCHEDULING_API_TOKEN: str | None = _optional_secret("SCHEDULING_API_TOKEN")
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))

# ── Conversation ────────────────────────────────────────────────────
MAX_SLOT_OPTIONS: int = int(os.getenv("MAX_SLOT_OPTIONS", "5"))

# ── Server ──────────────────────────────────────────────────────────
SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
SERVER_PORT: int = int(os.getenv("SERVER_PORT", "8000"))
CORS_ORIGINS: list[str] = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:5173",
).split(",")
