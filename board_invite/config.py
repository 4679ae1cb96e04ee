"""
Configuration and startup security checks for board provisioning.

Why: The platform token grants write access to every board of an account.
This module reads the remote API settings from the environment and provides a
single guard that refuses obviously insecure production settings without
burdening local development.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "https://api.monday.com/v2"
DEFAULT_TIMEOUT = 10.0
DEFAULT_BOARD_LIMIT = 100
MAX_BOARD_LIMIT = 500


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def clamp_board_limit(value: object) -> int:
    try:
        limit = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        limit = DEFAULT_BOARD_LIMIT
    return max(1, min(MAX_BOARD_LIMIT, limit))


@dataclass(frozen=True)
class PlatformConfig:
    api_url: str
    token: str | None
    api_version: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    board_limit: int = DEFAULT_BOARD_LIMIT

    @classmethod
    def from_env(cls) -> "PlatformConfig":
        api_url = (os.getenv("MONDAY_API_URL") or DEFAULT_API_URL).strip().rstrip("/")
        token = (os.getenv("MONDAY_API_TOKEN") or "").strip() or None
        api_version = (os.getenv("MONDAY_API_VERSION") or "").strip() or None
        try:
            timeout = float(os.getenv("MONDAY_TIMEOUT", str(DEFAULT_TIMEOUT)))
        except ValueError:
            timeout = DEFAULT_TIMEOUT
        if timeout <= 0:
            timeout = DEFAULT_TIMEOUT
        board_limit = clamp_board_limit(os.getenv("BOARD_LIST_LIMIT", str(DEFAULT_BOARD_LIMIT)))
        return cls(
            api_url=api_url,
            token=token,
            api_version=api_version,
            timeout=timeout,
            board_limit=board_limit,
        )


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod/stage only):
    - MONDAY_API_TOKEN must be set and not a CHANGE_ME placeholder.
    - MONDAY_API_URL must use https.
    """
    env = os.getenv("BOARD_INVITE_ENV", "dev")
    if not _is_prod_like(env):
        return  # dev/test remain permissive

    token = (os.getenv("MONDAY_API_TOKEN", "") or "").strip()
    if not token or token.upper().startswith("CHANGE_ME"):
        raise SystemExit(
            "Refusing to start: MONDAY_API_TOKEN is unset or a placeholder in production."
        )

    api_url = (os.getenv("MONDAY_API_URL", "") or DEFAULT_API_URL).strip().lower()
    if not api_url.startswith("https://"):
        raise SystemExit("Refusing to start: MONDAY_API_URL must use https in production.")
