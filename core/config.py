# =============================================================================
# core/config.py  -  Settings for the Copilot bridge and the MCP server
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Reads configuration from environment variables into two frozen
#   dataclasses (entry points load .env first, see tools/mcp_server.run):
#     - BridgeSettings: Direct Line secret/URL, polling budget, reply texts
#     - ServerSettings: which MCP transport to run and where to listen
#
# THE SECRET:
#   DIRECT_LINE_SECRET is required and is only ever read here.  The client
#   receives it through a token provider, never through a module constant.
#
# POLLING BUDGET:
#   Total wait ~= COPILOT_POLL_INTERVAL_MS x COPILOT_MAX_POLL_ATTEMPTS.
#   Defaults give 10 x 1000 ms = 10 s.  A slow agent can use 60 attempts.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional

from core.errors import ConfigError

DEFAULT_DIRECT_LINE_URL = "https://directline.botframework.com/v3/directline"
DEFAULT_CALLER_ID = "mcp-user"
DEFAULT_TIMEOUT_TEXT = "The agent didn't respond in time."
DEFAULT_ATTACHMENT_TEXT = "[Attachment reply]"
DEFAULT_ERROR_TEXT = "Sorry, I couldn't reach the Copilot agent right now."

TRANSPORTS = ("stdio", "sse", "http")


def _int_setting(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _float_setting(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None


# -----------------------------------------------------------------------------
# BridgeSettings
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class BridgeSettings:
    """Everything the Copilot conversation bridge needs."""

    direct_line_secret: str
    direct_line_url: str = DEFAULT_DIRECT_LINE_URL
    caller_id: str = DEFAULT_CALLER_ID        # from.id on the messages we post
    poll_interval_ms: int = 1000
    max_poll_attempts: int = 10
    request_timeout_s: float = 10.0
    timeout_sentinel_text: str = DEFAULT_TIMEOUT_TEXT
    attachment_sentinel_text: str = DEFAULT_ATTACHMENT_TEXT
    error_sentinel_text: str = DEFAULT_ERROR_TEXT

    def __post_init__(self):
        if not self.direct_line_secret:
            raise ConfigError("DIRECT_LINE_SECRET must be provided")
        if self.poll_interval_ms < 0:
            raise ConfigError("poll interval must not be negative")
        if self.max_poll_attempts < 1:
            raise ConfigError("max poll attempts must be at least 1")
        if self.request_timeout_s <= 0:
            raise ConfigError("request timeout must be positive")

    @property
    def poll_interval_s(self) -> float:
        return self.poll_interval_ms / 1000

    def token_provider(self) -> Callable[[], str]:
        """Return a callable yielding the bearer secret for Direct Line."""
        secret = self.direct_line_secret
        return lambda: secret

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "BridgeSettings":
        env = os.environ if environ is None else environ
        return cls(
            direct_line_secret=env.get("DIRECT_LINE_SECRET", ""),
            direct_line_url=env.get("DIRECT_LINE_URL") or DEFAULT_DIRECT_LINE_URL,
            caller_id=env.get("COPILOT_CALLER_ID") or DEFAULT_CALLER_ID,
            poll_interval_ms=_int_setting(env, "COPILOT_POLL_INTERVAL_MS", 1000),
            max_poll_attempts=_int_setting(env, "COPILOT_MAX_POLL_ATTEMPTS", 10),
            request_timeout_s=_float_setting(env, "COPILOT_REQUEST_TIMEOUT_S", 10.0),
            timeout_sentinel_text=env.get("COPILOT_TIMEOUT_TEXT") or DEFAULT_TIMEOUT_TEXT,
            attachment_sentinel_text=env.get("COPILOT_ATTACHMENT_TEXT") or DEFAULT_ATTACHMENT_TEXT,
            error_sentinel_text=env.get("COPILOT_ERROR_TEXT") or DEFAULT_ERROR_TEXT,
        )


# -----------------------------------------------------------------------------
# ServerSettings
# -----------------------------------------------------------------------------
# GATEWAY_TRANSPORT:
#   stdio -> the agent spawns us as a subprocess (default)
#   sse   -> long-lived Server-Sent Events channel
#   http  -> stateless streamable-HTTP request/response channel
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ServerSettings:
    transport: str = "stdio"
    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"

    def __post_init__(self):
        if self.transport not in TRANSPORTS:
            raise ConfigError(
                f"GATEWAY_TRANSPORT must be one of {', '.join(TRANSPORTS)}, got {self.transport!r}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServerSettings":
        env = os.environ if environ is None else environ
        return cls(
            transport=(env.get("GATEWAY_TRANSPORT") or "stdio").lower(),
            host=env.get("HOST") or "0.0.0.0",
            port=_int_setting(env, "PORT", 3001),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )
