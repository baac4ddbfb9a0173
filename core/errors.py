# =============================================================================
# core/errors.py  -  Exceptions raised by the core layer
# =============================================================================
#
# Only three things can go wrong in core/:
#   - the Direct Line backend can't be reached (or answers with garbage)
#   - a joke API can't be reached
#   - the configuration is missing or malformed
#
# "The agent didn't answer in time" is NOT an error.  The bridge reports it
# as ordinary reply text.
# =============================================================================

from typing import Optional


class BackendUnavailable(Exception):
    """The Direct Line backend failed: network error, timeout, non-2xx
    status or an undecodable response body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JokeServiceError(Exception):
    """A joke API call failed."""

    def __init__(self, service: str, message: str):
        super().__init__(f"{service}: {message}")
        self.service = service


class ConfigError(ValueError):
    """A setting is missing or has an invalid value."""
