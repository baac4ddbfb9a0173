# =============================================================================
# core/direct_line.py  -  Direct Line REST client (RemoteConversationClient)
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   Wraps the three Direct Line v3 calls the bridge needs:
#
#     create_conversation()           POST {base}/conversations
#     post_activity(id, author, text) POST {base}/conversations/{id}/activities
#     list_activities_since(id, wm)   GET  {base}/conversations/{id}/activities?watermark=wm
#
# FAILURE CONTRACT:
#   Every failure (connect error, timeout, non-2xx, bad JSON, an activity
#   set of the wrong shape) is raised as BackendUnavailable.  Nothing is
#   retried here; the bridge decides what the caller sees.
#
# AUTH:
#   The bearer secret comes from a token provider callable injected at
#   construction, so rotating it never requires a new client.
#
# CONVERSATION IDS:
#   Ids come from tool callers, so they are percent-encoded as a single
#   path segment.  "a/b?c" can never reach a different endpoint.
# =============================================================================

import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

import httpx

from core.config import DEFAULT_DIRECT_LINE_URL, BridgeSettings
from core.errors import BackendUnavailable
from core.models import Activity, ActivityPage, ConversationStart

logger = logging.getLogger(__name__)


class DirectLineClient:
    """Async client for one Direct Line bot endpoint."""

    def __init__(
        self,
        token_provider: Callable[[], str],
        base_url: str = DEFAULT_DIRECT_LINE_URL,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._token_provider = token_provider
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url, timeout=timeout, transport=transport
        )

    @classmethod
    def from_settings(
        cls,
        settings: BridgeSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "DirectLineClient":
        return cls(
            settings.token_provider(),
            settings.direct_line_url,
            timeout=settings.request_timeout_s,
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "DirectLineClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -- plumbing -------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = {"Authorization": f"Bearer {self._token_provider()}"}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            raise BackendUnavailable(f"Direct Line timed out on {method} {path}: {e}") from e
        except httpx.HTTPError as e:
            raise BackendUnavailable(f"Cannot reach Direct Line at {self._base_url}: {e}") from e
        except httpx.InvalidURL as e:
            raise BackendUnavailable(f"Invalid Direct Line URL for {method} {path}: {e}") from e

        if response.is_error:
            raise BackendUnavailable(
                f"Direct Line returned HTTP {response.status_code} on {method} {path}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendUnavailable(f"Direct Line sent invalid JSON on {method} {path}") from e

    @staticmethod
    def _activities_path(conversation_id: str) -> str:
        return f"/conversations/{quote(conversation_id, safe='')}/activities"

    # -- the three operations ------------------------------------------------

    async def create_conversation(self) -> ConversationStart:
        """Start a new conversation and return its handle."""
        data = await self._request("POST", "/conversations")
        conversation_id = data.get("conversationId") if isinstance(data, dict) else None
        if not conversation_id or not isinstance(conversation_id, str):
            raise BackendUnavailable("Direct Line did not return a conversationId")
        logger.info(f"Started Direct Line conversation {conversation_id}")
        return ConversationStart(conversation_id, data.get("watermark"))

    async def post_activity(self, conversation_id: str, author_id: str, text: str) -> Optional[str]:
        """Post a message activity.  Empty text is still a turn and is sent."""
        body = {"type": "message", "from": {"id": author_id}, "text": text}
        data = await self._request("POST", self._activities_path(conversation_id), json=body)
        return data.get("id") if isinstance(data, dict) else None

    async def list_activities_since(
        self, conversation_id: str, watermark: Optional[str] = None
    ) -> ActivityPage:
        """Return activities after `watermark` (full history when None)."""
        params = {"watermark": watermark} if watermark is not None else None
        data = await self._request("GET", self._activities_path(conversation_id), params=params)
        if not isinstance(data, dict):
            raise BackendUnavailable("Direct Line sent an unexpected activity set")

        raw = data.get("activities") or []
        if not isinstance(raw, list) or not all(_is_activity_payload(a) for a in raw):
            raise BackendUnavailable("Direct Line sent malformed activities")
        return ActivityPage([Activity.from_payload(a) for a in raw], data.get("watermark"))


def _is_activity_payload(payload: Any) -> bool:
    """A dict whose "from" (when present) is itself a dict."""
    return isinstance(payload, dict) and isinstance(payload.get("from") or {}, dict)
