# =============================================================================
# core/models.py  -  Data Models (the "nouns" of the system)
# =============================================================================
#
# These dataclasses define the shape of everything that flows between the
# Direct Line client, the reply poller and the conversation bridge.
#
# DESIGN PRINCIPLE - "Activities are read-only":
#   The backend's activity log is append-only.  We never edit or delete an
#   Activity, so the dataclass is frozen and attachments are a tuple.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol


# -----------------------------------------------------------------------------
# Activity - one record in a conversation's activity log
# -----------------------------------------------------------------------------
# Direct Line returns activities as JSON like:
#   {"type": "message", "id": "abc|0001",
#    "from": {"id": "copilot-bot", "role": "bot"},
#    "text": "Hello!", "attachments": [...]}
# We keep only the fields the poller needs to pick a reply.
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Activity:
    """One immutable message/event in a conversation."""

    author_id: str                     # from.id  ("mcp-user", "copilot-bot", ...)
    text: str = ""                     # Message payload (may be empty)
    kind: str = "message"              # Direct Line "type": message, typing, event...
    author_role: Optional[str] = None  # from.role: "bot" or "user" when provided
    attachments: tuple = ()            # Raw attachment dicts (cards, files, ...)
    id: Optional[str] = None           # Backend activity id

    @property
    def has_content(self) -> bool:
        return bool(self.text) or bool(self.attachments)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Activity":
        """Build an Activity from a raw Direct Line activity dict."""
        sender = payload.get("from") or {}
        attachments = payload.get("attachments")
        return cls(
            author_id=str(sender.get("id") or ""),
            text=str(payload.get("text") or ""),
            kind=payload.get("type", "message"),
            author_role=sender.get("role"),
            attachments=tuple(attachments) if isinstance(attachments, list) else (),
            id=payload.get("id"),
        )


# -----------------------------------------------------------------------------
# ConversationStart - what "create conversation" hands back
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class ConversationStart:
    conversation_id: str
    watermark: Optional[str] = None    # Direct Line usually omits this on create


# -----------------------------------------------------------------------------
# ActivityPage - one "list activities since <watermark>" response
# -----------------------------------------------------------------------------
@dataclass
class ActivityPage:
    """Activities newer than the requested watermark, in arrival order."""

    activities: list[Activity] = field(default_factory=list)
    watermark: Optional[str] = None    # Cursor to pass on the next read


# -----------------------------------------------------------------------------
# PollResult - the outcome of one ReplyPoller.wait_for_reply() run
# -----------------------------------------------------------------------------
@dataclass
class PollResult:
    """The reply found by the poller (or None) and where the cursor ended."""

    reply: Optional[Activity]
    watermark: Optional[str]
    attempts: int = 0
    cancelled: bool = False


# -----------------------------------------------------------------------------
# ConversationClient - the backend operations the poller and bridge call
# -----------------------------------------------------------------------------
# DirectLineClient implements this; tests use in-memory stand-ins.
# -----------------------------------------------------------------------------
class ConversationClient(Protocol):
    async def create_conversation(self) -> ConversationStart: ...

    async def post_activity(
        self, conversation_id: str, author_id: str, text: str
    ) -> Optional[str]: ...

    async def list_activities_since(
        self, conversation_id: str, watermark: Optional[str] = None
    ) -> ActivityPage: ...


# Outcome labels carried by ReplyResult
REPLIED = "replied"
ATTACHMENT = "attachment"
TIMED_OUT = "timed_out"
CANCELLED = "cancelled"
UNREACHABLE = "unreachable"


# -----------------------------------------------------------------------------
# ReplyResult - what the bridge returns to the tool layer
# -----------------------------------------------------------------------------
# conversation_id is always filled in so the caller can continue the
# conversation, even after a timeout.  The only exception is a failed
# session creation: then no conversation exists and the id is "".
# -----------------------------------------------------------------------------
@dataclass
class ReplyResult:
    """The text to show the caller plus the conversation handle."""

    text: str
    conversation_id: str
    outcome: str = REPLIED
