"""In-memory stand-ins for the Direct Line client."""

from typing import Optional

from core.errors import BackendUnavailable
from core.models import Activity, ActivityPage, ConversationStart

CALLER_ID = "mcp-user"


def bot(text: str = "", **kwargs) -> Activity:
    """A message from the Copilot agent."""
    kwargs.setdefault("author_id", "copilot-bot")
    kwargs.setdefault("author_role", "bot")
    return Activity(text=text, **kwargs)


def user(text: str = "", **kwargs) -> Activity:
    """A message we posted ourselves."""
    kwargs.setdefault("author_id", CALLER_ID)
    kwargs.setdefault("author_role", "user")
    return Activity(text=text, **kwargs)


class ScriptedDirectLine:
    """Returns pre-scripted ActivityPages, one per list call, and records
    every call made against it."""

    def __init__(self, pages=None, conversation_id: str = "conv-1", fail_on=()):
        self.pages = list(pages or [])
        self.conversation_id = conversation_id
        self.fail_on = set(fail_on)
        self.create_calls = 0
        self.posted: list[tuple[str, str, str]] = []
        self.list_calls: list[tuple[str, Optional[str]]] = []

    async def create_conversation(self) -> ConversationStart:
        self.create_calls += 1
        if "create" in self.fail_on:
            raise BackendUnavailable("Direct Line returned HTTP 503", status_code=503)
        return ConversationStart(self.conversation_id)

    async def post_activity(self, conversation_id: str, author_id: str, text: str) -> str:
        if "post" in self.fail_on:
            raise BackendUnavailable("Direct Line returned HTTP 502", status_code=502)
        self.posted.append((conversation_id, author_id, text))
        return f"{conversation_id}|{len(self.posted):04d}"

    async def list_activities_since(
        self, conversation_id: str, watermark: Optional[str] = None
    ) -> ActivityPage:
        self.list_calls.append((conversation_id, watermark))
        if "list" in self.fail_on:
            raise BackendUnavailable("Cannot reach Direct Line")
        if self.pages:
            return self.pages.pop(0)
        return ActivityPage([], watermark)


class LoggedDirectLine:
    """A tiny append-only activity log with integer watermarks.

    After every post the bot answers "re: <text>", but the answer only
    becomes visible on the `reply_delay`-th read after the post.
    """

    def __init__(self, reply_delay: int = 1):
        self.log: dict[str, list[Activity]] = {}
        self.reply_delay = reply_delay
        self._pending: dict[str, Activity] = {}
        self._reads_since_post: dict[str, int] = {}
        self.create_calls = 0

    async def create_conversation(self) -> ConversationStart:
        self.create_calls += 1
        conversation_id = f"conv-{self.create_calls}"
        self.log[conversation_id] = []
        return ConversationStart(conversation_id)

    async def post_activity(self, conversation_id: str, author_id: str, text: str) -> str:
        self.log[conversation_id].append(user(text, author_id=author_id))
        self._pending[conversation_id] = bot(f"re: {text}")
        self._reads_since_post[conversation_id] = 0
        return str(len(self.log[conversation_id]))

    async def list_activities_since(
        self, conversation_id: str, watermark: Optional[str] = None
    ) -> ActivityPage:
        if conversation_id in self._pending:
            self._reads_since_post[conversation_id] += 1
            if self._reads_since_post[conversation_id] >= self.reply_delay:
                self.log[conversation_id].append(self._pending.pop(conversation_id))
        activities = self.log[conversation_id]
        start = int(watermark) if watermark is not None else 0
        return ActivityPage(list(activities[start:]), str(len(activities)))


