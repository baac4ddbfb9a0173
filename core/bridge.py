# =============================================================================
# core/bridge.py  -  ConversationBridge: "ask the Copilot agent" in one call
# =============================================================================
#
# THE FLOW:
#   ask(text, conversation_id=None)
#     1. no id?   -> create a conversation (new handle + initial watermark)
#        have id? -> resume from the watermark we saw last time
#     2. post our message (empty text is still posted)
#     3. poll for the agent's reply
#     4. remember the new watermark for this conversation
#     5. turn the outcome into a ReplyResult
#
# ALWAYS A RESULT, NEVER AN EXCEPTION:
#   Tool callers expect text back.  If Direct Line is down, ask() returns
#   the configured error text instead of raising; a timeout returns the
#   timeout text.  The conversation id is always returned so the caller
#   can keep going.
#
# WATERMARKS ACROSS CALLS:
#   WatermarkStore remembers the last watermark per conversation id (the
#   least recently used ids are dropped once it is full).  For an
#   id we have never seen (e.g. after a restart) we read the log once before
#   posting, so an old answer can't be taken for the new one.
# =============================================================================

import asyncio
import logging
from collections import OrderedDict
from typing import Optional

from core.config import BridgeSettings
from core.errors import BackendUnavailable
from core.models import (
    ATTACHMENT,
    CANCELLED,
    REPLIED,
    TIMED_OUT,
    UNREACHABLE,
    ConversationClient,
    PollResult,
    ReplyResult,
)
from core.poller import ReplyPoller

logger = logging.getLogger(__name__)


DEFAULT_MAX_CONVERSATIONS = 1024


class WatermarkStore:
    """Last-seen watermark per conversation id (in memory, LRU-capped).

    Once more than `max_entries` conversations are tracked, the least
    recently used one is forgotten.  A forgotten id is primed again on its
    next ask(), so eviction costs one extra read, never a wrong reply.
    """

    def __init__(self, max_entries: int = DEFAULT_MAX_CONVERSATIONS) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._watermarks: OrderedDict[str, str] = OrderedDict()

    def get(self, conversation_id: str) -> Optional[str]:
        watermark = self._watermarks.get(conversation_id)
        if watermark is not None:
            self._watermarks.move_to_end(conversation_id)
        return watermark

    def advance(self, conversation_id: str, watermark: Optional[str]) -> None:
        # None means "the backend told us nothing new"; keep what we have.
        if watermark is None:
            return
        self._watermarks[conversation_id] = watermark
        self._watermarks.move_to_end(conversation_id)
        while len(self._watermarks) > self.max_entries:
            evicted, _ = self._watermarks.popitem(last=False)
            logger.debug(f"Forgot watermark for {evicted} (store full)")

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._watermarks

    def __len__(self) -> int:
        return len(self._watermarks)


class ConversationBridge:
    """Turns one question into create/post/poll against Direct Line."""

    def __init__(
        self,
        client: ConversationClient,
        settings: BridgeSettings,
        *,
        poller: Optional[ReplyPoller] = None,
        watermarks: Optional[WatermarkStore] = None,
    ) -> None:
        self._client = client
        self._settings = settings
        self._poller = poller or ReplyPoller(
            settings.max_poll_attempts, settings.poll_interval_s
        )
        self._watermarks = watermarks if watermarks is not None else WatermarkStore()

    async def ask(
        self,
        text: str = "",
        conversation_id: Optional[str] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> ReplyResult:
        """Send `text` to the agent and wait for its answer.

        Args:
            text: The user's message.  None/empty is posted as an empty turn.
            conversation_id: Continue this conversation; omit to start one.
            cancel: Optional event that stops waiting for the reply early.

        Returns:
            A ReplyResult.  Never raises on backend failures.
        """
        text = text or ""
        handle = conversation_id or ""
        try:
            if not handle:
                start = await self._client.create_conversation()
                handle = start.conversation_id
                watermark = start.watermark
            else:
                watermark = await self._resume_watermark(handle)

            await self._client.post_activity(handle, self._settings.caller_id, text)

            poll = await self._poller.wait_for_reply(
                self._client, handle, self._settings.caller_id, watermark, cancel
            )
        except BackendUnavailable as e:
            logger.warning(f"Copilot agent unreachable (conversation={handle or 'new'}): {e}")
            return ReplyResult(self._settings.error_sentinel_text, handle, UNREACHABLE)

        self._watermarks.advance(handle, poll.watermark)
        return self._to_result(poll, handle)

    async def _resume_watermark(self, conversation_id: str) -> Optional[str]:
        watermark = self._watermarks.get(conversation_id)
        if watermark is not None:
            return watermark
        page = await self._client.list_activities_since(conversation_id)
        logger.debug(
            f"Primed watermark for {conversation_id}: {page.watermark} "
            f"({len(page.activities)} earlier activities skipped)"
        )
        return page.watermark

    def _to_result(self, poll: PollResult, conversation_id: str) -> ReplyResult:
        reply = poll.reply
        if reply is None:
            outcome = CANCELLED if poll.cancelled else TIMED_OUT
            return ReplyResult(self._settings.timeout_sentinel_text, conversation_id, outcome)
        if reply.text:
            logger.info(f"Agent replied on {conversation_id} after {poll.attempts} poll(s)")
            return ReplyResult(reply.text, conversation_id, REPLIED)
        return ReplyResult(self._settings.attachment_sentinel_text, conversation_id, ATTACHMENT)
