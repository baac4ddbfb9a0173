# =============================================================================
# core/poller.py  -  Wait for the agent's reply (ReplyPoller)
# =============================================================================
#
# HOW IT WORKS:
#   Direct Line is eventually consistent: after we post a message, the bot's
#   answer shows up in the activity log some time later.  So we:
#
#     repeat up to max_attempts times:
#       1. wait interval_s                 (ALWAYS first, even on attempt 1)
#       2. read activities since watermark
#       3. move the watermark forward      (even if nothing matched)
#       4. keep only the agent's messages
#       5. if any, return the LAST one     (the agent's "final word")
#
#   Running out of attempts is a normal timeout: reply=None.
#
# WHO COUNTS AS "THE AGENT"?
#   A message authored with role "bot" by someone other than the caller.
#   Typing indicators, events and system activities without the bot role
#   are skipped.
#
# CANCELLATION:
#   Pass an asyncio.Event; the wait between attempts ends as soon as it is
#   set.  Cancelling the surrounding task works too.
# =============================================================================

import asyncio
import logging
from typing import Callable, Optional

from core.models import Activity, ConversationClient, PollResult

logger = logging.getLogger(__name__)


def is_agent_reply(activity: Activity, caller_id: str) -> bool:
    """True when `activity` is a bot message (not ours) with something to show."""
    return (
        activity.kind == "message"
        and activity.author_role == "bot"
        and activity.author_id != caller_id
        and activity.has_content
    )


async def _pause(interval_s: float, cancel: Optional[asyncio.Event]) -> bool:
    """Sleep for interval_s.  Returns True if `cancel` fired first."""
    if cancel is None:
        await asyncio.sleep(interval_s)
        return False
    if cancel.is_set():
        return True
    try:
        await asyncio.wait_for(cancel.wait(), timeout=interval_s)
    except asyncio.TimeoutError:
        return False
    return True


class ReplyPoller:
    """Bounded poll-after-wait loop over a conversation's activity log."""

    def __init__(
        self,
        max_attempts: int = 10,
        interval_s: float = 1.0,
        *,
        reply_filter: Callable[[Activity, str], bool] = is_agent_reply,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.interval_s = interval_s
        self._reply_filter = reply_filter

    async def wait_for_reply(
        self,
        client: ConversationClient,
        conversation_id: str,
        author_id: str,
        watermark: Optional[str] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> PollResult:
        """Poll until the first agent reply shows up or attempts run out.

        Args:
            client: The backend; only `list_activities_since` is used
                (normally a DirectLineClient).
            conversation_id: The conversation to watch.
            author_id: Our own from.id; our messages are never a reply.
            watermark: Where to start reading (None = full history).
            cancel: Optional event that stops polling between attempts.

        Returns:
            PollResult with the chosen reply (or None) and the final watermark.

        Raises:
            BackendUnavailable: if reading the activity log fails.
        """
        for attempt in range(1, self.max_attempts + 1):
            if await _pause(self.interval_s, cancel):
                logger.info(f"Polling {conversation_id} cancelled before attempt {attempt}")
                return PollResult(None, watermark, attempt - 1, cancelled=True)

            page = await client.list_activities_since(conversation_id, watermark)
            if page.watermark is not None:
                watermark = page.watermark

            replies = [a for a in page.activities if self._reply_filter(a, author_id)]
            logger.debug(
                f"Poll {attempt}/{self.max_attempts} on {conversation_id}: "
                f"{len(page.activities)} new, {len(replies)} from agent, watermark={watermark}"
            )
            if replies:
                return PollResult(replies[-1], watermark, attempt)

        logger.info(f"No reply on {conversation_id} after {self.max_attempts} attempts")
        return PollResult(None, watermark, self.max_attempts)
