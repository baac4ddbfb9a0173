# =============================================================================
# tools/mcp_server.py  -  FastMCP Tool Server (jokes + Copilot bridge)
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Exposes five MCP tools.  Each one is a thin wrapper around core/:
#
#     get_chuck_joke        -> core.jokes.get_chuck_joke
#     get_chuck_categories  -> core.jokes.get_chuck_categories
#     get_dad_joke          -> core.jokes.get_dad_joke
#     get_yo_mama_joke      -> core.jokes.get_yo_mama_joke
#     ask_copilot_agent     -> core.bridge.ConversationBridge.ask
#
#   Every tool returns a small DICT.  Problems come back as {"error": ...}
#   so the calling model can read them; nothing is raised at the caller.
#
# MULTI-TURN CONVERSATIONS:
#   ask_copilot_agent returns a conversation_id.  Pass it back on the next
#   call to continue the same conversation with the Copilot agent.  The
#   server keeps the last-seen watermark per conversation in _WATERMARKS.
#
# RUNNING THIS SERVER:
#   python -m tools.mcp_server                        (stdio, default)
#   GATEWAY_TRANSPORT=sse  python -m tools.mcp_server (SSE on HOST:PORT)
#   GATEWAY_TRANSPORT=http python -m tools.mcp_server (streamable HTTP)
# =============================================================================

import json
import logging
import sys
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastmcp import FastMCP

from core import jokes
from core.bridge import ConversationBridge, WatermarkStore
from core.config import BridgeSettings, ServerSettings
from core.direct_line import DirectLineClient
from core.errors import ConfigError, JokeServiceError

# =============================================================================
# Logging Setup
# =============================================================================
# Logs go to STDERR: with the stdio transport, STDOUT carries the MCP JSON
# stream and any stray print would corrupt it.
#
#   CYAN   -> incoming tool calls
#   YELLOW -> progress inside a tool
#   GREEN  -> the response sent back
# =============================================================================

_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RESET = "\033[0m"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [MCP] %(message)s",
    datefmt="%H:%M:%S",
    stream=sys.stderr,
)


def _log_request(tool_name: str, **params) -> None:
    param_str = ", ".join(f"{k}={v!r}" for k, v in params.items())
    logging.info(f"{_CYAN}{tool_name} called with: {param_str}{_RESET}")


def _log_status(message: str) -> None:
    logging.info(f"{_YELLOW}  → {message}{_RESET}")


def _log_response(tool_name: str, result: dict) -> dict:
    """Log the tool response as compact JSON, then return it."""
    logging.info(f"{_GREEN}  ← {tool_name} response: {json.dumps(result, separators=(',', ':'))}{_RESET}")
    return result


# =============================================================================
# Shared state and factories
# =============================================================================
# _WATERMARKS lives as long as the server process (LRU-capped, see
# WatermarkStore).  The factories below are the only places that build
# HTTP clients, so tests can swap them out.
# =============================================================================
_WATERMARKS = WatermarkStore()


def get_bridge_settings() -> BridgeSettings:
    return BridgeSettings.from_env()


def _direct_line_client(settings: BridgeSettings) -> DirectLineClient:
    return DirectLineClient.from_settings(settings)


def _joke_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=10.0, headers={"User-Agent": "jokes-copilot-gateway"})


mcp = FastMCP("jokes-copilot-gateway")


# =============================================================================
# TOOLS 1-4: jokes
# =============================================================================
@mcp.tool()
async def get_chuck_joke() -> dict:
    """Get a random Chuck Norris joke.

    Returns:
        {"joke": "<text>"} or {"error": "<reason>"}.
    """
    _log_request("get_chuck_joke")
    try:
        async with _joke_http_client() as client:
            joke = await jokes.get_chuck_joke(client)
    except JokeServiceError as e:
        return _log_response("get_chuck_joke", {"error": str(e)})
    return _log_response("get_chuck_joke", {"joke": joke})


@mcp.tool()
async def get_chuck_categories() -> dict:
    """List every Chuck Norris joke category.

    Returns:
        {"categories": [...], "text": "animal, career, ..."} or {"error": ...}.
    """
    _log_request("get_chuck_categories")
    try:
        async with _joke_http_client() as client:
            categories = await jokes.get_chuck_categories(client)
    except JokeServiceError as e:
        return _log_response("get_chuck_categories", {"error": str(e)})
    _log_status(f"{len(categories)} categories")
    return _log_response(
        "get_chuck_categories", {"categories": categories, "text": ", ".join(categories)}
    )


@mcp.tool()
async def get_dad_joke() -> dict:
    """Get a random dad joke.

    Returns:
        {"joke": "<text>"} or {"error": "<reason>"}.
    """
    _log_request("get_dad_joke")
    try:
        async with _joke_http_client() as client:
            joke = await jokes.get_dad_joke(client)
    except JokeServiceError as e:
        return _log_response("get_dad_joke", {"error": str(e)})
    return _log_response("get_dad_joke", {"joke": joke})


@mcp.tool()
async def get_yo_mama_joke() -> dict:
    """Get a random Yo-Mama joke.

    Returns:
        {"joke": "<text>"} or {"error": "<reason>"}.
    """
    _log_request("get_yo_mama_joke")
    try:
        async with _joke_http_client() as client:
            joke = await jokes.get_yo_mama_joke(client)
    except JokeServiceError as e:
        return _log_response("get_yo_mama_joke", {"error": str(e)})
    return _log_response("get_yo_mama_joke", {"joke": joke})


# =============================================================================
# TOOL 5: ask_copilot_agent
# =============================================================================
# Always answers with text.  Timeouts and backend outages come back as a
# short apologetic reply, never as a tool error.
# =============================================================================
@mcp.tool()
async def ask_copilot_agent(prompt: str = "", conversation_id: Optional[str] = None) -> dict:
    """Send a prompt to the Copilot Studio agent and return its reply.

    WHEN TO CALL THIS: Whenever the user wants an answer from the Copilot
    agent.  For a follow-up question in the same conversation, pass the
    conversation_id returned by the previous call.

    Args:
        prompt: The message for the agent (may be empty).
        conversation_id: Optional id from an earlier call, to continue
            that conversation.  Omit it to start a new one.

    Returns:
        {"reply": "<agent text>", "conversation_id": "<id>"}
    """
    _log_request("ask_copilot_agent", prompt=prompt, conversation_id=conversation_id)

    try:
        settings = get_bridge_settings()
    except ConfigError as e:
        _log_status(f"Bridge not configured: {e}")
        return _log_response("ask_copilot_agent", {"error": str(e)})

    async with _direct_line_client(settings) as client:
        bridge = ConversationBridge(client, settings, watermarks=_WATERMARKS)
        result = await bridge.ask(prompt, conversation_id)

    _log_status(f"outcome={result.outcome}, conversation={result.conversation_id}")
    return _log_response(
        "ask_copilot_agent",
        {"reply": result.text, "conversation_id": result.conversation_id},
    )


# =============================================================================
# Server entry point
# =============================================================================
def run(settings: Optional[ServerSettings] = None) -> None:
    """Load .env, then start the MCP server on the configured transport."""
    load_dotenv()
    settings = settings or ServerSettings.from_env()
    logging.getLogger().setLevel(settings.log_level)

    if settings.transport == "stdio":
        mcp.run()
    else:
        logging.info(
            f"Serving MCP over {settings.transport} on http://{settings.host}:{settings.port}"
        )
        mcp.run(transport=settings.transport, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
