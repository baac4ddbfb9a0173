# =============================================================================
# core/__init__.py
# =============================================================================
# This package contains the gateway's actual logic:
#   - direct_line.py : HTTP client for the Copilot Studio agent (Direct Line)
#   - poller.py      : waits for the agent's reply
#   - bridge.py      : ask(text, conversation_id) -> ReplyResult
#   - jokes.py       : the joke API fetchers
#   - config.py      : settings from the environment / .env
#
# ARCHITECTURAL RULE:
#   Nothing in this package imports FastMCP or Google ADK.  The tools/ layer
#   wraps these functions as MCP tools; the agent/ layer consumes the tools.
# =============================================================================
