# =============================================================================
# agent/__init__.py
# =============================================================================
# This package contains the Google ADK console assistant.
#
# ARCHITECTURAL ROLE:
#   The agent is a CLIENT of the tool gateway.  It launches
#   tools/mcp_server.py over stdio, lets the LLM decide which tool to call
#   (a joke, or a question for the Copilot agent) and carries the Copilot
#   conversation_id between turns.
#
#   It holds no HTTP or polling logic of its own; that lives in core/.
# =============================================================================
