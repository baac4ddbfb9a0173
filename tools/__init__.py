# =============================================================================
# tools/__init__.py
# =============================================================================
# This package contains the FastMCP tool server.
#
# ARCHITECTURAL ROLE:
#   tools/ is the translation layer between MCP callers and core/.  A tool:
#     1. Calls a core/ function (jokes, or the Copilot bridge)
#     2. Turns the result into a small dict for JSON
#     3. Turns failures into {"error": ...} dicts
#
#   Tools do NOT contain HTTP or polling logic; that lives in core/.
# =============================================================================
