# =============================================================================
# agent/gateway_agent.py  -  Google ADK agent wired to the tool gateway
# =============================================================================
#
# WHAT THIS FILE DOES:
#   Builds the console assistant used by main.py:
#
#     ADK Agent ──LiteLlm──▶ LLM (GATEWAY_AGENT_MODEL)
#         │
#         └──MCP over stdio──▶ tools/mcp_server.py (jokes + ask_copilot_agent)
#
#   ADK starts the gateway as a subprocess and discovers its tools.  The
#   subprocess reads DIRECT_LINE_SECRET etc. from the same .env file.
# =============================================================================

import os

from google.adk.agents import Agent
from google.adk.models.lite_llm import LiteLlm
from google.adk.tools.mcp_tool.mcp_toolset import MCPToolset, StdioServerParameters

from agent.prompt import get_gateway_prompt

DEFAULT_MODEL = "openrouter/openai/gpt-4o"


def create_agent() -> Agent:
    """Create the gateway assistant with the MCP tool server attached.

    The model string goes straight to LiteLlm, so any provider it supports
    works (set GATEWAY_AGENT_MODEL, plus that provider's API key).
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    # "uv run" keeps the subprocess on the project's virtualenv.
    mcp_tools = MCPToolset(
        connection_params=StdioServerParameters(
            command="uv",
            args=["run", "python", "-m", "tools.mcp_server"],
            cwd=project_root,
        ),
    )

    return Agent(
        name="jokes_copilot_gateway",
        model=LiteLlm(model=os.environ.get("GATEWAY_AGENT_MODEL", DEFAULT_MODEL)),
        instruction=get_gateway_prompt(),
        tools=[mcp_tools],
    )
