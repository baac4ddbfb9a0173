# =============================================================================
# main.py  -  Interactive console for the Jokes + Copilot gateway
# =============================================================================
#
# HOW TO RUN:
#   uv run python main.py
#
# WHAT HAPPENS:
#   1. Creates the Google ADK agent (agent/gateway_agent.py), which starts
#      the MCP tool server as a stdio subprocess
#   2. Opens an in-memory session
#   3. Loops: read a line, send it to the agent, print the final answer
#
# To serve the tools to OTHER MCP clients instead, run the server directly:
#   GATEWAY_TRANSPORT=sse uv run python -m tools.mcp_server
# =============================================================================

import asyncio

from dotenv import load_dotenv

# Must run before the agent is created: LiteLlm reads its API key from the
# environment when it initializes.
load_dotenv()

from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types

from agent.gateway_agent import create_agent

APP_NAME = "jokes_copilot_gateway"
USER_ID = "console_user"


async def run_agent():
    """Run the gateway assistant interactively until the user quits."""
    print("=" * 70)
    print("  JOKES + COPILOT GATEWAY")
    print("=" * 70)
    print("\n🔧 Starting agent and tool server...")
    agent = create_agent()

    session_service = InMemorySessionService()
    runner = Runner(agent=agent, app_name=APP_NAME, session_service=session_service)
    session = await session_service.create_session(app_name=APP_NAME, user_id=USER_ID)

    print("✅ Ready!  Ask for a joke or a question for the Copilot agent.")
    print("   (Type 'quit' to exit)\n")
    print("-" * 70)

    while True:
        try:
            user_input = input("\n🧑 You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\n👋 Goodbye!")
            break

        if user_input.lower() in ("quit", "exit", "q"):
            print("\n👋 Goodbye!")
            break

        if not user_input:
            continue

        user_message = types.Content(role="user", parts=[types.Part(text=user_input)])

        # The runner streams events: text from the model and tool calls.
        # Only the last text part is shown as the answer.
        final_response = ""
        async for event in runner.run_async(
            user_id=USER_ID,
            session_id=session.id,
            new_message=user_message,
        ):
            if event.content and event.content.parts:
                for part in event.content.parts:
                    if getattr(part, "text", None):
                        final_response = part.text
                    if getattr(part, "function_call", None):
                        print(f"  🔧 Calling tool: {part.function_call.name}")

        if final_response:
            print(f"\n🤖 Agent: {final_response}")
        else:
            print("\n⚠️  No response generated. The agent may have encountered an error.")


if __name__ == "__main__":
    asyncio.run(run_agent())
