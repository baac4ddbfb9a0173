"""End-to-end tests of the MCP tools through an in-memory FastMCP client."""

import json

import httpx
import pytest
from fastmcp import Client

from core.bridge import WatermarkStore
from core.config import ServerSettings
from core.direct_line import DirectLineClient
from core.errors import ConfigError
from tools import mcp_server


class FakeDirectLineBackend:
    """httpx handler emulating one Direct Line conversation."""

    def __init__(self, bot_text: str = "Hello from Copilot", status_code: int = 200):
        self.bot_text = bot_text
        self.status_code = status_code
        self.activities: list[dict] = []
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="unavailable")
        if request.method == "POST" and request.url.path.endswith("/conversations"):
            return httpx.Response(201, json={"conversationId": "dl-conv-1"})
        if request.method == "POST":
            body = json.loads(request.content)
            self.activities.append(body)
            self.activities.append(
                {"type": "message", "from": {"id": "copilot-bot", "role": "bot"}, "text": self.bot_text}
            )
            return httpx.Response(200, json={"id": f"dl-conv-1|{len(self.activities):07d}"})
        start = int(request.url.params.get("watermark", "0"))
        return httpx.Response(
            200,
            json={"activities": self.activities[start:], "watermark": str(len(self.activities))},
        )


def _payload(result) -> dict:
    return json.loads(result.content[0].text)


@pytest.fixture
def direct_line(monkeypatch, settings):
    backend = FakeDirectLineBackend()
    monkeypatch.setattr(mcp_server, "get_bridge_settings", lambda: settings)
    monkeypatch.setattr(
        mcp_server,
        "_direct_line_client",
        lambda s: DirectLineClient.from_settings(s, transport=httpx.MockTransport(backend)),
    )
    monkeypatch.setattr(mcp_server, "_WATERMARKS", WatermarkStore())
    return backend


@pytest.fixture
def joke_api(monkeypatch):
    responses: dict[str, httpx.Response] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        return responses.get(request.url.host, httpx.Response(404))

    monkeypatch.setattr(
        mcp_server,
        "_joke_http_client",
        lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )
    return responses


class TestAskCopilotAgent:
    @pytest.mark.asyncio()
    async def test_new_conversation(self, direct_line) -> None:
        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("ask_copilot_agent", {"prompt": "What's new?"})

        assert _payload(result) == {
            "reply": "Hello from Copilot",
            "conversation_id": "dl-conv-1",
        }
        posted = [r for r in direct_line.requests if r.method == "POST"]
        assert len(posted) == 2

    @pytest.mark.asyncio()
    async def test_follow_up_reuses_conversation(self, direct_line) -> None:
        async with Client(mcp_server.mcp) as client:
            first = _payload(await client.call_tool("ask_copilot_agent", {"prompt": "one"}))
            direct_line.bot_text = "Second answer"
            second = _payload(
                await client.call_tool(
                    "ask_copilot_agent",
                    {"prompt": "two", "conversation_id": first["conversation_id"]},
                )
            )

        assert second == {"reply": "Second answer", "conversation_id": "dl-conv-1"}
        creates = [r for r in direct_line.requests if r.url.path.endswith("/conversations")]
        assert len(creates) == 1
        assert mcp_server._WATERMARKS.get("dl-conv-1") == "4"

    @pytest.mark.asyncio()
    async def test_backend_down_returns_error_text(self, direct_line, settings) -> None:
        direct_line.status_code = 503

        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("ask_copilot_agent", {"prompt": "hello?"})

        assert _payload(result) == {"reply": settings.error_sentinel_text, "conversation_id": ""}

    @pytest.mark.asyncio()
    async def test_missing_configuration(self, monkeypatch) -> None:
        def broken():
            raise ConfigError("DIRECT_LINE_SECRET must be provided")

        monkeypatch.setattr(mcp_server, "get_bridge_settings", broken)

        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("ask_copilot_agent", {"prompt": "hi"})

        assert _payload(result) == {"error": "DIRECT_LINE_SECRET must be provided"}


class TestJokeTools:
    @pytest.mark.asyncio()
    async def test_chuck_joke(self, joke_api) -> None:
        joke_api["api.chucknorris.io"] = httpx.Response(200, json={"value": "Chuck wins."})

        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("get_chuck_joke", {})

        assert _payload(result) == {"joke": "Chuck wins."}

    @pytest.mark.asyncio()
    async def test_chuck_categories(self, joke_api) -> None:
        joke_api["api.chucknorris.io"] = httpx.Response(200, json=["animal", "dev"])

        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("get_chuck_categories", {})

        assert _payload(result) == {"categories": ["animal", "dev"], "text": "animal, dev"}

    @pytest.mark.asyncio()
    async def test_dad_joke(self, joke_api) -> None:
        joke_api["icanhazdadjoke.com"] = httpx.Response(200, json={"joke": "Dad joke."})

        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("get_dad_joke", {})

        assert _payload(result) == {"joke": "Dad joke."}

    @pytest.mark.asyncio()
    async def test_yo_mama_joke_failure_is_reported(self, joke_api) -> None:
        async with Client(mcp_server.mcp) as client:
            result = await client.call_tool("get_yo_mama_joke", {})

        assert "yomama-jokes" in _payload(result)["error"]

    @pytest.mark.asyncio()
    async def test_all_tools_registered(self) -> None:
        async with Client(mcp_server.mcp) as client:
            tools = await client.list_tools()

        assert {t.name for t in tools} == {
            "get_chuck_joke",
            "get_chuck_categories",
            "get_dad_joke",
            "get_yo_mama_joke",
            "ask_copilot_agent",
        }


class TestRun:
    @pytest.fixture(autouse=True)
    def _no_dotenv(self, monkeypatch) -> None:
        monkeypatch.setattr(mcp_server, "load_dotenv", lambda: None)

    def test_stdio_transport(self, monkeypatch) -> None:
        calls = []
        monkeypatch.setattr(mcp_server.mcp, "run", lambda **kwargs: calls.append(kwargs))

        mcp_server.run(ServerSettings())

        assert calls == [{}]

    def test_sse_transport(self, monkeypatch) -> None:
        calls = []
        monkeypatch.setattr(mcp_server.mcp, "run", lambda **kwargs: calls.append(kwargs))

        mcp_server.run(ServerSettings(transport="sse", host="127.0.0.1", port=3001))

        assert calls == [{"transport": "sse", "host": "127.0.0.1", "port": 3001}]

    def test_loads_dotenv_before_reading_settings(self, monkeypatch) -> None:
        order = []
        monkeypatch.setattr(mcp_server, "load_dotenv", lambda: order.append("dotenv"))
        monkeypatch.setattr(
            mcp_server.ServerSettings,
            "from_env",
            classmethod(lambda cls: order.append("settings") or ServerSettings()),
        )
        monkeypatch.setattr(mcp_server.mcp, "run", lambda **kwargs: order.append("run"))

        mcp_server.run()

        assert order == ["dotenv", "settings", "run"]
