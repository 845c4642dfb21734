from __future__ import annotations

from fastmcp import Client
from fastmcp.exceptions import ToolError
import pytest
from starlette.testclient import TestClient

from eventscribe.server import mcp


@pytest.fixture
def http_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    monkeypatch.delenv("EVENTSCRIBE_MCP_SERVER_URL", raising=False)
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    return TestClient(mcp.http_app())


def test_health(http_client: TestClient) -> None:
    response = http_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_generate_rejects_malformed_json(http_client: TestClient) -> None:
    response = http_client.post(
        "/api/generate", content=b"{not json", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400


def test_generate_validates_prompt(http_client: TestClient) -> None:
    response = http_client.post("/api/generate", json={"prompt": ""})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid input data"


def test_generate_reports_missing_configuration(http_client: TestClient) -> None:
    response = http_client.post("/api/generate", json={"prompt": "TechCon"})
    assert response.status_code == 500
    assert "EVENTSCRIBE_MCP_SERVER_URL" in response.json()["error"]


@pytest.mark.asyncio
async def test_tool_surfaces_configuration_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EVENTSCRIBE_MCP_SERVER_URL", raising=False)

    async with Client(mcp) as client:
        tools = {tool.name for tool in await client.list_tools()}
        assert "generate_event_description" in tools
        with pytest.raises(ToolError, match="EVENTSCRIBE_MCP_SERVER_URL"):
            await client.call_tool("generate_event_description", {"prompt": "TechCon"})
