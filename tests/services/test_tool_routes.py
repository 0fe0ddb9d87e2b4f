"""Tool Routes — HTTP capability discovery, tool calls and audit trail.

Tests:
    - GET /api/v1/tools lists all 13 tools with protocol input schemas
    - POST /call success omits isError; tool failure sets isError true
    - Unknown tool → 404 envelope with UNKNOWN_TOOL
    - Malformed request body → 400 validation envelope
    - Completed calls are audited; audit can be disabled
    - GET /calls returns newest first
"""

import pytest
from sqlalchemy import func, select

from parallels_bridge.core.errors import PrlctlExecutionError
from parallels_bridge.models.tool_call import ToolCall


@pytest.mark.asyncio
async def test_list_tools(client):
    response = await client.get("/api/v1/tools")
    assert response.status_code == 200
    tools = response.json()["tools"]
    assert len(tools) == 13
    by_name = {tool["name"]: tool for tool in tools}
    assert "vmId" in by_name["startVM"]["inputSchema"]["properties"]
    assert by_name["listVMs"]["inputSchema"]["type"] == "object"


@pytest.mark.asyncio
async def test_call_success_omits_is_error(client, fake_executor):
    response = await client.post("/api/v1/tools/call", json={
        "name": "startVM", "arguments": {"vmId": "dev"},
    })
    assert response.status_code == 200
    body = response.json()
    assert "isError" not in body
    assert body["content"][0]["type"] == "text"
    assert "started successfully" in body["content"][0]["text"]
    assert fake_executor.calls == [["start", "dev"]]


@pytest.mark.asyncio
async def test_call_tool_failure_sets_is_error(client, fake_executor):
    fake_executor.on("list", error=PrlctlExecutionError("prlctl command failed: exit status 1"))
    response = await client.post("/api/v1/tools/call", json={"name": "listVMs"})
    assert response.status_code == 200
    assert response.json()["isError"] is True


@pytest.mark.asyncio
async def test_unknown_tool_is_404(client):
    response = await client.post("/api/v1/tools/call", json={"name": "fooBar"})
    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "UNKNOWN_TOOL"
    assert error["message"] == "Unknown tool: fooBar"


@pytest.mark.asyncio
async def test_malformed_body_is_400(client):
    response = await client.post("/api/v1/tools/call", json={"arguments": {}})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_calls_are_audited(client, test_db):
    await client.post("/api/v1/tools/call", json={
        "name": "deleteVM", "arguments": {"vmId": "dev"},
    })
    row = (await test_db.execute(select(ToolCall))).scalar_one()
    assert row.tool_name == "deleteVM"
    assert row.tool_input == {"vmId": "dev"}
    assert row.is_error is False
    assert "Confirmation Required" in row.output_text


@pytest.mark.asyncio
async def test_unknown_tool_not_audited(client, test_db):
    await client.post("/api/v1/tools/call", json={"name": "fooBar"})
    count = (await test_db.execute(select(func.count()).select_from(ToolCall))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("audit_enabled", [{"audit_tool_calls": False}])
async def test_audit_disabled(client, test_db):
    await client.post("/api/v1/tools/call", json={"name": "listVMs"})
    count = (await test_db.execute(select(func.count()).select_from(ToolCall))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_recent_calls_newest_first(client):
    await client.post("/api/v1/tools/call", json={"name": "listVMs"})
    await client.post("/api/v1/tools/call", json={"name": "startVM", "arguments": {}})
    response = await client.get("/api/v1/tools/calls", params={"limit": 10})
    assert response.status_code == 200
    calls = response.json()
    assert [c["tool_name"] for c in calls] == ["startVM", "listVMs"]
    assert calls[0]["is_error"] is True
