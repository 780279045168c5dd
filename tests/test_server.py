import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from advisorchat.config import ChatConfig
from advisorchat.exchange.controller import ExchangeController
from advisorchat.web.server import ChatSession, QueueRenderer, create_app


@pytest.fixture
def client():
    app = create_app(ChatConfig())
    with TestClient(app) as test_client:
        yield test_client


def test_root_serves_widget(client):
    response = client.get("/")

    assert response.status_code == 200
    assert 'id="chatWindow"' in response.text
    assert "Clear conversation?" in response.text


def test_session_lifecycle(client):
    session_id = client.post("/api/sessions").json()["session_id"]

    assert client.delete(f"/api/sessions/{session_id}").json() == {"session_id": session_id, "deleted": True}
    assert client.delete(f"/api/sessions/{session_id}").status_code == 404


def test_websocket_exchange(client):
    session_id = client.post("/api/sessions").json()["session_id"]
    session = client.app.state.sessions[session_id]

    with client.websocket_connect(f"/ws/{session_id}") as ws:
        assert ws.receive_json() == {"type": "clear"}
        assert ws.receive_json() == {
            "type": "message",
            "sender": "ai",
            "text": "👋 Hello! How can I help you today?",
        }

        ws.send_json({"type": "submit", "text": "My name is Ava"})
        assert ws.receive_json() == {"type": "message", "sender": "user", "text": "My name is Ava"}
        assert ws.receive_json() == {
            "type": "message",
            "sender": "ai",
            "text": "Nice to meet you, Ava! I'll remember your name for this session.",
        }

        ws.send_json({"type": "submit", "text": "Best toner?"})
        events = [ws.receive_json() for _ in range(6)]
        assert [event["type"] for event in events] == [
            "message",
            "latest_question",
            "placeholder",
            "submit",
            "replace",
            "submit",
        ]
        assert events[4]["text"].startswith("No proxy endpoint URL found")
        assert events[5] == {"type": "submit", "enabled": True}

        ws.send_json({"type": "clear"})
        assert ws.receive_json() == {"type": "clear"}
        assert ws.receive_json()["type"] == "message"

    assert len(session.controller.store) == 1
    assert session.controller.store.memory.user_name is None


def test_websocket_unknown_session(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws/missing") as ws:
            ws.receive_json()


def test_websocket_disconnect_drops_session(client):
    session_ids = [client.post("/api/sessions").json()["session_id"] for _ in range(3)]

    for session_id in session_ids:
        with client.websocket_connect(f"/ws/{session_id}") as ws:
            assert ws.receive_json() == {"type": "clear"}

    assert client.app.state.sessions == {}


def test_shutdown_closes_open_sessions():
    app = create_app(ChatConfig())
    with TestClient(app) as test_client:
        test_client.post("/api/sessions")
        test_client.post("/api/sessions")
        assert len(app.state.sessions) == 2

    assert app.state.sessions == {}


def test_close_cancels_pending_exchanges():
    async def stall(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(3600)
        return httpx.Response(200, json={"response": "too late"})

    async def scenario():
        client = httpx.AsyncClient(transport=httpx.MockTransport(stall))
        async with client:
            renderer = QueueRenderer()
            controller = ExchangeController(
                ChatConfig(proxy_url="https://proxy.test/chat"), renderer=renderer, client=client
            )
            session = ChatSession(controller=controller, renderer=renderer)
            session.submit("Best toner?")
            await asyncio.sleep(0.05)
            (task,) = session.pending
            await session.close()
            return session, task

    session, task = asyncio.run(scenario())

    assert task.cancelled()
    assert session.pending == set()
    assert session.controller.submit_enabled
