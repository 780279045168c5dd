"""FastAPI server hosting the browser chat widget."""

from __future__ import annotations

import asyncio
import json
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ValidationError

from ..config import ChatConfig, load_config
from ..exchange.controller import ExchangeController
from ..logging_setup import get_logger, setup_logging
from ..prompts import CLEAR_CONFIRMATION
from ..render import RenderInstruction, to_dict

logger = get_logger(__name__)


class QueueRenderer:
    """Buffers render instructions until the websocket sends them."""

    def __init__(self) -> None:
        self.queue: asyncio.Queue = asyncio.Queue()

    def render(self, instruction: RenderInstruction) -> None:
        self.queue.put_nowait(to_dict(instruction))


@dataclass
class ChatSession:
    controller: ExchangeController
    renderer: QueueRenderer
    pending: Set[asyncio.Task] = field(default_factory=set)

    def submit(self, text: str) -> None:
        task = asyncio.create_task(self.controller.submit(text))
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)

    async def close(self) -> None:
        """Cancel unfinished exchanges, then release the HTTP client."""

        tasks = list(self.pending)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.controller.aclose()


class ClientEvent(BaseModel):
    type: str
    text: str = ""


class SessionCreated(BaseModel):
    session_id: str


HTML_PAGE = r"""<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>Product Advisor</title>
    <style>
      body { font-family: system-ui, -apple-system, 'Segoe UI', Roboto, Arial; background: #f8fafc; margin: 0; }
      .chatbox { max-width: 720px; margin: 2rem auto; background: #fff; border-radius: 16px; box-shadow: 0 12px 32px rgba(15,23,42,0.1); padding: 1rem; }
      #chatWindow { height: 60vh; overflow-y: auto; display: flex; flex-direction: column; gap: .5rem; padding: .5rem; }
      .msg { padding: .6rem .9rem; border-radius: 12px; max-width: 80%; white-space: pre-wrap; }
      .msg.user { align-self: flex-end; background: #000; color: #fff; }
      .msg.ai { align-self: flex-start; background: #f1f5f9; color: #0f172a; }
      .msg.placeholder { font-style: italic; opacity: .7; }
      .latest-question { font-size: .85rem; color: #6b7280; }
      form { display: flex; gap: .5rem; margin-top: .75rem; }
      #userInput { flex: 1; padding: .6rem; border-radius: 8px; border: 1px solid #cbd5e1; }
    </style>
  </head>
  <body>
    <div class="chatbox">
      <div id="chatWindow"></div>
      <form id="chatForm">
        <input id="userInput" autocomplete="off" placeholder="Ask me about products or routines..." required />
        <button id="sendBtn" type="submit">Send</button>
        <button id="clearBtn" type="button">Clear</button>
      </form>
    </div>
    <script>
      const chatWindow = document.getElementById('chatWindow');
      const chatForm = document.getElementById('chatForm');
      const userInput = document.getElementById('userInput');
      const sendBtn = document.getElementById('sendBtn');
      const clearBtn = document.getElementById('clearBtn');
      const placeholders = {};
      let latestQuestion = null;
      let ws;

      function bubble(text, sender) {
        const div = document.createElement('div');
        div.className = `msg ${sender}`;
        div.textContent = text;
        return div;
      }

      function append(el) {
        chatWindow.appendChild(el);
        chatWindow.scrollTop = chatWindow.scrollHeight;
      }

      const handlers = {
        message: (ev) => append(bubble(ev.text, ev.sender)),
        latest_question: (ev) => {
          if (!latestQuestion) {
            latestQuestion = document.createElement('div');
            latestQuestion.className = 'latest-question';
          }
          latestQuestion.textContent = ev.text;
          append(latestQuestion);
        },
        placeholder: (ev) => {
          const el = bubble(ev.text, 'ai placeholder');
          placeholders[ev.placeholder_id] = el;
          append(el);
        },
        replace: (ev) => {
          const el = placeholders[ev.placeholder_id];
          delete placeholders[ev.placeholder_id];
          if (el && el.isConnected) el.replaceWith(bubble(ev.text, 'ai'));
          chatWindow.scrollTop = chatWindow.scrollHeight;
        },
        submit: (ev) => {
          sendBtn.disabled = !ev.enabled;
          if (ev.enabled) sendBtn.removeAttribute('aria-busy');
          else sendBtn.setAttribute('aria-busy', 'true');
        },
        clear: () => {
          chatWindow.innerHTML = '';
          latestQuestion = null;
          for (const key of Object.keys(placeholders)) delete placeholders[key];
        },
      };

      async function connect() {
        const resp = await fetch('/api/sessions', { method: 'POST' });
        const { session_id } = await resp.json();
        const scheme = location.protocol === 'https:' ? 'wss' : 'ws';
        ws = new WebSocket(`${scheme}://${location.host}/ws/${session_id}`);
        ws.onmessage = (msg) => {
          const ev = JSON.parse(msg.data);
          const handler = handlers[ev.type];
          if (handler) handler(ev);
        };
      }

      chatForm.addEventListener('submit', (e) => {
        e.preventDefault();
        const text = userInput.value.trim();
        if (!text || !ws) return;
        ws.send(JSON.stringify({ type: 'submit', text }));
        userInput.value = '';
        userInput.focus();
      });

      clearBtn.addEventListener('click', () => {
        if (!ws || !window.confirm({CLEAR_CONFIRMATION})) return;
        ws.send(JSON.stringify({ type: 'clear' }));
        userInput.value = '';
        userInput.focus();
      });

      connect();
    </script>
  </body>
</html>
""".replace("{CLEAR_CONFIRMATION}", json.dumps(CLEAR_CONFIRMATION))


def create_app(config: Optional[ChatConfig] = None) -> FastAPI:
    """Build the widget server around a single configuration."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(app.state.config.logging.level, app.state.config.logging.file)
        yield
        sessions = list(app.state.sessions.values())
        app.state.sessions.clear()
        for session in sessions:
            await session.close()

    app = FastAPI(title="Product Advisor Chat", lifespan=lifespan)
    app.state.config = config or load_config()
    app.state.sessions = {}

    @app.get("/", response_class=HTMLResponse)
    async def root() -> HTMLResponse:
        return HTMLResponse(HTML_PAGE)

    @app.post("/api/sessions", response_model=SessionCreated)
    async def create_session() -> SessionCreated:
        renderer = QueueRenderer()
        controller = ExchangeController(app.state.config, renderer=renderer)
        controller.start()
        session_id = str(uuid.uuid4())
        app.state.sessions[session_id] = ChatSession(controller=controller, renderer=renderer)
        logger.info("Created chat session {}", session_id)
        return SessionCreated(session_id=session_id)

    @app.delete("/api/sessions/{session_id}")
    async def delete_session(session_id: str) -> Dict[str, Any]:
        session = app.state.sessions.pop(session_id, None)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {session_id}")
        await session.close()
        return {"session_id": session_id, "deleted": True}

    @app.websocket("/ws/{session_id}")
    async def websocket_endpoint(websocket: WebSocket, session_id: str) -> None:
        session: ChatSession | None = app.state.sessions.get(session_id)
        if session is None:
            await websocket.close(code=1008)
            return
        await websocket.accept()

        async def pump() -> None:
            while True:
                event = await session.renderer.queue.get()
                await websocket.send_text(json.dumps(event))

        sender = asyncio.create_task(pump())
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    event = ClientEvent.model_validate_json(raw)
                except ValidationError as exc:
                    logger.warning("Ignoring malformed client event: {}", exc)
                    continue
                if event.type == "submit":
                    session.submit(event.text)
                elif event.type == "clear":
                    session.controller.clear()
                else:
                    logger.warning("Ignoring unknown client event type '{}'", event.type)
        except WebSocketDisconnect:
            logger.info("Websocket for session {} disconnected", session_id)
        finally:
            sender.cancel()
            # Unregister before awaiting; the handler may be cancelled during close().
            app.state.sessions.pop(session_id, None)
            await session.close()
            logger.info("Closed chat session {}", session_id)

    return app


app = create_app()
