"""
oishine_backoffice.api.routers.realtime

WebSocket endpoint for realtime order/driver status.

Responsibilities:
- Accept `{"action": "join" | "leave", "topic": ...}` messages and map them onto
  broadcaster memberships.
- Gate the admin-wide topic behind a valid admin credential, re-checked before
  each admin event is delivered.
- Cap the number of topics one connection may hold.
- Close the socket when the broadcaster drops the connection (1013 for a slow
  consumer), and drop every membership when the socket closes.

Replies (`joined` / `left` / `error`) go through the broadcaster's outbox so they
stay ordered with the events the connection receives.
"""

from __future__ import annotations

import json
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from starlette.status import WS_1011_INTERNAL_ERROR, WS_1013_TRY_AGAIN_LATER
from starlette.websockets import WebSocketState

from oishine_backoffice.auth.jwt import JwtConfig
from oishine_backoffice.auth.verifier import AdminVerifier, bearer_token, select_credential
from oishine_backoffice.db.repositories.admins import AdminRepo
from oishine_backoffice.db.session import session_scope
from oishine_backoffice.observability.logging import get_logger
from oishine_backoffice.realtime.broadcaster import Broadcaster
from oishine_backoffice.realtime.topics import (
    ADMIN_TOPIC,
    MAX_TOPICS_PER_CONNECTION,
    is_valid_topic,
)
from oishine_backoffice.settings import Settings

router = APIRouter(tags=["realtime"])

log = get_logger(__name__)

MSG_TOO_MANY_TOPICS = f"Too many topics (at most {MAX_TOPICS_PER_CONNECTION} per connection)"

_DROP_CLOSE_CODES = {
    "slow_consumer": WS_1013_TRY_AGAIN_LATER,
    "send_failed": WS_1011_INTERNAL_ERROR,
}


def _credential(websocket: WebSocket, settings: Settings, query_token: str | None) -> str | None:
    # Browsers cannot set headers on a WebSocket handshake, so `?token=` counts as explicit.
    explicit = bearer_token(websocket.headers.get("authorization")) or query_token
    return select_credential(explicit, websocket.cookies.get(settings.auth_cookie_name))


async def _admin_allowed(websocket: WebSocket, settings: Settings, token: str | None) -> str | None:
    """
    Returns None when the connection may join the admin topic, otherwise the denial message.
    """

    async with session_scope(websocket.app.state.sessionmaker) as session:
        verifier = AdminVerifier(cfg=JwtConfig.from_settings(settings), admins=AdminRepo(session))
        result = await verifier.verify(token)
    if result.failure is not None:
        log.info("realtime_admin_denied", kind=result.failure.kind.value)
        return result.failure.message
    return None


def _parse(raw: str) -> tuple[str, str] | None:
    try:
        data: Any = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    action, topic = data.get("action"), data.get("topic")
    if action not in ("join", "leave") or not is_valid_topic(topic):
        return None
    return action, topic


def _drop_closer(websocket: WebSocket) -> Callable[[str], Awaitable[None]]:
    async def close(reason: str) -> None:
        if websocket.application_state == WebSocketState.CONNECTED:
            await websocket.close(code=_DROP_CLOSE_CODES.get(reason, WS_1011_INTERNAL_ERROR))

    return close


async def _close_dropped(websocket: WebSocket) -> None:
    # The connection was dropped as a slow or broken consumer.
    if websocket.application_state == WebSocketState.CONNECTED:
        await websocket.close(code=WS_1013_TRY_AGAIN_LATER)


@router.websocket("/v1/realtime/ws")
async def realtime_ws(websocket: WebSocket, token: str | None = None) -> None:
    settings: Settings = websocket.app.state.settings
    broadcaster: Broadcaster = websocket.app.state.broadcaster
    credential = _credential(websocket, settings, token)

    async def admin_guard() -> str | None:
        # Re-run before each admin event: deactivation or expiry ends the membership.
        return await _admin_allowed(websocket, settings, credential)

    await websocket.accept()
    structlog.contextvars.bind_contextvars(connection_id=str(uuid.uuid4()))
    broadcaster.register(websocket, on_drop=_drop_closer(websocket))
    log.info("realtime_connected")
    try:
        while True:
            raw = await websocket.receive_text()
            if not broadcaster.is_registered(websocket):
                await _close_dropped(websocket)
                break
            parsed = _parse(raw)
            if parsed is None:
                broadcaster.send_direct(
                    websocket,
                    {"type": "error", "error": "Expected {action: join|leave, topic: <name>}"},
                )
                continue

            action, topic = parsed
            if action == "leave":
                broadcaster.unsubscribe(websocket, topic)
                broadcaster.send_direct(websocket, {"type": "left", "topic": topic})
                continue

            joined = broadcaster.topics_of(websocket)
            if topic not in joined and len(joined) >= MAX_TOPICS_PER_CONNECTION:
                broadcaster.send_direct(websocket, {"type": "error", "error": MSG_TOO_MANY_TOPICS})
                continue

            guard = None
            if topic == ADMIN_TOPIC:
                denied = await admin_guard()
                if denied is not None:
                    broadcaster.send_direct(websocket, {"type": "error", "error": denied})
                    continue
                guard = admin_guard
                if not broadcaster.is_registered(websocket):
                    # Dropped while the credential was being checked.
                    await _close_dropped(websocket)
                    break
            broadcaster.subscribe(websocket, topic, guard=guard)
            broadcaster.send_direct(websocket, {"type": "joined", "topic": topic})
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(websocket)
        log.info("realtime_disconnected")
        structlog.contextvars.unbind_contextvars("connection_id")
