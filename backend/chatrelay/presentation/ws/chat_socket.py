"""
Chat WebSocket endpoint.

One socket = one connection. Two tasks per socket:
- reader: decodes JSON frames and hands them to the lifecycle controller,
  one at a time
- writer: drains the session outbox to the socket, and closes the socket when
  the session asks for it (auth failure policy, slow consumer)

Whichever finishes first ends the connection; on_disconnect always runs.

Frames are JSON objects discriminated by "type":
    → {"type": "authenticate", "token": "..."}
    → {"type": "send_message", "text": "...", "attachment": {...}, "client_ref": "..."}
    ← auth_result, presence_changed, message_delivered, send_rejected,
      session_superseded, error
"""

import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from chatrelay.application.realtime import (
    ConnectionLifecycleController,
    ConnectionSession,
)
from chatrelay.config.logging_config import correlation_id_var
from chatrelay.config.settings import Config

logger = logging.getLogger(__name__)

router = APIRouter(tags=["websocket"])


@router.websocket("/ws")
async def chat_socket(websocket: WebSocket):
    container = websocket.app.state.dishka_container
    controller = await container.get(ConnectionLifecycleController)

    await websocket.accept()
    session = ConnectionSession(outbox_size=Config.WS_OUTBOX_SIZE)
    # Every log line of this connection carries its id
    token = correlation_id_var.set(str(session.id))
    tasks: list[asyncio.Task] = []
    try:
        await controller.on_connect(session)
        tasks.append(asyncio.create_task(_read_frames(websocket, controller, session)))
        tasks.append(asyncio.create_task(_write_events(websocket, session)))

        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.error(
                    f"[WS] Connection task failed: {task.exception()!r}",
                    exc_info=task.exception(),
                )
    finally:
        for task in tasks:
            task.cancel()
        await controller.on_disconnect(session.id)
        await asyncio.gather(*tasks, return_exceptions=True)
        correlation_id_var.reset(token)


async def _read_frames(
    websocket: WebSocket,
    controller: ConnectionLifecycleController,
    session: ConnectionSession,
) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            logger.debug(f"[WS] Client disconnected (code={message.get('code')})")
            return

        raw = message.get("text")
        if raw is None and message.get("bytes") is not None:
            try:
                raw = message["bytes"].decode("utf-8")
            except UnicodeDecodeError:
                controller.on_malformed_frame(session.id, "Frame is not UTF-8 text.")
                continue
        if raw is None:
            continue

        try:
            payload = json.loads(raw)
        except ValueError:
            controller.on_malformed_frame(session.id, "Frame is not valid JSON.")
            continue

        await controller.on_raw_event(session.id, payload)


async def _write_events(websocket: WebSocket, session: ConnectionSession) -> None:
    try:
        while True:
            event = await session.next_event()
            if event is None:
                logger.info(
                    f"[WS] Closing socket: {session.close_reason} (code={session.close_code})"
                )
                await websocket.close(
                    code=session.close_code, reason=session.close_reason or ""
                )
                return
            await websocket.send_json(event.model_dump(mode="json"))
    except (WebSocketDisconnect, RuntimeError) as e:
        # Socket went away between queueing and sending
        logger.debug(f"[WS] Send failed: {e!r}")
