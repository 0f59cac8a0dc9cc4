"""WebSocket endpoints."""

from chatrelay.presentation.ws.chat_socket import router as ws_router

__all__ = ["ws_router"]
