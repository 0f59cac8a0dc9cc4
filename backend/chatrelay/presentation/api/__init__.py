"""
API Routers - FastAPI endpoint definitions.
"""

from chatrelay.presentation.api.auth import router as auth_router
from chatrelay.presentation.api.messages import router as messages_router
from chatrelay.presentation.api.presence import router as presence_router

__all__ = [
    "auth_router",
    "messages_router",
    "presence_router",
]
