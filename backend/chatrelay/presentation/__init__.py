"""
Presentation Layer - API endpoints and request/response handling.

This layer contains:
- api/: FastAPI REST routers (auth, messages, presence)
- ws/: the chat WebSocket endpoint
- dependencies/: bearer-token authentication for routes
"""
