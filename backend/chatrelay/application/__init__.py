"""
APPLICATION LAYER - Use Cases & Orchestration

This layer contains:
- realtime/  → Presence registry, broadcast engine, connection lifecycle
- commands/  → Write operations (CQRS)
- queries/   → Read operations (CQRS)
- dto/       → Data Transfer Objects and WebSocket events
- common/    → Shared interfaces (Command, Query base classes)

Rules:
- Depends on Domain layer only
- No HTTP/framework code here
"""
