"""
DOMAIN LAYER - Chat core types

This layer contains:
- Entities: Identity, Message, Attachment, Connection
- Value Objects: UserId, ConnectionId, MessageId
- Ports: Credential store, message log and blob store interfaces
- Exceptions: Auth, validation, storage and connection errors

RULES:
1. NO framework imports (no FastAPI, Prisma, Pydantic, etc.)
2. NO I/O operations (no database, no HTTP, no file system)
3. Only depends on Python stdlib
"""
