"""
Infrastructure Layer - Technical implementations of domain ports.

This layer contains:
- persistence/: Credential store and message log (Prisma, in-memory)
- storage/: Blob storage on local disk (LocalBlobStore)
- cache/: Redis caching (CachedMessageLog)
- auth/: Password hashing
"""
