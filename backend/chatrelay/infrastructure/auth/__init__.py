"""Credential hashing helpers."""

from chatrelay.infrastructure.auth.passwords import hash_secret, check_secret

__all__ = ["hash_secret", "check_secret"]
