"""Application configuration settings"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


class Config:
    DEBUG = _env_flag("DEBUG")

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_PATH = os.getenv("LOG_PATH", "")
    LOG_FORMAT = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s %(levelname)s [%(correlation_id)s] %(name)s: %(message)s",
    )

    # HTTP
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")

    # Session tokens
    SESSION_TOKEN_SECRET = os.getenv("SESSION_TOKEN_SECRET", "")
    SESSION_TOKEN_ISSUER = os.getenv("SESSION_TOKEN_ISSUER", "chatrelay")
    SESSION_TOKEN_AUDIENCE = os.getenv("SESSION_TOKEN_AUDIENCE", "chatrelay-clients")
    SESSION_TOKEN_TTL_SECONDS: int = int(os.getenv("SESSION_TOKEN_TTL_SECONDS", "3600"))
    # werkzeug.security method string, e.g. "scrypt" or "pbkdf2:sha256"
    PASSWORD_HASH_METHOD = os.getenv("PASSWORD_HASH_METHOD", "scrypt")

    # Stores: "prisma" (PostgreSQL through Prisma) or "memory"
    CHAT_STORE_BACKEND: str = os.getenv("CHAT_STORE_BACKEND", "prisma").lower()
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Redis settings (empty URL disables the history cache)
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    REDIS_CACHE_TTL: int = int(os.getenv("REDIS_CACHE_TTL", "3600"))
    REDIS_CACHE_LIMIT: int = int(os.getenv("REDIS_CACHE_LIMIT", "50"))

    # Blob storage
    BLOB_STORAGE_DIR = os.getenv("BLOB_STORAGE_DIR", "uploads")
    BLOB_PUBLIC_PATH = os.getenv("BLOB_PUBLIC_PATH", "/files")
    BLOB_PUBLIC_BASE_URL = os.getenv("BLOB_PUBLIC_BASE_URL", "")
    MAX_ATTACHMENT_MB = float(os.getenv("MAX_ATTACHMENT_MB", "50"))
    MAX_ATTACHMENT_BYTES = int(MAX_ATTACHMENT_MB * 1024 * 1024)

    # Messages
    MESSAGE_MAX_CHARS: int = int(os.getenv("MESSAGE_MAX_CHARS", "4000"))
    STORAGE_TIMEOUT_SECONDS = float(os.getenv("STORAGE_TIMEOUT_SECONDS", "10"))
    HISTORY_DEFAULT_LIMIT: int = int(os.getenv("HISTORY_DEFAULT_LIMIT", "50"))
    HISTORY_MAX_LIMIT: int = int(os.getenv("HISTORY_MAX_LIMIT", "200"))

    # WebSocket
    WS_OUTBOX_SIZE: int = int(os.getenv("WS_OUTBOX_SIZE", "256"))
    # Close the socket (1008) after a failed authenticate event
    WS_CLOSE_ON_AUTH_FAILURE = _env_flag("WS_CLOSE_ON_AUTH_FAILURE")


class DevelopmentConfig(Config):
    """Development configuration"""

    DEBUG = True


class TestingConfig(Config):
    """Testing configuration"""

    CHAT_STORE_BACKEND = "memory"


class ProductionConfig(Config):
    """Production configuration"""

    pass


# Configuration dictionary
config = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    "default": DevelopmentConfig,
}


def get_config(env=None):
    """Get configuration based on environment"""
    if env is None:
        env = os.getenv("APP_ENV", "development")
    return config.get(env, config["default"])
