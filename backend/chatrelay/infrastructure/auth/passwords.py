"""
Password hashing for the credential stores (werkzeug.security).
"""

from werkzeug.security import check_password_hash, generate_password_hash

from chatrelay.config.settings import Config


def hash_secret(secret: str, method: str = Config.PASSWORD_HASH_METHOD) -> str:
    return generate_password_hash(secret, method=method)


def check_secret(password_hash: str, secret: str) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, secret)
