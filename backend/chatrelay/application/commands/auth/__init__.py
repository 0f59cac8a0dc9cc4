"""Auth commands."""

from .register_user import RegisterUserCommand, RegisterUserHandler
from .login_user import LoginResult, LoginUserCommand, LoginUserHandler

__all__ = [
    "RegisterUserCommand",
    "RegisterUserHandler",
    "LoginResult",
    "LoginUserCommand",
    "LoginUserHandler",
]
