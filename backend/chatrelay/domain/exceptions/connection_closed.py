"""
ConnectionClosedError - Raised for operations on a closed or unknown connection.
"""


class ConnectionClosedError(Exception):
    """Exception raised when a connection id is no longer live."""

    def __init__(self, message: str = "Connection is closed"):
        super().__init__(message)
