"""
Error taxonomy shared by the service core and the HTTP layer.
"""


class BulletinError(Exception):
    """Base exception for bulletin service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BulletinError, ValueError):
    """Caller-supplied input violates a contract. Raised before any store I/O."""


class StoreError(BulletinError):
    """The message store failed (I/O, unavailability)."""

    def __init__(self, message: str, operation: str = "unknown"):
        super().__init__(message)
        self.operation = operation
