"""
Shopping list error types.

Storage failures are not wrapped: SQLAlchemyError propagates as-is.
"""

from typing import Any, Optional


class ShopListError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ValidationError(ShopListError):
    def __init__(self, message: str, code: str = "empty_name"):
        super().__init__(code, message)


class InvariantViolation(ShopListError):
    def __init__(self, message: str, code: str = "last_list_protected", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class AuthError(ShopListError):
    def __init__(self, message: str = "Incorrect PIN", code: str = "invalid_pin"):
        super().__init__(code, message)
