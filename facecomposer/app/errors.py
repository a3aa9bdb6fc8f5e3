from __future__ import annotations

from typing import Optional


KEY_EXISTS_ERROR_CODE = 4
UNKNOWN_ERROR_CODE = 0


class AppError(Exception):
    """Base application error"""


class ConfigError(AppError):
    """Missing or invalid configuration"""


class DatabaseError(AppError):
    """MongoDB connection or query failure"""


class LoadFailure(AppError):
    """Image source unreachable or corrupt. Halts the composition session."""

    def __init__(self, source: str, reason: Optional[str] = None):
        self.source = source
        self.reason = reason
        msg = f"Error loading image: {source}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class InvalidOperation(AppError):
    """Operation refused by a composition invariant (no background, empty name)"""


class DuplicateName(AppError):
    """A layer with this name already exists"""


class PersistenceError(AppError):
    """Failed to write or read a saved composition"""

    def __init__(self, message: str, code: int = UNKNOWN_ERROR_CODE):
        self.code = code
        super().__init__(message)


class PersistenceCollision(PersistenceError):
    """Saved composition name already taken"""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Image already exists: {key}", code=KEY_EXISTS_ERROR_CODE)
