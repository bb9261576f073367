# inventory_studio/errors.py
"""
Domain errors raised by services and translated to HTTP responses in main.py.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class InventoryStudioError(Exception):
    """Base class; ``status_code`` is the HTTP status the error maps to."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message}


class NotFoundError(InventoryStudioError):
    status_code = 404


class ValidationFailed(InventoryStudioError):
    status_code = 400


class PrincipalRequired(InventoryStudioError):
    status_code = 401


class VersionConflict(InventoryStudioError):
    """Stale ``version`` on update. Carries the authoritative current entity."""
    status_code = 409

    def __init__(self, message: str, current: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.current = current

    def to_payload(self) -> Dict[str, Any]:
        return {"message": self.message, "current": self.current}


class UniquenessConflict(InventoryStudioError):
    """Duplicate custom ID within one inventory; callers may regenerate and retry."""
    status_code = 409
