"""
Service Result

Uniform {success, error} result returned by every service operation.
Domain failures are reported here, never raised.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Category of a failed operation"""
    VALIDATION = "validation"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    AUTHENTICATION = "authentication"
    CONFLICT = "conflict"


@dataclass
class ServiceResult:
    """Result of a service call"""
    success: bool
    data: Any = None
    error: Optional[str] = None
    kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: ErrorKind, error: str) -> "ServiceResult":
        return cls(success=False, error=error, kind=kind)

    @classmethod
    def invalid(cls, error: str) -> "ServiceResult":
        return cls.fail(ErrorKind.VALIDATION, error)

    @classmethod
    def denied(cls, error: str = "Permission denied") -> "ServiceResult":
        return cls.fail(ErrorKind.PERMISSION_DENIED, error)

    @classmethod
    def not_found(cls, error: str) -> "ServiceResult":
        return cls.fail(ErrorKind.NOT_FOUND, error)
