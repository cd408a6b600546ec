"""
Exception hierarchy and error classification for sdkfox.

Provides:
- Custom exception classes with error codes
- Error categorization (recoverable, fatal, validation, ...)
- Classification of arbitrary exceptions for CLI reporting
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    RECOVERABLE = "recoverable"
    FATAL = "fatal"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"


class SdkfoxError(Exception):
    """Base exception for all sdkfox errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class ValidationError(SdkfoxError):
    """Input validation error."""

    def __init__(self, message: str, field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", category=ErrorCategory.VALIDATION, details=details)


class NotFoundError(SdkfoxError):
    """Resource not found error."""

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            code="NOT_FOUND",
            category=ErrorCategory.NOT_FOUND,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class CodecError(SdkfoxError):
    """A host value or guest value does not fit the requested shape."""

    def __init__(self, message: str, code: str = "CODEC_ERROR"):
        super().__init__(message, code=code, category=ErrorCategory.VALIDATION)


class ArityMismatchError(CodecError):
    """A guest call passed the wrong number of arguments to a host function."""

    def __init__(self, message: str, expected: int, got: int):
        super().__init__(message, code="ARITY_MISMATCH")
        self.details = {"expected": expected, "got": got}


class PluginError(SdkfoxError):
    """Plugin load or execution error."""

    def __init__(self, plugin_id: str, message: str, code: str = "PLUGIN_ERROR"):
        super().__init__(
            f"Plugin '{plugin_id}' error: {message}",
            code=code,
            category=ErrorCategory.FATAL,
            details={"plugin_id": plugin_id},
        )
        self.plugin_id = plugin_id
        self.reason = message


class PluginInvalidError(PluginError):
    """Plugin failed load-time validation and must not be used."""

    def __init__(self, plugin_id: str, message: str):
        super().__init__(plugin_id, message, code="PLUGIN_INVALID")


class HookError(SdkfoxError):
    """A hook call failed on the host side of the boundary."""

    def __init__(self, hook: str, message: str):
        super().__init__(
            f"[{hook}] {message}",
            code="HOOK_ERROR",
            category=ErrorCategory.FATAL,
            details={"hook": hook},
        )
        self.hook = hook


class NoResultProvided(SdkfoxError):
    """The hook ran but returned nothing; callers apply their defaults."""

    def __init__(self, message: str = "no result provided", hook: str | None = None):
        details = {"hook": hook} if hook else {}
        super().__init__(message, code="NO_RESULT", category=ErrorCategory.RECOVERABLE, details=details)
        self.hook = hook


def is_no_result_provided(exc: BaseException) -> bool:
    return isinstance(exc, NoResultProvided)


def classify_exception(exc: BaseException) -> tuple[str, ErrorCategory]:
    """
    Classify an exception and return (error_code, category).

    Guest runtime errors are reported as PLUGIN_RUNTIME_ERROR; their message
    is the Lua traceback text.
    """
    if isinstance(exc, SdkfoxError):
        return exc.code, exc.category

    if type(exc).__name__ == "LuaError":
        return "PLUGIN_RUNTIME_ERROR", ErrorCategory.FATAL

    if isinstance(exc, FileNotFoundError):
        return "FILE_NOT_FOUND", ErrorCategory.NOT_FOUND

    if isinstance(exc, json.JSONDecodeError):
        return "JSON_PARSE_ERROR", ErrorCategory.VALIDATION

    if isinstance(exc, ValueError):
        return "INVALID_VALUE", ErrorCategory.VALIDATION

    if isinstance(exc, KeyError):
        return "MISSING_KEY", ErrorCategory.VALIDATION

    if isinstance(exc, TypeError):
        return "TYPE_ERROR", ErrorCategory.VALIDATION

    return "INTERNAL_ERROR", ErrorCategory.FATAL


def format_error(exc: BaseException) -> str:
    """Render an exception as a one-line, user-facing error string."""
    code, category = classify_exception(exc)
    message = exc.message if isinstance(exc, SdkfoxError) else str(exc)
    return f"Error [{code}] ({category.value}): {message}"
