"""Unified exception hierarchy for claimcore.

Every failure raised by the claim and flag engine inherits from
ClaimCoreError. This module provides:
- Base exception hierarchy with stable error codes
- ErrorRegistry for mapping codes to classes in a front end

Usage in a command layer:
    from claimcore.exceptions import (
        ClaimCoreError,
        InvalidFlagError,
        PermissionDeniedError,
    )

    try:
        service.set_flag(subject, claim, "pvp", "any", Tristate.FALSE)
    except PermissionDeniedError as e:
        player.send(e.reason)
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar, cast

__all__ = [
    # Base hierarchy
    "ClaimCoreError",
    "ConfigurationError",
    "PermissionDeniedError",
    "InvalidFlagError",
    "InvalidContextError",
    "InvalidTristateError",
    "NoTransferableOwnerError",
    "ClaimNotFoundError",
    "ClaimHierarchyError",
    "StorageError",
    # Registry
    "ErrorRegistry",
    "error_registry",
    "register_error",
]


# ---- Exception Hierarchy ----------------------------------------------------


class ClaimCoreError(Exception):
    """Base exception for the claim engine.

    Attributes:
        code: Stable error code string (e.g. "PERMISSION_DENIED").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class ConfigurationError(ClaimCoreError):
    """Invalid or missing configuration."""

    code: str = "CONFIGURATION_ERROR"


class PermissionDeniedError(ClaimCoreError):
    """A subject may not perform the requested mutation.

    ``reason`` is the verbatim denial string meant for the end user.
    """

    code: str = "PERMISSION_DENIED"
    message: str = "Permission denied"

    def __init__(self, reason: str | None = None, **kwargs: Any) -> None:
        super().__init__(reason, **kwargs)
        self.reason = self.message


class InvalidFlagError(ClaimCoreError):
    """Flag key is not in the registered catalog."""

    code: str = "INVALID_FLAG"
    message: str = "Invalid flag entered."


class InvalidContextError(ClaimCoreError):
    """Context argument is neither a registered source nor ``key=value``."""

    code: str = "INVALID_CONTEXT"
    message: str = "Invalid context entered."


class InvalidTristateError(ClaimCoreError):
    """Value could not be parsed as true/false/undefined."""

    code: str = "INVALID_TRISTATE"
    message: str = "Invalid value entered."


class NoTransferableOwnerError(ClaimCoreError):
    """Claim is not top-level (or is the wilderness) and cannot change owner."""

    code: str = "NO_TRANSFER"
    message: str = "Only top-level claims can be transferred."


class ClaimNotFoundError(ClaimCoreError):
    """Lookup by identifier or name found nothing."""

    code: str = "CLAIM_NOT_FOUND"
    message: str = "No claim found."


class ClaimHierarchyError(ClaimCoreError):
    """Operation would break the parent/child invariants of the claim tree."""

    code: str = "CLAIM_HIERARCHY"


class StorageError(ClaimCoreError):
    """Persistence collaborator failed to save or delete a record."""

    code: str = "STORAGE_ERROR"


# ---- Error Registry ---------------------------------------------------------

_E = TypeVar("_E", bound=type[ClaimCoreError])


class ErrorRegistry:
    """Registry for mapping error codes to exception classes."""

    def __init__(self) -> None:
        self._errors: dict[str, type[ClaimCoreError]] = {}

    def register(self, code: str, error_cls: type[ClaimCoreError]) -> None:
        self._errors[code] = error_cls

    def get(self, code: str) -> type[ClaimCoreError] | None:
        return self._errors.get(code)

    def all(self) -> dict[str, type[ClaimCoreError]]:
        return dict(self._errors)


error_registry = ErrorRegistry()


def register_error(code: str) -> Callable[[_E], _E]:
    """Decorator to register a custom error type.

    Usage:
        @register_error("CLAIM_LIMIT")
        class ClaimLimitError(ClaimCoreError):
            code = "CLAIM_LIMIT"
    """

    def decorator(cls: _E) -> _E:
        error_registry.register(code, cls)
        return cls

    return cast(Callable[[_E], _E], decorator)


# Register base errors
error_registry.register("INTERNAL_ERROR", ClaimCoreError)
error_registry.register("CONFIGURATION_ERROR", ConfigurationError)
error_registry.register("PERMISSION_DENIED", PermissionDeniedError)
error_registry.register("INVALID_FLAG", InvalidFlagError)
error_registry.register("INVALID_CONTEXT", InvalidContextError)
error_registry.register("INVALID_TRISTATE", InvalidTristateError)
error_registry.register("NO_TRANSFER", NoTransferableOwnerError)
error_registry.register("CLAIM_NOT_FOUND", ClaimNotFoundError)
error_registry.register("CLAIM_HIERARCHY", ClaimHierarchyError)
error_registry.register("STORAGE_ERROR", StorageError)
