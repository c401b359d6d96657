"""Custom exceptions for the fee reconciliation engine."""
from __future__ import annotations


class FeeSyncException(Exception):
    """Base exception for all fee engine errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class StoreUnavailableException(FeeSyncException):
    """Cart store call failed at the network or parse level."""

    def __init__(self, operation: str, reason: object | None = None) -> None:
        detail = f": {reason}" if reason is not None else ""
        super().__init__(f"Cart store unavailable during {operation}{detail}")
        self.operation = operation
        self.reason = reason


class ConfigurationMissingException(FeeSyncException):
    """A required external identifier is not configured."""

    def __init__(self, setting: str) -> None:
        super().__init__(f"Required setting {setting} is not configured")
        self.setting = setting


class InventoryRejectedException(FeeSyncException):
    """Store refused to add the fee product (out of stock or similar)."""

    def __init__(self, description: str) -> None:
        super().__init__(f"Cart store rejected the fee line item: {description}")
        self.description = description


class ConfigurationException(FeeSyncException):
    """Configuration errors."""

    pass
