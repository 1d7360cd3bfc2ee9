"""Adapter exception hierarchy."""


class AdapterError(Exception):
    """Base exception for all adapter errors."""


class ConfigurationError(AdapterError, ValueError):
    """Raised when the adapter is constructed with invalid arguments."""


class DatabaseConnectionError(AdapterError, ConnectionError):
    """Raised when a connection to the database cannot be established."""


class SchemaError(AdapterError):
    """Raised when the policy database or table cannot be created."""


class PolicyValidationError(AdapterError, ValueError):
    """Raised when a rule cannot be stored in the fixed-width policy table."""
