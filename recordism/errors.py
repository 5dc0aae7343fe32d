"""Exception types raised by recordism."""


class RecordismError(Exception):
    """Base class for every error raised by recordism."""


class ValidationError(RecordismError, ValueError):
    """Invalid argument given to a builder method; raised before any SQL is compiled."""


class ConfigurationError(RecordismError, LookupError):
    """Unregistered model, relation or connection, or a setup that cannot be acted on."""


class AdapterError(RecordismError):
    """Statement execution failed in the connection adapter."""


class TransactionError(RecordismError):
    """Custom exception for transaction-related errors"""
