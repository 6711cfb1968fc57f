# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines all custom exception classes used by the cliroute engine.

Errors fall into two families. Configuration errors are developer mistakes in
how a handler or option was declared; they are raised at registration or first
compile time and are never turned into user-facing messages. Usage errors are
caused by the text a user typed on one invocation; the pipeline reports them
with a message and a nonzero exit code and never shows a traceback.

Exception Hierarchy:
- CliRouteError
    ├── CliConfigurationError
    │   ├── InvalidHookError
    │   └── InvalidActionError
    ├── TokenDecodingError
    └── CliUsageError
        ├── MissingOperandError
        ├── ConflictingValuesError
        ├── InvalidOperandError
        └── IncompleteMapEntryError

Help requests and cancellation are flow signals, see `cliroute.signals`.
"""


class CliRouteError(Exception):
    """Base exception for the cliroute engine."""


class CliConfigurationError(CliRouteError):
    """Raised when a handler, option or bundle is declared incorrectly."""


class InvalidHookError(CliConfigurationError):
    """Raised when a hook is not callable."""


class InvalidActionError(CliConfigurationError):
    """Raised when a handler action is not callable."""


class TokenDecodingError(CliRouteError):
    """Raised when a token map does not reach a fixed point while decoding."""


class CliUsageError(CliRouteError):
    """
    Raised when the command line supplied by the user cannot be bound.

    Args:
        message (str): Message shown to the user.
        exit_code (int): Process exit status reported for this error.
    """

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


class MissingOperandError(CliUsageError):
    """Raised when a required option or argument is absent."""


class ConflictingValuesError(CliUsageError):
    """Raised when a scalar option receives different values."""


class InvalidOperandError(CliUsageError):
    """Raised when a value cannot be converted to the declared type."""


class IncompleteMapEntryError(CliUsageError):
    """Raised when a map option is missing the key or the value of a pair."""
