# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Defines flow control signals used internally by the cliroute execution pipeline.

These signals interrupt the pipeline (displaying help, cancelling an invocation)
without being treated as traditional exceptions. The pipeline always converts
them into a terminal state; they never escape `CliProcessor.process`.

All signals inherit from `FlowSignal`, which is a subclass of `BaseException`
to ensure they bypass standard `except Exception` blocks.

Signals:
- HelpSignal: Render help for the selected handler and stop.
- CancelSignal: Cancel the current invocation.
"""


class FlowSignal(BaseException):
    """Base class for all flow control signals in cliroute.

    These are not errors. They are raised by hooks, bundles or handlers to
    steer the pipeline into a terminal state.
    """


class HelpSignal(FlowSignal):
    """Raised to display help information instead of invoking a handler."""

    def __init__(self, message: str = "Help signal received."):
        super().__init__(message)


class CancelSignal(FlowSignal):
    """Raised to cancel the current invocation."""

    def __init__(self, message: str = "Cancel signal received."):
        super().__init__(message)
