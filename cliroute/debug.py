# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""debug.py"""
from cliroute.context import ExecutionContext
from cliroute.hook_manager import HookManager, HookType
from cliroute.logger import logger


def log_before(context: ExecutionContext):
    """Log the start of a handler invocation."""
    logger.info("[%s] Starting -> %s", context.name, context.signature)


def log_success(context: ExecutionContext):
    """Log the successful completion of a handler."""
    result_str = repr(context.result)
    if len(result_str) > 100:
        result_str = f"{result_str[:100]} ..."
    logger.debug("[%s] Success -> Result: %s", context.name, result_str)


def log_after(context: ExecutionContext):
    """Log the completion of a handler, regardless of success or failure."""
    logger.debug("[%s] Finished in %.3fs", context.name, context.duration)


def log_error(context: ExecutionContext):
    """Log an error raised by the handler."""
    logger.error(
        "[%s] Error (%s): %s",
        context.name,
        type(context.exception).__name__,
        context.exception,
        exc_info=context.exception,
    )


def register_debug_hooks(hooks: HookManager):
    hooks.register(HookType.BEFORE, log_before)
    hooks.register(HookType.AFTER, log_after)
    hooks.register(HookType.ON_SUCCESS, log_success)
    hooks.register(HookType.ON_ERROR, log_error)
