# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""importer.py
Resolves dotted import paths used by config files ("my.module.func")."""
from __future__ import annotations

import importlib
from typing import Any

from cliroute.exceptions import CliConfigurationError
from cliroute.logger import logger


def resolve_dotted_path(dotted_path: str) -> Any:
    """
    Import the object named by `dotted_path`.

    Raises:
        CliConfigurationError: If the module or attribute cannot be found.
    """
    module_path, _, attr = dotted_path.rpartition(".")
    if not module_path or not attr:
        raise CliConfigurationError(f"Invalid import path: '{dotted_path}'")
    try:
        module = importlib.import_module(module_path)
    except ModuleNotFoundError as error:
        logger.error("Failed to import module '%s': %s", module_path, error)
        raise CliConfigurationError(
            f"Could not import '{dotted_path}': {error}. Ensure the module is "
            "installed and discoverable via PYTHONPATH."
        ) from error
    try:
        return getattr(module, attr)
    except AttributeError as error:
        logger.error("Module '%s' does not have attribute '%s': %s", module_path, attr, error)
        raise CliConfigurationError(
            f"Module '{module_path}' has no attribute '{attr}'."
        ) from error


def resolve_action(dotted_path: str) -> Any:
    """Import a handler action and check that it is callable."""
    action = resolve_dotted_path(dotted_path)
    if not callable(action):
        raise CliConfigurationError(f"'{dotted_path}' is not callable.")
    return action
