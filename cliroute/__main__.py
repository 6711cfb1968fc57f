"""
Cliroute CLI Routing Engine

Copyright (c) 2025 rtj.dev LLC.
Licensed under the MIT License. See LICENSE file for details.
"""

import asyncio
import os
import sys
from pathlib import Path
from typing import Any

from cliroute.config import loader
from cliroute.console import error_console
from cliroute.exceptions import CliConfigurationError
from cliroute.utils import setup_logging


def find_cliroute_config() -> Path | None:
    candidates = [
        Path(os.environ["CLIROUTE_CONFIG"]) if os.environ.get("CLIROUTE_CONFIG") else None,
        Path.cwd() / "cliroute.yaml",
        Path.cwd() / "cliroute.toml",
        Path.cwd() / ".cliroute.yaml",
        Path.cwd() / ".cliroute.toml",
        Path.home() / ".config" / "cliroute" / "cliroute.yaml",
        Path.home() / ".config" / "cliroute" / "cliroute.toml",
    ]
    return next((path for path in candidates if path and path.is_file()), None)


def bootstrap() -> Path | None:
    config_path = find_cliroute_config()
    if config_path and str(config_path.parent) not in sys.path:
        sys.path.insert(0, str(config_path.parent))
    return config_path


def main(argv: list[str] | None = None) -> Any:
    setup_logging(log_filename=None)
    config_path = bootstrap()
    if not config_path:
        error_console.print(
            "[error]No cliroute config found.[/] Create cliroute.yaml or set CLIROUTE_CONFIG."
        )
        sys.exit(1)
    try:
        processor = loader(config_path)
    except (CliConfigurationError, ValueError) as error:
        error_console.print(f"[error]Invalid config {config_path}:[/] {error}")
        sys.exit(1)
    return asyncio.run(processor.run(argv))


if __name__ == "__main__":
    main()
