# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""Global console instances for cliroute applications."""
from rich.console import Console

from cliroute.themes import get_nord_theme

console = Console(color_system="truecolor", theme=get_nord_theme())
error_console = Console(color_system="truecolor", theme=get_nord_theme(), stderr=True)
