# Cliroute CLI Routing Engine — (c) 2025 rtj.dev LLC — MIT Licensed
"""
Color palettes used by cliroute output.

`OneColors` holds the hex values used in inline rich markup such as
`f"[{OneColors.DARK_RED}]error[/]"`. Names ending in `_b` are the bold
variants. `NordColors` backs the rich `Theme` returned by `get_nord_theme`,
which the shared consoles in `cliroute.console` are built with.
"""
from rich.style import Style
from rich.theme import Theme


class OneColors:
    """One Dark inspired colors for inline markup."""

    BLACK = "#282C34"
    WHITE = "#ABB2BF"
    COMMENT_GREY = "#5C6370"
    DARK_RED = "#BE5046"
    LIGHT_RED = "#E06C75"
    GREEN = "#98C379"
    DARK_YELLOW = "#D19A66"
    LIGHT_YELLOW = "#E5C07B"
    BLUE = "#61AFEF"
    MAGENTA = "#C678DD"
    CYAN = "#56B6C2"

    BLACK_b = f"bold {BLACK}"
    WHITE_b = f"bold {WHITE}"
    DARK_RED_b = f"bold {DARK_RED}"
    LIGHT_RED_b = f"bold {LIGHT_RED}"
    GREEN_b = f"bold {GREEN}"
    DARK_YELLOW_b = f"bold {DARK_YELLOW}"
    LIGHT_YELLOW_b = f"bold {LIGHT_YELLOW}"
    BLUE_b = f"bold {BLUE}"
    MAGENTA_b = f"bold {MAGENTA}"
    CYAN_b = f"bold {CYAN}"


class NordColors:
    """Nord palette, grouped the way the Nord documentation names it."""

    POLAR_NIGHT_ORIGIN = "#2E3440"
    POLAR_NIGHT_BRIGHT = "#3B4252"
    POLAR_NIGHT_BRIGHTER = "#434C5E"
    POLAR_NIGHT_BRIGHTEST = "#4C566A"

    SNOW_STORM_BRIGHT = "#D8DEE9"
    SNOW_STORM_BRIGHTER = "#E5E9F0"
    SNOW_STORM_BRIGHTEST = "#ECEFF4"

    FROST_TEAL = "#8FBCBB"
    FROST_ICE = "#88C0D0"
    FROST_SKY = "#81A1C1"
    FROST_DEEP = "#5E81AC"

    AURORA_RED = "#BF616A"
    AURORA_ORANGE = "#D08770"
    AURORA_YELLOW = "#EBCB8B"
    AURORA_GREEN = "#A3BE8C"
    AURORA_PURPLE = "#B48EAD"


def get_nord_theme() -> Theme:
    """Return a rich Theme mapping semantic style names to the Nord palette."""
    return Theme(
        {
            "title": Style(color=NordColors.FROST_ICE, bold=True),
            "usage": Style(color=NordColors.FROST_TEAL, bold=True),
            "route": Style(color=NordColors.FROST_SKY),
            "argument": Style(color=NordColors.AURORA_YELLOW),
            "option": Style(color=NordColors.AURORA_GREEN),
            "muted": Style(color=NordColors.POLAR_NIGHT_BRIGHTEST),
            "hint": Style(color=NordColors.SNOW_STORM_BRIGHT, italic=True),
            "error": Style(color=NordColors.AURORA_RED, bold=True),
            "warning": Style(color=NordColors.AURORA_ORANGE),
            "success": Style(color=NordColors.AURORA_GREEN),
            "repr.number": Style(color=NordColors.AURORA_PURPLE),
            "log.level": Style(color=NordColors.FROST_DEEP),
        }
    )
