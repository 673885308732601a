"""ANSI color codes for terminal log output.

All colors use the 256-color palette.

Usage:
    from chartdeck_core.logging.colors import YELLOW, RESET

    print(f"{YELLOW}Placeholder failed{RESET}")
"""

RESET = "\033[0m"

# Status
GREEN = "\033[38;5;82m"  # Success
RED = "\033[38;5;196m"  # Errors
YELLOW = "\033[38;5;226m"  # Warnings
ORANGE = "\033[38;5;208m"  # Unsafe evaluation

# Information
LIGHT_BLUE = "\033[38;5;153m"  # Debug and context payloads
CYAN = "\033[38;5;51m"  # Info
MAGENTA = "\033[38;5;201m"  # Config

__all__ = [
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
]
