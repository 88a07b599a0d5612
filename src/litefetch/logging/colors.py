"""ANSI color codes for terminal output.

Usage:
    from litefetch.logging.colors import GREEN, RED, RESET

    print(f"{GREEN}fetched{RESET}")
"""

RESET = "\033[0m"

# Status
GREEN = "\033[38;5;82m"  # Success - bright green
RED = "\033[38;5;196m"  # Failure - bright red
YELLOW = "\033[38;5;226m"  # Warnings - bright yellow
ORANGE = "\033[38;5;208m"  # Cache events - orange

# Information
LIGHT_BLUE = "\033[38;5;153m"  # Context dumps - light blue
CYAN = "\033[38;5;51m"
MAGENTA = "\033[38;5;201m"
GREY = "\033[38;5;245m"  # Cancellation - muted

__all__ = [
    "RESET",
    "GREEN",
    "RED",
    "YELLOW",
    "ORANGE",
    "LIGHT_BLUE",
    "CYAN",
    "MAGENTA",
    "GREY",
]
