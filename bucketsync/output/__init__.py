# bucketsync Output Module
# Rich console output

from bucketsync.output.console import Console, create_console, format_size

__all__ = [
    "Console",
    "create_console",
    "format_size",
]
