"""Centralized Rich Console management."""

from rich.console import Console

_console: Console | None = None


def get_console() -> Console:
    """Get or create the global Rich Console instance.

    Returns:
        Console: The global Rich Console instance
    """
    global _console
    if _console is None:
        _console = Console()
    return _console


def safe_print(message: str, style: str | None = None, markup: bool = True) -> None:
    """Print using Rich Console with optional styling.

    Args:
        message: The message to print
        style: Optional Rich style string (e.g., "bold red", "green")
        markup: Interpret Rich markup; disable for text containing file names
    """
    console = get_console()
    if style:
        console.print(message, style=style, markup=markup)
    else:
        console.print(message, markup=markup)
