"""
Pretty output formatting for the CLI.

Coloured terminal output for analysis summaries, digit tables, history
listings and comparisons.
"""

import os
from typing import Iterable, Sequence

from colorama import Fore, Style


class PrettyOutput:
    """
    Terminal formatter used by every CLI command.
    """

    # Color scheme
    PRIMARY = Fore.CYAN
    SUCCESS = Fore.GREEN
    WARNING = Fore.YELLOW
    ERROR = Fore.RED
    INFO = Fore.BLUE
    HEADER = Fore.WHITE + Style.BRIGHT
    DIM = Style.DIM
    RESET = Style.RESET_ALL

    # Symbols
    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    WARN = "⚠"
    INFO_SYMBOL = "ℹ"
    MAGNIFY = "🔍"

    RISK_COLORS = {
        "low": Fore.GREEN,
        "medium": Fore.YELLOW,
        "high": Fore.RED,
    }

    @staticmethod
    def get_terminal_width():
        """Get terminal width, default to 80 if it cannot be determined."""
        try:
            return os.get_terminal_size().columns
        except OSError:
            return 80

    @staticmethod
    def header(text, width=None):
        """
        Print a major header with box drawing.

        Args:
            text: Header text
            width: Box width (default: terminal width, at most 80)
        """
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)

        padding = (width - len(text) - 2) // 2
        line = "═" * width

        print(f"\n{PrettyOutput.PRIMARY}╔{line}╗")
        print(f"║{' ' * padding}{text}{' ' * (width - len(text) - padding)}║")
        print(f"╚{line}╝{PrettyOutput.RESET}\n")

    @staticmethod
    def section(text, width=None):
        """Print a section header."""
        if width is None:
            width = min(PrettyOutput.get_terminal_width(), 80)

        line = "─" * width
        print(f"\n{PrettyOutput.HEADER}{line}")
        print(f"{PrettyOutput.ARROW} {text}")
        print(f"{line}{PrettyOutput.RESET}\n")

    @staticmethod
    def success(message, indent=0):
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.SUCCESS}{PrettyOutput.CHECK}{PrettyOutput.RESET} {message}")

    @staticmethod
    def error(message, indent=0):
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ERROR}{PrettyOutput.CROSS}{PrettyOutput.RESET} {message}")

    @staticmethod
    def warning(message, indent=0):
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.WARNING}{PrettyOutput.WARN}{PrettyOutput.RESET} {message}")

    @staticmethod
    def info(message, indent=0):
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.INFO}{PrettyOutput.INFO_SYMBOL}{PrettyOutput.RESET} {message}")

    @staticmethod
    def key_value(key, value, indent=0, value_color=None):
        """
        Print a key-value pair.

        Args:
            key: Key text
            value: Value text
            indent: Indentation level
            value_color: Optional color for value
        """
        spaces = " " * indent
        if value_color:
            print(f"{spaces}{PrettyOutput.DIM}{key}:{PrettyOutput.RESET} {value_color}{value}{PrettyOutput.RESET}")
        else:
            print(f"{spaces}{PrettyOutput.DIM}{key}:{PrettyOutput.RESET} {value}")

    @staticmethod
    def risk_color(risk):
        """Color for a risk value ('low', 'medium', 'high')."""
        return PrettyOutput.RISK_COLORS.get(str(risk).lower(), PrettyOutput.PRIMARY)

    @staticmethod
    def summary_box(title, items, width=None):
        """
        Print a summary box.

        Args:
            title: Box title
            items: List of (key, value, color) tuples
            width: Box width (default: 60)
        """
        if width is None:
            width = 60

        print(f"\n{PrettyOutput.PRIMARY}┌{'─' * (width - 2)}┐{PrettyOutput.RESET}")

        title_padding = max((width - len(title) - 4) // 2, 0)
        trailing = max(width - len(title) - title_padding - 4, 0)
        print(f"{PrettyOutput.PRIMARY}│{PrettyOutput.RESET} {' ' * title_padding}{PrettyOutput.HEADER}{title}"
              f"{PrettyOutput.RESET}{' ' * trailing} {PrettyOutput.PRIMARY}│{PrettyOutput.RESET}")

        print(f"{PrettyOutput.PRIMARY}├{'─' * (width - 2)}┤{PrettyOutput.RESET}")

        for key, value, color in items:
            value_str = str(value)
            padding = max(width - len(key) - len(value_str) - 6, 1)
            print(f"{PrettyOutput.PRIMARY}│{PrettyOutput.RESET}  {PrettyOutput.DIM}{key}:{PrettyOutput.RESET}"
                  f"{' ' * padding}{color}{value_str}{PrettyOutput.RESET}  {PrettyOutput.PRIMARY}│{PrettyOutput.RESET}")

        print(f"{PrettyOutput.PRIMARY}└{'─' * (width - 2)}┘{PrettyOutput.RESET}\n")

    @staticmethod
    def bar(fraction, width=30, color=None):
        """Return a horizontal bar for a value between 0 and 1."""
        fraction = min(max(fraction, 0.0), 1.0)
        filled = int(round(width * fraction))
        color = color or PrettyOutput.PRIMARY
        return f"{color}{'█' * filled}{PrettyOutput.RESET}{PrettyOutput.DIM}{'░' * (width - filled)}{PrettyOutput.RESET}"

    @staticmethod
    def table(headers: Sequence[str], rows: Iterable[Sequence], indent=2):
        """
        Print a plain aligned table.

        Args:
            headers: Column headers
            rows: Row value sequences, converted with str()
            indent: Indentation spaces
        """
        rows = [[str(value) for value in row] for row in rows]
        widths = [len(header) for header in headers]
        for row in rows:
            for idx, value in enumerate(row):
                widths[idx] = max(widths[idx], len(value))

        spaces = " " * indent
        header_line = "  ".join(header.ljust(widths[idx]) for idx, header in enumerate(headers))
        print(f"{spaces}{PrettyOutput.HEADER}{header_line}{PrettyOutput.RESET}")
        print(f"{spaces}{PrettyOutput.DIM}{'  '.join('─' * w for w in widths)}{PrettyOutput.RESET}")
        for row in rows:
            print(spaces + "  ".join(value.ljust(widths[idx]) for idx, value in enumerate(row)))

    @staticmethod
    def blank_line():
        print()

    @staticmethod
    def task_start(message, icon=None):
        """Print a task starting message with an icon (default: magnifying glass)."""
        icon = icon or PrettyOutput.MAGNIFY
        print(f"\n{icon} {PrettyOutput.HEADER}{message}{PrettyOutput.RESET}")

    @staticmethod
    def task_complete(message, duration=None):
        if duration is not None:
            print(f"{PrettyOutput.SUCCESS}{PrettyOutput.CHECK}{PrettyOutput.RESET} {message} "
                  f"{PrettyOutput.DIM}({duration:.1f}s){PrettyOutput.RESET}")
        else:
            print(f"{PrettyOutput.SUCCESS}{PrettyOutput.CHECK}{PrettyOutput.RESET} {message}")

    @staticmethod
    def output_file(label, path, indent=2):
        """
        Print an output file path.

        Args:
            label: File type label (e.g. "JSON")
            path: File path
            indent: Indentation spaces
        """
        spaces = " " * indent
        print(f"{spaces}{PrettyOutput.ARROW} {PrettyOutput.DIM}{label}:{PrettyOutput.RESET} {path}")

    @staticmethod
    def finding(message, severity="info", indent=4):
        """
        Print a finding.

        Args:
            message: Finding text
            severity: One of "high", "medium", "low", "info"
            indent: Indentation spaces
        """
        spaces = " " * indent
        icons = {
            "high": f"{Fore.RED}●{PrettyOutput.RESET}",
            "medium": f"{Fore.YELLOW}●{PrettyOutput.RESET}",
            "low": f"{Fore.GREEN}●{PrettyOutput.RESET}",
            "info": f"{PrettyOutput.DIM}•{PrettyOutput.RESET}",
        }
        icon = icons.get(severity, icons["info"])
        print(f"{spaces}{icon} {message}")
