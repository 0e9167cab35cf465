"""
Color-coded logging for the API server.

Uses colorama for cross-platform terminal color support.
"""

import logging
import sys

from colorama import Fore, Style, init

init(autoreset=True)


# ---------------------------------------------------------------------------
# Color constants
# ---------------------------------------------------------------------------

class C:
    """Color shortcuts for console output."""
    HEADER = Fore.CYAN + Style.BRIGHT
    STEP = Fore.BLUE + Style.BRIGHT
    OK = Fore.GREEN + Style.BRIGHT
    WARN = Fore.YELLOW + Style.BRIGHT
    ERR = Fore.RED + Style.BRIGHT
    DIM = Style.DIM
    VALUE = Fore.GREEN
    RESET = Style.RESET_ALL


LEVEL_COLORS = {
    logging.DEBUG: C.DIM,
    logging.INFO: C.OK,
    logging.WARNING: C.WARN,
    logging.ERROR: C.ERR,
    logging.CRITICAL: C.ERR,
}


class ColorFormatter(logging.Formatter):
    """Formatter that colors the level name."""

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname_colored = f"{color}{record.levelname:<8}{C.RESET}"
        return super().format(record)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the root logger with a single colored stdout handler.

    Safe to call more than once; existing handlers installed by a previous
    call are left in place.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(getattr(h, "_report_api", False) for h in root.handlers):
        return root

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter(
        "[%(asctime)s] %(levelname_colored)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    handler._report_api = True
    root.addHandler(handler)
    return root


def banner(title: str, rows: list[tuple[str, str]]) -> None:
    """Print a bold startup header with label-value pairs."""
    print(f"\n{C.HEADER}{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}{C.RESET}")
    max_label = max(len(r[0]) for r in rows) if rows else 0
    for label, value in rows:
        print(f"  {label:<{max_label}}  {C.VALUE}{value}{C.RESET}")
    print()
