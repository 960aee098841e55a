"""
Logging setup for forge.

Log records go to stderr so command output on stdout stays clean. The
console is colored text or JSON lines; --log-file adds a plain-text copy
at debug level.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Optional

from forgekit.domain.config.models import BootstrapOptions, ColorMode, LogFormat

TRACE = 5
SILENT = logging.CRITICAL + 10

logging.addLevelName(TRACE, "TRACE")

LEVEL_NAMES = {
    "silent": SILENT,
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


class Colors:
    """ANSI escapes used by the console formatter."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    YELLOW = "\033[33m"
    BRIGHT_RED = "\033[91m"
    BG_RED = "\033[41m"


class ColoredFormatter(logging.Formatter):
    """
    Console formatter: level padded and colored, logger name dimmed.

    trace and debug are dim, info cyan, warn yellow, error red, fatal
    white on red.
    """

    LEVEL_COLORS = {
        TRACE: Colors.DIM + Colors.WHITE,
        logging.DEBUG: Colors.DIM + Colors.WHITE,
        logging.INFO: Colors.CYAN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
        logging.CRITICAL: Colors.BOLD + Colors.WHITE + Colors.BG_RED,
    }

    def __init__(self, fmt: str, datefmt: Optional[str] = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        levelname, name = record.levelname, record.name
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        record.levelname = f"{color}{levelname:8}{Colors.RESET}"
        record.name = f"{Colors.DIM}{name}{Colors.RESET}"
        try:
            return super().format(record)
        finally:
            # the file handler formats the same record
            record.levelname, record.name = levelname, name


class PlainFormatter(logging.Formatter):
    """Uncolored text for --log-file."""


class JsonFormatter(logging.Formatter):
    """One JSON object per line, for machine consumption."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _enable_windows_ansi():
    """Enable ANSI escape sequences on Windows."""
    if sys.platform == "win32":
        try:
            import ctypes
            kernel32 = ctypes.windll.kernel32
            kernel32.SetConsoleMode(kernel32.GetStdHandle(-12), 7)  # STD_ERROR_HANDLE
        except (AttributeError, OSError):
            pass  # older consoles stay uncolored


def resolve_log_level(options: BootstrapOptions) -> int:
    """
    Pick the effective console level.

    An explicit --log-level wins; otherwise --debug, --quiet and --silent
    apply in that order, defaulting to INFO.
    """
    if options.log_level:
        name = options.log_level.strip().lower()
        if name not in LEVEL_NAMES:
            raise ValueError(
                f"Invalid log level '{options.log_level}' (expected one of: {', '.join(LEVEL_NAMES)})"
            )
        return LEVEL_NAMES[name]
    if options.debug:
        return logging.DEBUG
    if options.quiet:
        return logging.WARNING
    if options.silent:
        return SILENT
    return logging.INFO


def level_name(level: int) -> str:
    """Lower-case name for a numeric level, as shown to commands."""
    for name, value in LEVEL_NAMES.items():
        if value == level:
            return name
    return logging.getLevelName(level).lower()


def use_colors(color: ColorMode, stream: IO) -> bool:
    if color is ColorMode.ALWAYS:
        return True
    if color is ColorMode.NEVER:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    level: int = logging.INFO,
    log_format: LogFormat = LogFormat.PRETTY,
    color: ColorMode = ColorMode.AUTO,
    log_file: Optional[str] = None,
    stream: Optional[IO] = None,
):
    """
    Configure application-wide logging.

    Args:
        level: Console logging level
        log_format: PRETTY (colored text) or JSON (one object per line)
        color: Color mode for the PRETTY format
        log_file: Optional path to a plain-text log file (always DEBUG)
        stream: Console stream, stderr by default
    """
    stream = stream or sys.stderr

    if log_format is LogFormat.JSON:
        console_formatter: logging.Formatter = JsonFormatter()
    else:
        colored = use_colors(color, stream)
        if colored:
            _enable_windows_ansi()
        console_formatter = ColoredFormatter(
            fmt="%(levelname)s [%(name)s] %(message)s",
            use_colors=colored,
        )

    file_formatter = PlainFormatter(
        fmt="[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(stream)
    console_handler.setFormatter(console_formatter)
    console_handler.setLevel(level)

    handlers = [console_handler]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(file_formatter)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    logging.basicConfig(
        level=TRACE,  # Capture all levels, handlers filter
        handlers=handlers,
        force=True,
    )

    logger = logging.getLogger(__name__)
    logger.debug("Log level: %s", level_name(level))
    if log_file:
        logger.debug("Log file: %s", log_file)
