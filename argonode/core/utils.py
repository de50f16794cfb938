"""
Core utilities and helper functions.

This module contains common utility functions used throughout
the argonode system.
"""

import base64
import logging
import os
import sys
import tempfile
import time
from typing import Callable, Iterable, List, Optional, TypeVar

from colorama import Fore, Style, init

from argonode.core.errors import PollTimeoutError

T = TypeVar("T")


def safe_b64decode(data: str) -> bytes:
    """Safely decode base64 data with proper padding."""
    data = data.strip()
    padded = data + "=" * (-len(data) % 4)
    return base64.b64decode(padded)


def b64encode_text(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def mask_secret(value: str, keep: int = 8) -> str:
    """Mask a secret for logging, keeping only its first characters."""
    if not value:
        return ""
    if len(value) <= keep:
        return "*" * len(value)
    return value[:keep] + "*" * (len(value) - keep)


def poll_until(probe: Callable[[], Optional[T]], attempts: int = 30, interval: float = 1.0,
               sleep: Callable[[float], None] = time.sleep, what: str = "condition") -> T:
    """Call ``probe`` until it returns a non-None value or attempts run out.

    The probe is called at most ``attempts`` times with ``interval`` seconds
    between calls.

    Raises:
        PollTimeoutError: if every attempt returned None.
    """
    for attempt in range(attempts):
        result = probe()
        if result is not None:
            return result
        if attempt < attempts - 1:
            sleep(interval)
    raise PollTimeoutError(f"Failed to get {what} after {attempts} attempts", attempts)


def read_text(path: str) -> Optional[str]:
    """Read a whole text file, returning None if it does not exist yet."""
    try:
        with open(path, "r", encoding="utf-8", errors="ignore") as f:
            return f.read()
    except FileNotFoundError:
        return None


def write_text_atomic(path: str, content: str) -> None:
    """Replace ``path`` with ``content`` in one step.

    Raises:
        OSError: if the temporary file cannot be written or moved.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, temp_path = tempfile.mkstemp(prefix=".tmp_", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, path)
    except OSError:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise


def remove_files(paths: Iterable[str]) -> List[str]:
    """Remove each path that exists; return the ones actually removed."""
    removed = []
    for path in paths:
        try:
            os.remove(path)
            removed.append(path)
        except FileNotFoundError:
            continue
        except OSError as e:
            logging.getLogger(__name__).debug(f"Could not remove {path}: {e}")
    return removed


class ColoredFormatter(logging.Formatter):
    """Formatter with a color per log level."""

    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA + Style.BRIGHT,
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if color:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"
        return super().format(record)


def setup_logging(level: int = logging.INFO):
    """Setup colored console logging for the application."""
    init(autoreset=True)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredFormatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.addHandler(console_handler)

    # Reduce noise from external libraries
    logging.getLogger("urllib3.connectionpool").setLevel(logging.ERROR)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
