"""
Display management for console output formatting and colors.

This module provides a centralized way to handle console output with consistent
formatting, colors, and icons for different message types, together with the
pure helpers used to render sizes, timestamps and masked configuration values.
"""

import sys
from datetime import datetime
from typing import Optional, TextIO

from colorama import Fore, Style, init as colorama_init

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
MASKED_SECRET = "****"
NOT_SET = "(not set)"


def format_size(size_bytes: int) -> str:
    """
    Render a byte count with one decimal digit and a binary unit.

    The value is divided by 1024 while the rounded quotient is still at
    least 1, so 1536 renders as ``1.5 KB`` and 0 as ``0.0 B``.
    """
    number = float(size_bytes)
    unit = 0
    while round(number / 1024) >= 1 and unit < len(SIZE_UNITS) - 1:
        number /= 1024
        unit += 1
    return f"{number:,.1f} {SIZE_UNITS[unit]}"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return "unknown"
    return f"{value:%Y-%m-%d %H:%M:%S} UTC"


def mask_value(name: str, value: Optional[str]) -> str:
    """
    Mask a configuration value for diagnostic output.

    Secrets are never shown, not even partially. Long identifiers are cut to
    their first 8 characters.
    """
    if not value:
        return NOT_SET
    if "SECRET" in name.upper():
        return MASKED_SECRET
    if len(value) > 20:
        return f"{value[:8]}..."
    return value


class DisplayManager:
    """Handles console output formatting and colors."""

    def __init__(self, stream: Optional[TextIO] = None):
        """Initialize colorama for cross-platform color support."""
        self.stream = stream
        if stream is None:
            colorama_init(autoreset=True)

    def _write(self, content: str) -> None:
        print(content, file=self.stream or sys.stdout)

    def print_error(self, content: str) -> None:
        """Print content in red color for errors."""
        self._write(f"{Fore.RED}❌ {content}{Style.RESET_ALL}")

    def print_success(self, content: str) -> None:
        """Print content in green color for success messages."""
        self._write(f"{Fore.GREEN}✅ {content}{Style.RESET_ALL}")

    def print_info(self, content: str) -> None:
        """Print content in yellow color for informational messages."""
        self._write(f"{Fore.YELLOW}ℹ️  {content}{Style.RESET_ALL}")

    def print_warning(self, content: str) -> None:
        """Print content in magenta color for warnings."""
        self._write(f"{Fore.MAGENTA}⚠️  {content}{Style.RESET_ALL}")

    def print_plain(self, content: str = "") -> None:
        self._write(content)

    def print_section(self, content: str) -> None:
        """Print a numbered report section header."""
        self._write(f"\n{Fore.CYAN}{Style.BRIGHT}{content}{Style.RESET_ALL}")

    def print_detail(self, label: str, value, indent: int = 3) -> None:
        self._write(f"{' ' * indent}{label}: {value}")

    def print_banner(self, title: str) -> None:
        self._write(title)
        self._write("=" * len(title))
