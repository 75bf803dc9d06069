"""
Console Output Formatter

VTID: VTID-01212

Colored console output for the CLI.
"""

import json
import sys
from typing import Any, Dict, Optional, TextIO

from .base import BaseFormatter, OutputLevel
from ..judgement import Judgement


class ConsoleFormatter(BaseFormatter):
    """
    Console formatter with colored output.

    Uses ANSI escape codes for colors in terminal environments.
    Falls back to plain text when not in a TTY.
    """

    COLORS = {
        "reset": "\033[0m",
        "bold": "\033[1m",
        "dim": "\033[2m",
        "green": "\033[32m",
        "yellow": "\033[33m",
        "red": "\033[31m",
    }

    def __init__(
        self,
        level: OutputLevel = OutputLevel.NORMAL,
        use_colors: bool = True,
        stream: Optional[TextIO] = None,
    ):
        super().__init__(level)
        self.stream = stream or sys.stdout
        self.use_colors = use_colors and self.stream.isatty()

    def _c(self, color: str, text: str) -> str:
        """Apply color to text"""
        if self.use_colors:
            return f"{self.COLORS.get(color, '')}{text}{self.COLORS['reset']}"
        return text

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def judgement(self, image_ref: str, judgement: Judgement, duration_ms: int = 0) -> None:
        """Format a verification judgement"""
        if judgement.ok:
            symbol = self._c("green", "✓")
            status = self._c("green", "ACCEPTED")
        else:
            symbol = self._c("red", "✗")
            status = self._c("red", "REJECTED")

        duration = ""
        if duration_ms and self.level.value >= OutputLevel.VERBOSE.value:
            duration = self._c("dim", f" ({duration_ms}ms)")

        self._print(f"{symbol} {image_ref} {status}{duration}")
        if judgement.reason and self.level != OutputLevel.QUIET:
            self._print(f"  {self._c('dim', 'Reason:')} {judgement.reason}")

    def error(self, image_ref: str, error: Exception) -> None:
        """Format an infrastructure failure"""
        symbol = self._c("red", "✗")
        self._print(f"{symbol} {image_ref} {self._c('red', 'ERROR')}")
        self._print(f"  {self._c('red', 'Error:')} {error}")

    def summary(self, stats: Dict[str, Any]) -> None:
        """Format summary statistics"""
        if self.level.value < OutputLevel.VERBOSE.value:
            return

        self._print()
        self._print(self._c("bold", "  Verifiers:"))
        self._print(f"    Invoked:  {stats.get('verifiers_invoked', 0)}")
        self._print(f"    Skipped:  {self._c('yellow', str(stats.get('verifiers_skipped', 0)))}")


class JsonFormatter(BaseFormatter):
    """Machine-readable output, one JSON object per judgement"""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL, stream: Optional[TextIO] = None):
        super().__init__(level)
        self.stream = stream or sys.stdout

    def judgement(self, image_ref: str, judgement: Judgement, duration_ms: int = 0) -> None:
        data = {"image_ref": image_ref, **judgement.to_dict(), "duration_ms": duration_ms}
        print(json.dumps(data), file=self.stream)

    def error(self, image_ref: str, error: Exception) -> None:
        data = {"image_ref": image_ref, "ok": None, "error": str(error)}
        print(json.dumps(data), file=self.stream)

    def summary(self, stats: Dict[str, Any]) -> None:
        pass
