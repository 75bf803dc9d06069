"""
Logging Configuration

VTID: VTID-01212

Centralized logging setup for the image verifier.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class VerifierFormatter(logging.Formatter):
    """Custom formatter with color support and structured output"""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        # Pad before coloring; escape codes would count toward the width
        level = f"{record.levelname:8}"
        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            level = f"{color}{level}{self.RESET}"

        # Format: [TIME] LEVEL [module] message
        parts = [
            f"[{timestamp}]",
            level,
            f"[{record.name}]",
            record.getMessage(),
        ]

        if record.exc_info:
            parts.append(self.formatException(record.exc_info))

        return " ".join(parts)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    use_colors: bool = True,
) -> None:
    """
    Configure logging for the image verifier.

    Console output goes to stderr so stdout stays free for judgements.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        use_colors: Enable colored console output
    """
    root_logger = logging.getLogger("vitana_image_verifier")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(VerifierFormatter(use_colors=use_colors))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(VerifierFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    # Quiet the HTTP stack
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    root_logger.debug("Logging configured")


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance"""
    return logging.getLogger(f"vitana_image_verifier.{name}")
