"""
Output Formatting

Provides formatted judgement output for the console.
"""

from .base import BaseFormatter, OutputLevel
from .console import ConsoleFormatter, JsonFormatter

__all__ = [
    "BaseFormatter",
    "OutputLevel",
    "ConsoleFormatter",
    "JsonFormatter",
]
