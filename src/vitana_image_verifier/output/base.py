"""
Base Output Formatter

VTID: VTID-01212
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict

from ..judgement import Judgement


class OutputLevel(Enum):
    """Output verbosity levels"""
    QUIET = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class BaseFormatter(ABC):
    """Base class for output formatters"""

    def __init__(self, level: OutputLevel = OutputLevel.NORMAL):
        self.level = level

    @abstractmethod
    def judgement(self, image_ref: str, judgement: Judgement, duration_ms: int = 0) -> None:
        """Format a verification judgement"""
        pass

    @abstractmethod
    def error(self, image_ref: str, error: Exception) -> None:
        """Format an infrastructure failure"""
        pass

    @abstractmethod
    def summary(self, stats: Dict[str, Any]) -> None:
        """Format summary statistics"""
        pass
