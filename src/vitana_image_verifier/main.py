"""
Configuration and Types for the Vitana Image Verifier

VTID: VTID-01212
"""

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ConfigurationError

# Ceiling on captured stdout/stderr per verifier
OUTPUT_LIMIT_BYTES = 1 << 15  # 32 KiB

DEFAULT_BIN_DIR = "/opt/vitana/image-verifier/bin"


class OutcomeKind(Enum):
    """Classification of a single verifier run"""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    INFRA_FAILURE = "infra_failure"


class ResolutionStatus(Enum):
    """How the verifier directory resolved for one call"""
    RESOLVED = "resolved"
    DISABLED = "disabled"  # max_verifiers == 0
    ABSENT = "absent"      # directory does not exist
    EMPTY = "empty"        # directory has no executables


def _optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class VerifierConfig:
    """
    Configuration for the image verifier.

    max_verifiers:
        negative -> run every verifier in bin_dir
        0        -> verification disabled
        N > 0    -> run the first N verifiers by name
    """
    bin_dir: Path = field(
        default_factory=lambda: Path(os.getenv("IMAGE_VERIFIER_BIN_DIR", DEFAULT_BIN_DIR))
    )
    max_verifiers: int = 10
    per_verifier_timeout_ms: int = 10000  # 10 seconds

    # None follows max_verifiers; negative means unbounded
    max_concurrent_verifiers: Optional[int] = None

    output_limit_bytes: int = OUTPUT_LIMIT_BYTES

    def __post_init__(self):
        self.bin_dir = Path(self.bin_dir)

    @property
    def per_verifier_timeout(self) -> float:
        """Per-verifier timeout in seconds"""
        return self.per_verifier_timeout_ms / 1000

    @property
    def concurrency_limit(self) -> Optional[int]:
        """Number of verifiers allowed to run at once, None when unbounded"""
        limit = self.max_concurrent_verifiers
        if limit is None:
            limit = self.max_verifiers
        if limit < 0:
            return None
        return limit

    def validate(self) -> None:
        """Raise ConfigurationError on values the verifier cannot run with"""
        if self.per_verifier_timeout_ms <= 0:
            raise ConfigurationError(
                f"per_verifier_timeout_ms must be positive, got {self.per_verifier_timeout_ms}"
            )
        if self.output_limit_bytes <= 0:
            raise ConfigurationError(
                f"output_limit_bytes must be positive, got {self.output_limit_bytes}"
            )
        if self.max_concurrent_verifiers == 0:
            raise ConfigurationError(
                "max_concurrent_verifiers cannot be 0; use max_verifiers=0 to disable verification"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for display"""
        return {
            "bin_dir": str(self.bin_dir),
            "max_verifiers": self.max_verifiers,
            "per_verifier_timeout_ms": self.per_verifier_timeout_ms,
            "max_concurrent_verifiers": self.max_concurrent_verifiers,
            "output_limit_bytes": self.output_limit_bytes,
        }

    @classmethod
    def from_yaml(cls, path: str) -> "VerifierConfig":
        """Load config from YAML file"""
        import yaml

        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"config file {path} must contain a mapping")

        unknown = sorted(set(data) - {fld.name for fld in fields(cls)})
        if unknown:
            raise ConfigurationError(f"unknown keys in config file {path}: {unknown}")

        config = cls(**data)
        config.validate()
        return config

    @classmethod
    def from_env(cls) -> "VerifierConfig":
        """Load config from environment variables"""
        config = cls(
            bin_dir=Path(os.getenv("IMAGE_VERIFIER_BIN_DIR", DEFAULT_BIN_DIR)),
            max_verifiers=int(os.getenv("IMAGE_VERIFIER_MAX_VERIFIERS", "10")),
            per_verifier_timeout_ms=int(os.getenv("IMAGE_VERIFIER_TIMEOUT_MS", "10000")),
            max_concurrent_verifiers=_optional_int(os.getenv("IMAGE_VERIFIER_MAX_CONCURRENT")),
        )
        config.validate()
        return config
