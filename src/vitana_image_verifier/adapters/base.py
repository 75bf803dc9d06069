"""
Base Verifier Interface

VTID: VTID-01212

All verifier adapters must implement this interface. The orchestrator only
ever talks to verifiers through it.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..descriptor import InvocationSpec
from ..errors import VerifierError, VerifierTimeoutError
from ..main import OutcomeKind

logger = logging.getLogger(__name__)


@dataclass
class UnitOutcome:
    """Outcome of running one verifier"""
    verifier: str
    kind: OutcomeKind
    reason: str = ""
    exit_code: Optional[int] = None
    error: Optional[VerifierError] = None
    diagnostics: str = ""  # stderr, never part of a Judgement
    truncated: bool = False
    duration_ms: int = 0

    @classmethod
    def accepted(cls, verifier: str, reason: str, **kwargs) -> "UnitOutcome":
        return cls(verifier=verifier, kind=OutcomeKind.ACCEPTED, reason=reason, exit_code=0, **kwargs)

    @classmethod
    def rejected(cls, verifier: str, exit_code: int, reason: str, **kwargs) -> "UnitOutcome":
        return cls(
            verifier=verifier,
            kind=OutcomeKind.REJECTED,
            reason=reason,
            exit_code=exit_code,
            **kwargs,
        )

    @classmethod
    def infra_failure(cls, verifier: str, error: VerifierError, **kwargs) -> "UnitOutcome":
        return cls(verifier=verifier, kind=OutcomeKind.INFRA_FAILURE, error=error, **kwargs)

    @property
    def is_accepted(self) -> bool:
        return self.kind == OutcomeKind.ACCEPTED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "verifier": self.verifier,
            "kind": self.kind.value,
            "reason": self.reason,
            "exit_code": self.exit_code,
            "error": str(self.error) if self.error else None,
            "truncated": self.truncated,
            "duration_ms": self.duration_ms,
        }


class BaseVerifier(ABC):
    """
    Base class for all verifiers.

    A verifier accepts or rejects an image given its name, digest and
    descriptor payload. Subclasses implement _invoke(); verify() applies the
    per-verifier timeout and records timing.
    """

    def __init__(self, name: str):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def verify(self, invocation: InvocationSpec, timeout: float) -> UnitOutcome:
        """
        Run the verifier under a deadline.

        Args:
            invocation: Shared arguments and payload for this call
            timeout: Per-verifier timeout in seconds

        Returns:
            UnitOutcome; timeouts come back as INFRA_FAILURE, not as exceptions
        """
        start = time.monotonic()
        try:
            outcome = await asyncio.wait_for(self._invoke(invocation), timeout=timeout)
        except asyncio.TimeoutError:
            outcome = UnitOutcome.infra_failure(
                self.name,
                VerifierTimeoutError(self.name, f"timed out after {timeout:.3f}s"),
            )
        outcome.duration_ms = int((time.monotonic() - start) * 1000)

        logger.debug(
            f"Verifier {self.name} finished: {outcome.kind.value} "
            f"(exit code {outcome.exit_code}) in {outcome.duration_ms}ms"
        )
        return outcome

    @abstractmethod
    async def _invoke(self, invocation: InvocationSpec) -> UnitOutcome:
        """
        Run the verifier to completion.

        Must release everything it started when cancelled.
        """
        pass
