"""
Mock Verifier for Testing

VTID: VTID-01212

An in-memory verifier for exercising the orchestrator without spawning
processes.
"""

import asyncio
import logging
from typing import List, Optional

from ..descriptor import InvocationSpec
from ..errors import VerifierLaunchError
from .base import BaseVerifier, UnitOutcome

logger = logging.getLogger(__name__)


class MockVerifier(BaseVerifier):
    """
    Mock verifier with a fixed outcome.

    Simulates a verifier that takes delay_ms to decide, then exits with
    exit_code and prints output. fail_launch simulates an executable that
    cannot be started.
    """

    def __init__(
        self,
        name: str,
        exit_code: int = 0,
        output: str = "",
        delay_ms: int = 0,
        fail_launch: bool = False,
        start_log: Optional[List[str]] = None,
    ):
        super().__init__(name)
        self.exit_code = exit_code
        self.output = output
        self.delay_ms = delay_ms
        self.fail_launch = fail_launch

        # Shared between mocks to observe start order
        self.start_log = start_log

        self.calls: List[InvocationSpec] = []
        self.cancelled = False

    @property
    def started(self) -> bool:
        return bool(self.calls)

    async def _invoke(self, invocation: InvocationSpec) -> UnitOutcome:
        self.calls.append(invocation)
        if self.start_log is not None:
            self.start_log.append(self.name)

        if self.fail_launch:
            return UnitOutcome.infra_failure(
                self.name, VerifierLaunchError(self.name, "failed to start: simulated")
            )

        try:
            await asyncio.sleep(self.delay_ms / 1000)
        except asyncio.CancelledError:
            self.cancelled = True
            logger.debug(f"Mock verifier {self.name} cancelled")
            raise

        reason = self.output.rstrip()
        if self.exit_code == 0:
            return UnitOutcome.accepted(self.name, reason)
        return UnitOutcome.rejected(self.name, self.exit_code, reason)
