"""
Vitana Image Verifier - Core Orchestration Logic

VTID: VTID-01212

Runs every configured verifier against an image and folds their decisions
into a single Judgement. Verifiers run concurrently; the first rejection or
infrastructure failure cancels the rest.
"""

import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from .adapters.base import BaseVerifier, UnitOutcome
from .adapters.process import ProcessVerifier
from .descriptor import ContentDescriptor, InvocationSpec, encode_descriptor
from .errors import ImageVerifierError, VerificationTimeoutError
from .judgement import Judgement, accepted_reason, no_policy_reason, rejected_reason
from .main import OutcomeKind, VerifierConfig
from .resolver import VerifierUnit, resolve_units

logger = logging.getLogger(__name__)

VerifierFactory = Callable[[VerifierUnit], BaseVerifier]


class ImageVerifier:
    """
    Image admission verifier backed by a directory of executables.

    Per call:
    1. Resolve - list bin_dir, order by name, apply max_verifiers
    2. Encode - build the descriptor payload and arguments once
    3. Dispatch - run verifiers concurrently up to the concurrency limit
    4. Aggregate - first rejection wins, first infra failure raises,
       otherwise join accept reasons in name order

    Nothing is cached between calls; the directory is listed every time.
    """

    def __init__(
        self,
        config: Optional[VerifierConfig] = None,
        verifier_factory: Optional[VerifierFactory] = None,
    ):
        self.config = config or VerifierConfig()
        self.config.validate()
        self._verifier_factory = verifier_factory or self._process_verifier

        # Statistics
        self._stats = {
            "verifications": 0,
            "verifications_accepted": 0,
            "verifications_rejected": 0,
            "verifications_errored": 0,
            "verifiers_invoked": 0,
            "verifiers_skipped": 0,
        }

        logger.info(
            f"Image verifier initialized - bin_dir={self.config.bin_dir} "
            f"max_verifiers={self.config.max_verifiers} "
            f"timeout={self.config.per_verifier_timeout_ms}ms"
        )

    def _process_verifier(self, unit: VerifierUnit) -> BaseVerifier:
        return ProcessVerifier(unit, output_limit_bytes=self.config.output_limit_bytes)

    # =========================================================================
    # Verification
    # =========================================================================

    async def verify_image(
        self,
        image_ref: str,
        descriptor: ContentDescriptor,
        timeout: Optional[float] = None,
    ) -> Judgement:
        """
        Verify an image against every configured verifier.

        Args:
            image_ref: Image reference, e.g. registry.example.com/image:tag
            descriptor: Content descriptor of the image
            timeout: Optional overall deadline in seconds

        Returns:
            Judgement; a rejection is ok=False, not an exception

        Raises:
            ImageVerifierError: A verifier could not be launched, timed out,
                or the overall deadline passed
            asyncio.CancelledError: The caller cancelled the verification
        """
        self._stats["verifications"] += 1

        try:
            if timeout is None:
                judgement = await self._verify(image_ref, descriptor)
            else:
                try:
                    judgement = await asyncio.wait_for(
                        self._verify(image_ref, descriptor), timeout=timeout
                    )
                except asyncio.TimeoutError:
                    raise VerificationTimeoutError(
                        f"verification of {image_ref} timed out after {timeout:.3f}s"
                    )
        except ImageVerifierError as e:
            self._stats["verifications_errored"] += 1
            logger.error(f"Image verification failed for {image_ref}: {e}")
            raise

        if judgement.ok:
            self._stats["verifications_accepted"] += 1
        else:
            self._stats["verifications_rejected"] += 1
        return judgement

    async def _verify(self, image_ref: str, descriptor: ContentDescriptor) -> Judgement:
        resolution = resolve_units(self.config.bin_dir, self.config.max_verifiers)
        self._stats["verifiers_skipped"] += len(resolution.skipped)

        if not resolution.units:
            return Judgement(
                ok=True,
                reason=no_policy_reason(resolution.status, resolution.bin_dir),
            )

        invocation = encode_descriptor(image_ref, descriptor)
        verifiers = [self._verifier_factory(unit) for unit in resolution.units]

        logger.info(
            f"Verifying {image_ref} ({descriptor.digest}) with "
            f"{len(verifiers)} verifier(s): {list(resolution.names)}"
        )

        slots, terminal = await self._dispatch(verifiers, invocation)

        if terminal is None:
            return Judgement(ok=True, reason=accepted_reason(slots))

        if terminal.kind == OutcomeKind.INFRA_FAILURE:
            raise terminal.error

        logger.info(
            f"Verifier {terminal.verifier} rejected {image_ref} "
            f"(exit code {terminal.exit_code})"
        )
        return Judgement(
            ok=False,
            reason=rejected_reason(terminal.verifier, terminal.exit_code, terminal.reason),
        )

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def _dispatch(
        self,
        verifiers: List[BaseVerifier],
        invocation: InvocationSpec,
    ) -> Tuple[List[Optional[UnitOutcome]], Optional[UnitOutcome]]:
        """
        Run verifiers concurrently, stopping at the first terminal outcome.

        Outcomes land in slots indexed by resolution order so the accept
        reason never depends on completion order. When several outcomes
        complete in the same step, the lowest index is looked at first.

        Returns:
            (slots, terminal) where terminal is the rejection or infra
            failure that stopped the run, or None if everything accepted
        """
        slots: List[Optional[UnitOutcome]] = [None] * len(verifiers)
        semaphore = self._make_semaphore(len(verifiers))
        timeout = self.config.per_verifier_timeout

        index: Dict[asyncio.Future, int] = {}
        for i, verifier in enumerate(verifiers):
            task = asyncio.ensure_future(
                self._run_verifier(verifier, invocation, timeout, semaphore)
            )
            index[task] = i

        pending: Set[asyncio.Future] = set(index)
        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                for task in sorted(done, key=index.__getitem__):
                    outcome = task.result()
                    slots[index[task]] = outcome
                    if outcome.kind != OutcomeKind.ACCEPTED:
                        return slots, outcome
            return slots, None
        finally:
            await self._cancel(pending)

    async def _run_verifier(
        self,
        verifier: BaseVerifier,
        invocation: InvocationSpec,
        timeout: float,
        semaphore: Optional[asyncio.Semaphore],
    ) -> UnitOutcome:
        if semaphore is None:
            self._stats["verifiers_invoked"] += 1
            return await verifier.verify(invocation, timeout)

        async with semaphore:
            self._stats["verifiers_invoked"] += 1
            return await verifier.verify(invocation, timeout)

    def _make_semaphore(self, count: int) -> Optional[asyncio.Semaphore]:
        """Semaphore for the concurrency limit, None when it would never block"""
        limit = self.config.concurrency_limit
        if limit is None or limit <= 0 or limit >= count:
            return None
        return asyncio.Semaphore(limit)

    async def _cancel(self, tasks: Set[asyncio.Future]) -> None:
        """Cancel outstanding verifiers and wait for their processes to die"""
        if not tasks:
            return
        logger.debug(f"Cancelling {len(tasks)} outstanding verifier(s)")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    # =========================================================================
    # Statistics
    # =========================================================================

    def get_stats(self) -> Dict[str, Any]:
        """Get verifier statistics"""
        return dict(self._stats)
