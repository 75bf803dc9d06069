"""
Process Verifier Adapter

VTID: VTID-01212

Runs a verifier executable as a subprocess. This is the only place that
knows about exit codes, pipes and process groups; everything above it sees a
UnitOutcome.
"""

import asyncio
import logging
import os
import signal
from typing import Tuple

from ..descriptor import InvocationSpec
from ..errors import VerifierInvocationError, VerifierLaunchError
from ..main import OUTPUT_LIMIT_BYTES
from ..resolver import VerifierUnit
from .base import BaseVerifier, UnitOutcome

logger = logging.getLogger(__name__)

_READ_CHUNK_BYTES = 64 * 1024

# How long to wait for a killed verifier to be reaped
_REAP_GRACE_SECONDS = 1.0


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """SIGKILL the verifier's entire process group."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass  # already dead


class ProcessVerifier(BaseVerifier):
    """
    Verifier backed by an executable file.

    Invoked as:
        <path> -name <image_ref> -digest <digest> -stdin-media-type <type>

    with the descriptor JSON on stdin. Exit 0 accepts, anything else rejects.
    Stdout becomes the reason; stderr is logged at debug level only.
    """

    def __init__(self, unit: VerifierUnit, output_limit_bytes: int = OUTPUT_LIMIT_BYTES):
        super().__init__(unit.name)
        self.path = unit.path
        self.output_limit_bytes = output_limit_bytes

    async def _invoke(self, invocation: InvocationSpec) -> UnitOutcome:
        try:
            proc = await asyncio.create_subprocess_exec(
                str(self.path),
                *invocation.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=True,  # own process group, see _kill_group
            )
        except OSError as e:
            return UnitOutcome.infra_failure(
                self.name, VerifierLaunchError(self.name, f"failed to start: {e}")
            )

        finished = False
        writer = asyncio.ensure_future(self._write_payload(proc, invocation.payload))
        readers = [
            asyncio.ensure_future(self._read_bounded(proc.stdout)),
            asyncio.ensure_future(self._read_bounded(proc.stderr)),
        ]
        try:
            (stdout, truncated), (stderr, _) = await asyncio.gather(*readers)
            exit_code = await proc.wait()
            finished = True
        except OSError as e:
            return UnitOutcome.infra_failure(
                self.name, VerifierInvocationError(self.name, f"waiting on process: {e}")
            )
        finally:
            if not finished:
                _kill_group(proc)
                await self._reap(proc)
            tasks = [writer, *readers]
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        diagnostics = self._log_diagnostics(stderr)
        reason = stdout.decode("utf-8", errors="replace").rstrip()

        if truncated:
            logger.warning(
                f"Output of verifier {self.name} exceeded {self.output_limit_bytes} bytes, truncated"
            )

        if exit_code == 0:
            return UnitOutcome.accepted(
                self.name, reason, diagnostics=diagnostics, truncated=truncated
            )
        return UnitOutcome.rejected(
            self.name, exit_code, reason, diagnostics=diagnostics, truncated=truncated
        )

    async def _reap(self, proc: asyncio.subprocess.Process) -> None:
        """
        Wait a bounded time for a killed verifier.

        A descendant that moved to its own session survives the group kill
        and can hold the pipes open, which keeps proc.wait() from returning.
        Such a process is abandoned rather than waited on.
        """
        try:
            await asyncio.wait_for(asyncio.shield(proc.wait()), _REAP_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.warning(
                f"Verifier {self.name} (pid {proc.pid}) not reaped within "
                f"{_REAP_GRACE_SECONDS}s of SIGKILL; a descendant may still hold its pipes"
            )

    async def _write_payload(self, proc: asyncio.subprocess.Process, payload: bytes) -> None:
        """Write the descriptor to stdin. Verifiers are free not to read it."""
        try:
            proc.stdin.write(payload)
            await proc.stdin.drain()
        except ConnectionError as e:
            logger.warning(
                f"Failed to completely write descriptor to stdin of verifier {self.name}: {e}"
            )
        finally:
            proc.stdin.close()

    async def _read_bounded(self, stream: asyncio.StreamReader) -> Tuple[bytes, bool]:
        """
        Read a stream to EOF keeping at most output_limit_bytes.

        Output past the limit is drained and dropped so the verifier never
        blocks on a full pipe.
        """
        buf = bytearray()
        truncated = False
        while True:
            chunk = await stream.read(_READ_CHUNK_BYTES)
            if not chunk:
                break
            room = self.output_limit_bytes - len(buf)
            if room > 0:
                buf.extend(chunk[:room])
            if len(chunk) > room:
                truncated = True
        return bytes(buf), truncated

    def _log_diagnostics(self, stderr: bytes) -> str:
        text = stderr.decode("utf-8", errors="replace")
        for line in text.splitlines():
            logger.debug(f"[{self.name}] stderr: {line}")
        return text.rstrip()
