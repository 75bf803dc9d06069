"""
Judgement Model

VTID: VTID-01212

The verdict returned to callers and the rules for building its reason text.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable

from .main import ResolutionStatus

if TYPE_CHECKING:
    from .adapters.base import UnitOutcome


@dataclass(frozen=True)
class Judgement:
    """Aggregated accept/reject verdict for one image"""
    ok: bool
    reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "reason": self.reason}


def accepted_reason(outcomes: Iterable["UnitOutcome"]) -> str:
    """Join accept reasons as '<name> => <reason>' in the given order"""
    return ", ".join(f"{o.verifier} => {o.reason}" for o in outcomes)


def rejected_reason(verifier: str, exit_code: int, reason: str) -> str:
    return f"verifier {verifier} rejected image (exit code {exit_code}): {reason}"


def no_policy_reason(status: ResolutionStatus, bin_dir: Path) -> str:
    """
    Reason for a call that dispatched no verifiers.

    Explicitly disabled verification yields an empty reason. A missing or
    empty directory yields an informational note so the acceptance is not
    silent.
    """
    if status == ResolutionStatus.DISABLED:
        return ""
    if status == ResolutionStatus.ABSENT:
        return f"image verifier directory {bin_dir} does not exist"
    return f"no image verifier binaries found in {bin_dir}"
