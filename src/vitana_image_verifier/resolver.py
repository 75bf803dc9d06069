"""
Verifier Directory Resolution

VTID: VTID-01212

Lists the verifier directory into an ordered, capped set of units. The
directory is read fresh on every call so verifiers can be added or removed
without restarting the service.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from .errors import VerifierDirectoryError
from .main import ResolutionStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VerifierUnit:
    """A single verifier executable"""
    name: str
    path: Path


@dataclass(frozen=True)
class Resolution:
    """Result of listing the verifier directory"""
    status: ResolutionStatus
    bin_dir: Path
    units: Tuple[VerifierUnit, ...] = ()
    skipped: Tuple[str, ...] = ()

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(unit.name for unit in self.units)


def _is_file(entry: os.DirEntry) -> bool:
    # Execute permission is checked at launch, not here
    try:
        return entry.is_file()
    except OSError:
        return False


def resolve_units(bin_dir: Path, max_verifiers: int) -> Resolution:
    """
    Resolve the verifiers to run, ordered by name.

    Args:
        bin_dir: Directory holding verifier executables
        max_verifiers: Negative for no cap, 0 to disable, N to keep the first N

    Returns:
        Resolution tagged DISABLED, ABSENT, EMPTY or RESOLVED

    Raises:
        VerifierDirectoryError: bin_dir exists but cannot be listed
    """
    bin_dir = Path(bin_dir)

    if max_verifiers == 0:
        logger.debug("Image verification disabled (max_verifiers=0)")
        return Resolution(status=ResolutionStatus.DISABLED, bin_dir=bin_dir)

    try:
        with os.scandir(bin_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
    except FileNotFoundError:
        logger.info(f"Image verifier directory {bin_dir} does not exist")
        return Resolution(status=ResolutionStatus.ABSENT, bin_dir=bin_dir)
    except OSError as e:
        raise VerifierDirectoryError(
            f"failed to list image verifier directory {bin_dir}: {e}"
        ) from e

    units = []
    for entry in entries:
        if not _is_file(entry):
            logger.debug(f"Skipping non-file entry in {bin_dir}: {entry.name}")
            continue
        units.append(VerifierUnit(name=entry.name, path=Path(entry.path)))

    if not units:
        logger.info(f"No image verifier binaries found in {bin_dir}")
        return Resolution(status=ResolutionStatus.EMPTY, bin_dir=bin_dir)

    skipped: Tuple[str, ...] = ()
    if 0 < max_verifiers < len(units):
        skipped = tuple(unit.name for unit in units[max_verifiers:])
        units = units[:max_verifiers]
        logger.warning(
            f"Skipping image verifiers {list(skipped)}: directory {bin_dir} has "
            f"{len(units) + len(skipped)} verifiers, more than the configured max of {max_verifiers}"
        )

    logger.debug(f"Resolved {len(units)} image verifier(s) in {bin_dir}")
    return Resolution(
        status=ResolutionStatus.RESOLVED,
        bin_dir=bin_dir,
        units=tuple(units),
        skipped=skipped,
    )
