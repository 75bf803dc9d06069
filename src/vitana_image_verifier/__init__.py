"""
Vitana Image Verifier - VTID-01212

Image admission gate for container pulls. Runs a directory of executable
verifiers against an image reference and its content descriptor and folds
their accept/reject decisions into a single Judgement.

RULES:
1. A verifier rejecting an image is a Judgement (ok=False), never an error
2. A verifier that cannot run or times out is an error, never a Judgement
3. Verifiers are opaque: their stdout is the reason, their exit code the decision
4. Nothing is retried and nothing is persisted
"""

__version__ = "1.0.0"
__vtid__ = "VTID-01212"

# Primary exports
from .orchestrator import ImageVerifier
from .main import (
    OUTPUT_LIMIT_BYTES,
    OutcomeKind,
    ResolutionStatus,
    VerifierConfig,
)
from .descriptor import (
    STDIN_MEDIA_TYPE,
    ContentDescriptor,
    InvocationSpec,
    encode_descriptor,
)
from .judgement import Judgement
from .resolver import Resolution, VerifierUnit, resolve_units

# Verifier adapters
from .adapters import BaseVerifier, MockVerifier, ProcessVerifier, UnitOutcome

# Errors
from .errors import (
    ConfigurationError,
    ImageVerifierError,
    VerificationTimeoutError,
    VerifierDirectoryError,
    VerifierError,
    VerifierInvocationError,
    VerifierLaunchError,
    VerifierTimeoutError,
)

__all__ = [
    # Orchestration
    "ImageVerifier",
    "VerifierConfig",
    "Judgement",
    # Types
    "OUTPUT_LIMIT_BYTES",
    "OutcomeKind",
    "ResolutionStatus",
    "STDIN_MEDIA_TYPE",
    "ContentDescriptor",
    "InvocationSpec",
    "encode_descriptor",
    "Resolution",
    "VerifierUnit",
    "resolve_units",
    # Adapters
    "BaseVerifier",
    "MockVerifier",
    "ProcessVerifier",
    "UnitOutcome",
    # Errors
    "ConfigurationError",
    "ImageVerifierError",
    "VerificationTimeoutError",
    "VerifierDirectoryError",
    "VerifierError",
    "VerifierInvocationError",
    "VerifierLaunchError",
    "VerifierTimeoutError",
    # Meta
    "__version__",
    "__vtid__",
]
