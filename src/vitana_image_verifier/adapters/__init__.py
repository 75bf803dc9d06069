"""
Verifier Adapters

Adapters turning a verification policy into an accept/reject outcome.
"""

from .base import BaseVerifier, UnitOutcome
from .mock import MockVerifier
from .process import ProcessVerifier

__all__ = [
    "BaseVerifier",
    "UnitOutcome",
    "MockVerifier",
    "ProcessVerifier",
]
