"""
Image Verifier Errors

VTID: VTID-01212

Everything raised here is an infrastructure failure. A verifier rejecting an
image is a Judgement, never an exception.
"""


class ImageVerifierError(Exception):
    """Base exception for image verifier errors"""
    pass


class ConfigurationError(ImageVerifierError):
    """Invalid verifier configuration"""
    pass


class VerifierDirectoryError(ImageVerifierError):
    """The verifier directory exists but could not be listed"""
    pass


class VerificationTimeoutError(ImageVerifierError):
    """The whole verification exceeded the caller's deadline"""
    pass


class VerifierError(ImageVerifierError):
    """Infrastructure failure attributed to a single verifier"""

    def __init__(self, verifier: str, message: str):
        super().__init__(f"failed to call image verifier {verifier}: {message}")
        self.verifier = verifier
        self.message = message


class VerifierLaunchError(VerifierError):
    """The verifier executable could not be started"""
    pass


class VerifierTimeoutError(VerifierError):
    """The verifier exceeded its per-verifier timeout"""
    pass


class VerifierInvocationError(VerifierError):
    """The verifier started but its process could not be managed"""
    pass
