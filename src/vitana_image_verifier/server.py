"""
Vitana Image Verifier - HTTP Server
VTID-01212

FastAPI server exposing the image verifier to admission callers. A rejected
image is a normal 200 response with ok=false; a 502 means the verification
itself could not be completed and no judgement exists.
"""

import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from . import __version__, __vtid__
from .descriptor import ContentDescriptor
from .errors import ImageVerifierError
from .logging_config import get_logger
from .main import VerifierConfig
from .orchestrator import ImageVerifier

logger = get_logger("server")


# --- Request/Response Models ---


class VerifyRequest(BaseModel):
    """Request to verify an image"""

    image_ref: str = Field(..., description="Image reference being admitted")
    descriptor: ContentDescriptor = Field(..., description="OCI content descriptor of the image")
    timeout_s: Optional[float] = Field(
        default=None, gt=0, description="Overall deadline for the verification"
    )


class VerifyResponse(BaseModel):
    """Judgement for the image"""

    ok: bool
    reason: str
    duration_ms: int


def create_app(verifier: Optional[ImageVerifier] = None) -> FastAPI:
    """Create the FastAPI app; the verifier is built from the environment if not given"""
    app = FastAPI(
        title="Vitana Image Verifier",
        description="Image admission gate backed by executable verifiers",
        version=__version__,
    )
    app.state.verifier = verifier or ImageVerifier(VerifierConfig.from_env())

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Health check endpoint for Cloud Run"""
        return {
            "status": "ok",
            "service": "vitana-image-verifier",
            "vtid": __vtid__,
            "version": __version__,
        }

    @app.get("/stats")
    def stats() -> Dict[str, Any]:
        """Verifier statistics since startup"""
        return app.state.verifier.get_stats()

    @app.post("/verify", response_model=VerifyResponse)
    async def verify(request: VerifyRequest) -> VerifyResponse:
        """
        Verify an image before it is pulled or run.

        Returns 200 with ok=true/false for any judgement, 502 when a
        verifier could not be launched or timed out.
        """
        start = time.monotonic()
        try:
            judgement = await app.state.verifier.verify_image(
                request.image_ref,
                request.descriptor,
                timeout=request.timeout_s,
            )
        except ImageVerifierError as e:
            raise HTTPException(status_code=502, detail=str(e))

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            f"Verified {request.image_ref}: ok={judgement.ok} in {duration_ms}ms"
        )
        return VerifyResponse(ok=judgement.ok, reason=judgement.reason, duration_ms=duration_ms)

    return app


app = create_app()
