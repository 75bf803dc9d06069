"""
Descriptor Encoding

VTID: VTID-01212

Renders an OCI content descriptor into the stdin payload and argument list
handed to every verifier.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Wire format of the stdin payload, independent of the descriptor's own media type
STDIN_MEDIA_TYPE = "application/vnd.oci.descriptor.v1+json"


class ContentDescriptor(BaseModel):
    """OCI content descriptor of the image being verified"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    media_type: str = Field(default="", alias="mediaType")
    digest: str = ""
    size: int = 0
    annotations: Dict[str, str] = Field(default_factory=dict)

    def to_json_bytes(self) -> bytes:
        """
        Canonical JSON encoding.

        Field names and nesting follow the OCI descriptor schema; annotations
        are omitted when empty, as the schema marks them optional.
        """
        exclude = None if self.annotations else {"annotations"}
        return self.model_dump_json(by_alias=True, exclude=exclude).encode("utf-8")


@dataclass(frozen=True)
class InvocationSpec:
    """Arguments and payload shared read-only by all verifiers of one call"""
    image_ref: str
    digest: str
    payload: bytes
    args: Tuple[str, ...]
    stdin_media_type: str = STDIN_MEDIA_TYPE


def encode_descriptor(image_ref: str, descriptor: ContentDescriptor) -> InvocationSpec:
    """Build the invocation for an image reference and its descriptor"""
    args = (
        "-name", image_ref,
        "-digest", descriptor.digest,
        "-stdin-media-type", STDIN_MEDIA_TYPE,
    )
    return InvocationSpec(
        image_ref=image_ref,
        digest=descriptor.digest,
        payload=descriptor.to_json_bytes(),
        args=args,
    )
