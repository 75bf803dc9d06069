"""
Tests for descriptor encoding

VTID: VTID-01212
"""

import pytest
from pydantic import ValidationError

from vitana_image_verifier.descriptor import (
    STDIN_MEDIA_TYPE,
    ContentDescriptor,
    encode_descriptor,
)

from conftest import DIGEST, IMAGE_REF, MEDIA_TYPE


class TestContentDescriptor:
    """Tests for ContentDescriptor"""

    def test_canonical_json(self, descriptor):
        """Should encode with OCI field names in schema order"""
        assert descriptor.to_json_bytes() == (
            b'{"mediaType":"' + MEDIA_TYPE.encode() + b'",'
            b'"digest":"' + DIGEST.encode() + b'",'
            b'"size":2048,"annotations":{"a":"b"}}'
        )

    def test_empty_annotations_omitted(self):
        """Should leave annotations out when there are none"""
        descriptor = ContentDescriptor(media_type="m", digest="d", size=1)
        assert descriptor.to_json_bytes() == b'{"mediaType":"m","digest":"d","size":1}'

    def test_zero_value_descriptor(self):
        """Should still carry mediaType, digest and size when empty"""
        assert ContentDescriptor().to_json_bytes() == b'{"mediaType":"","digest":"","size":0}'

    def test_populate_by_alias(self):
        """Should accept the OCI JSON field names"""
        descriptor = ContentDescriptor.model_validate(
            {"mediaType": MEDIA_TYPE, "digest": DIGEST, "size": 5}
        )
        assert descriptor.media_type == MEDIA_TYPE
        assert descriptor.size == 5

    def test_frozen(self, descriptor):
        """Should not allow mutation"""
        with pytest.raises(ValidationError):
            descriptor.digest = "sha256:other"


class TestEncodeDescriptor:
    """Tests for encode_descriptor"""

    def test_args(self, descriptor):
        """Should build the fixed argument list"""
        invocation = encode_descriptor(IMAGE_REF, descriptor)
        assert invocation.args == (
            "-name", IMAGE_REF,
            "-digest", DIGEST,
            "-stdin-media-type", "application/vnd.oci.descriptor.v1+json",
        )

    def test_stdin_media_type_is_independent(self, descriptor):
        """Should not use the descriptor's own media type as the stdin type"""
        invocation = encode_descriptor(IMAGE_REF, descriptor)
        assert invocation.stdin_media_type == STDIN_MEDIA_TYPE
        assert MEDIA_TYPE not in invocation.args

    def test_payload(self, descriptor):
        """Should carry the canonical descriptor JSON"""
        invocation = encode_descriptor(IMAGE_REF, descriptor)
        assert invocation.payload == descriptor.to_json_bytes()
        assert invocation.digest == DIGEST
        assert invocation.image_ref == IMAGE_REF
