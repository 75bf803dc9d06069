"""
Tests for the HTTP server

VTID: VTID-01212
"""

import pytest
from fastapi.testclient import TestClient

from vitana_image_verifier import ImageVerifier, MockVerifier, VerifierConfig
from vitana_image_verifier.server import create_app

from conftest import DIGEST, IMAGE_REF, MEDIA_TYPE

REQUEST = {
    "image_ref": IMAGE_REF,
    "descriptor": {
        "mediaType": MEDIA_TYPE,
        "digest": DIGEST,
        "size": 2048,
        "annotations": {"a": "b"},
    },
}


def _client(make_bin_dir, *mocks) -> TestClient:
    by_name = {f"{i}.sh": mock for i, mock in enumerate(mocks)}
    verifier = ImageVerifier(
        VerifierConfig(bin_dir=make_bin_dir(*["exit 0"] * len(mocks)), max_verifiers=-1),
        verifier_factory=lambda unit: by_name[unit.name],
    )
    return TestClient(create_app(verifier))


class TestHealth:
    """Tests for /health"""

    def test_health(self, make_bin_dir):
        """Should report service identity"""
        response = _client(make_bin_dir).get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "vitana-image-verifier"
        assert data["vtid"] == "VTID-01212"


class TestVerify:
    """Tests for /verify"""

    def test_accepted(self, make_bin_dir):
        """Should return ok=true with the joined reason"""
        client = _client(make_bin_dir, MockVerifier("0.sh", output="signed"))

        response = client.post("/verify", json=REQUEST)

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["reason"] == "0.sh => signed"
        assert data["duration_ms"] >= 0

    def test_rejected_is_not_an_error(self, make_bin_dir):
        """Should return 200 with ok=false for a rejection"""
        client = _client(
            make_bin_dir,
            MockVerifier("0.sh"),
            MockVerifier("1.sh", exit_code=1, output="unsigned"),
        )

        response = client.post("/verify", json=REQUEST)

        assert response.status_code == 200
        assert response.json() == {
            "ok": False,
            "reason": "verifier 1.sh rejected image (exit code 1): unsigned",
            "duration_ms": response.json()["duration_ms"],
        }

    def test_infra_failure(self, make_bin_dir):
        """Should return 502 when a verifier cannot be launched"""
        client = _client(make_bin_dir, MockVerifier("0.sh", fail_launch=True))

        response = client.post("/verify", json=REQUEST)

        assert response.status_code == 502
        assert "failed to call image verifier 0.sh" in response.json()["detail"]

    def test_descriptor_reaches_verifier(self, make_bin_dir):
        """Should hand the canonical descriptor to verifiers"""
        mock = MockVerifier("0.sh")
        client = _client(make_bin_dir, mock)

        client.post("/verify", json=REQUEST)

        assert mock.calls[0].digest == DIGEST
        assert mock.calls[0].payload == (
            f'{{"mediaType":"{MEDIA_TYPE}","digest":"{DIGEST}",'
            '"size":2048,"annotations":{"a":"b"}}'
        ).encode()

    @pytest.mark.parametrize("body", [
        {"descriptor": REQUEST["descriptor"]},
        {"image_ref": IMAGE_REF},
        {**REQUEST, "timeout_s": 0},
    ])
    def test_invalid_request(self, make_bin_dir, body):
        """Should reject malformed requests"""
        response = _client(make_bin_dir).post("/verify", json=body)
        assert response.status_code == 422


class TestStats:
    """Tests for /stats"""

    def test_stats(self, make_bin_dir):
        """Should expose verifier counters"""
        client = _client(make_bin_dir, MockVerifier("0.sh"))
        client.post("/verify", json=REQUEST)

        data = client.get("/stats").json()

        assert data["verifications"] == 1
        assert data["verifications_accepted"] == 1
        assert data["verifiers_invoked"] == 1
