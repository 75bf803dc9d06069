"""
Shared fixtures for the image verifier tests

VTID: VTID-01212

Process-level tests write bash scripts into a temporary verifier directory,
so they only run on POSIX systems.
"""

import itertools
import sys
import textwrap
from pathlib import Path

import pytest

from vitana_image_verifier import ContentDescriptor

collect_ignore = []
if sys.platform == "win32":
    collect_ignore = ["test_cli.py", "test_image_verifier.py", "test_process_verifier.py"]

DIGEST = "sha256:98ea6e4f216f2fb4b69fff9b3a44842c38686ca685f3f55dc48c5d3fb1107be4"
MEDIA_TYPE = "application/vnd.docker.distribution.manifest.list.v2+json"
IMAGE_REF = "registry.example.com/image:abc"


@pytest.fixture
def make_bin_dir(tmp_path):
    """Factory writing scripts as 0.sh, 1.sh, ... into a fresh directory"""
    counter = itertools.count()

    def _make(*scripts: str) -> Path:
        bin_dir = tmp_path / f"bin{next(counter)}"
        bin_dir.mkdir()
        for i, script in enumerate(scripts):
            path = bin_dir / f"{i}.sh"
            path.write_text(textwrap.dedent(script).strip() + "\n")
            path.chmod(0o700)
        return bin_dir

    return _make


@pytest.fixture
def descriptor():
    """Sample manifest list descriptor"""
    return ContentDescriptor(
        media_type=MEDIA_TYPE,
        digest=DIGEST,
        size=2048,
        annotations={"a": "b"},
    )
