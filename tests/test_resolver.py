"""
Tests for verifier directory resolution

VTID: VTID-01212
"""

import pytest

from vitana_image_verifier.errors import VerifierDirectoryError
from vitana_image_verifier.main import ResolutionStatus
from vitana_image_verifier.resolver import resolve_units


def _write_executable(path, body="#!/usr/bin/env bash\nexit 0\n"):
    path.write_text(body)
    path.chmod(0o755)


class TestResolveUnits:
    """Tests for resolve_units"""

    @pytest.fixture
    def bin_dir(self, tmp_path):
        """Directory with three verifiers written out of order"""
        bin_dir = tmp_path / "bin"
        bin_dir.mkdir()
        for name in ["c-policy", "a-policy", "b-policy"]:
            _write_executable(bin_dir / name)
        return bin_dir

    def test_orders_by_name(self, bin_dir):
        """Should order units by name regardless of creation order"""
        resolution = resolve_units(bin_dir, -1)
        assert resolution.status == ResolutionStatus.RESOLVED
        assert resolution.names == ("a-policy", "b-policy", "c-policy")
        assert resolution.units[0].path == bin_dir / "a-policy"

    def test_negative_max_runs_everything(self, bin_dir):
        """Should keep every unit when max is negative"""
        resolution = resolve_units(bin_dir, -1)
        assert len(resolution.units) == 3
        assert resolution.skipped == ()

    def test_positive_max_caps_units(self, bin_dir):
        """Should keep the first N units and record the rest as skipped"""
        resolution = resolve_units(bin_dir, 2)
        assert resolution.names == ("a-policy", "b-policy")
        assert resolution.skipped == ("c-policy",)

    def test_max_larger_than_count(self, bin_dir):
        """Should keep everything when max exceeds the unit count"""
        resolution = resolve_units(bin_dir, 10)
        assert len(resolution.units) == 3
        assert resolution.skipped == ()

    def test_zero_max_is_disabled(self, bin_dir):
        """Should report disabled without listing units"""
        resolution = resolve_units(bin_dir, 0)
        assert resolution.status == ResolutionStatus.DISABLED
        assert resolution.units == ()

    def test_zero_max_with_missing_directory(self, tmp_path):
        """Should report disabled even when the directory is missing"""
        resolution = resolve_units(tmp_path / "missing", 0)
        assert resolution.status == ResolutionStatus.DISABLED

    def test_missing_directory(self, tmp_path):
        """Should report absent for a missing directory"""
        resolution = resolve_units(tmp_path / "missing", 10)
        assert resolution.status == ResolutionStatus.ABSENT
        assert resolution.units == ()

    def test_empty_directory(self, tmp_path):
        """Should report empty for a directory without entries"""
        resolution = resolve_units(tmp_path, 10)
        assert resolution.status == ResolutionStatus.EMPTY

    def test_skips_subdirectories(self, tmp_path):
        """Should ignore subdirectories"""
        (tmp_path / "subdir").mkdir()
        _write_executable(tmp_path / "policy")

        resolution = resolve_units(tmp_path, -1)
        assert resolution.names == ("policy",)

    def test_keeps_files_without_execute_bit(self, tmp_path):
        """Should keep regular files regardless of permissions so launch can fail"""
        _write_executable(tmp_path / "a-policy")
        not_executable = tmp_path / "b-policy"
        not_executable.write_text("#!/usr/bin/env bash\nexit 1\n")
        not_executable.chmod(0o644)

        resolution = resolve_units(tmp_path, -1)
        assert resolution.names == ("a-policy", "b-policy")

    def test_only_subdirectories_is_empty(self, tmp_path):
        """Should report empty when the directory holds no regular files"""
        (tmp_path / "subdir").mkdir()

        resolution = resolve_units(tmp_path, -1)
        assert resolution.status == ResolutionStatus.EMPTY

    def test_path_is_a_file(self, tmp_path):
        """Should raise when bin_dir exists but is not a directory"""
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")

        with pytest.raises(VerifierDirectoryError):
            resolve_units(not_a_dir, -1)
