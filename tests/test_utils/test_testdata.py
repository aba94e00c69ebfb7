"""Tests for endpoint config and fixture loading."""

import json

import pytest

from src.utils.testdata import (
    FixtureError,
    get_endpoint,
    load_endpoints,
    load_image_base64,
    load_testdata,
    replace_path_params,
    strip_data_url_prefix,
)


@pytest.fixture
def data_dirs(tmp_path):
    config_dir = tmp_path / "config"
    testdata_dir = tmp_path / "testdata"
    (testdata_dir / "los").mkdir(parents=True)
    config_dir.mkdir()
    (config_dir / "endpoints.json").write_text(
        json.dumps({"los": {"journey": {"create": "/los/api/v1/opportunity"}}})
    )
    (testdata_dir / "los" / "journey.json").write_text(json.dumps({"create": {"request": {"a": 1}}}))
    return config_dir, testdata_dir


class TestEndpoints:
    """Test endpoint lookup."""

    def test_repo_endpoints_load(self):
        endpoints = load_endpoints()

        assert endpoints["los"]["loanAccountCreation"]["createOpportunity"] == "/los/api/v1/opportunity"

    def test_get_endpoint(self, data_dirs):
        config_dir, _ = data_dirs

        assert get_endpoint("los", "journey", "create", config_dir) == "/los/api/v1/opportunity"

    def test_unknown_endpoint(self, data_dirs):
        config_dir, _ = data_dirs

        with pytest.raises(FixtureError, match="'los.journey.delete' not configured"):
            get_endpoint("los", "journey", "delete", config_dir)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FixtureError, match="not found"):
            load_endpoints(tmp_path)


class TestTestdata:
    """Test fixture loading."""

    def test_load(self, data_dirs):
        _, testdata_dir = data_dirs

        assert load_testdata("los", "journey", testdata_dir) == {"create": {"request": {"a": 1}}}

    def test_returns_independent_copies(self, data_dirs):
        _, testdata_dir = data_dirs

        first = load_testdata("los", "journey", testdata_dir)
        first["create"]["request"]["a"] = 99

        assert load_testdata("los", "journey", testdata_dir)["create"]["request"]["a"] == 1

    def test_missing_fixture(self, data_dirs):
        _, testdata_dir = data_dirs

        with pytest.raises(FixtureError):
            load_testdata("lms", "journey", testdata_dir)


class TestPathParams:
    def test_replace(self):
        assert replace_path_params("/kyc/{utilityReferenceId}", {"utilityReferenceId": "UTIL-9"}) == "/kyc/UTIL-9"

    def test_unmatched_placeholder_left(self):
        assert replace_path_params("/a/{x}/{y}", {"x": 1}) == "/a/1/{y}"


class TestImages:
    """Test base64 image fixtures."""

    @pytest.mark.parametrize(
        "raw",
        ["data:image/jpeg;base64,QUJD", "data:image/png;base64,QUJD\n", "QUJD", "  QUJD  "],
    )
    def test_strip_prefix(self, raw):
        assert strip_data_url_prefix(raw) == "QUJD"

    def test_load_relative_to_testdata_dir(self, data_dirs):
        _, testdata_dir = data_dirs
        (testdata_dir / "los" / "img.b64").write_text("data:image/jpeg;base64,QUJD\n")

        assert load_image_base64("los/img.b64", testdata_dir) == "QUJD"

    def test_repo_selfie_has_no_prefix(self):
        image = load_image_base64("los/images/selfie.b64")

        assert not image.startswith("data:")
        assert image.startswith("/9j/")

    def test_missing_image(self, tmp_path):
        with pytest.raises(FixtureError, match="Image fixture not found"):
            load_image_base64(tmp_path / "nope.b64")
