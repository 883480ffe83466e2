"""Tests for production / non-production path classification."""

import pytest

from triage.models.reachability import PathClassification
from triage.services.analyzers.path_classifier import classify_path


class TestClassifyPath:
    @pytest.mark.parametrize(
        "path",
        [
            "src/test/fixtures/vuln.js",
            "packages/app/__tests__/index.test.js",
            "spec/helpers.rb",
            "src/__mocks__/axios.js",
            "docs/examples/basic.py",
            "demo/server.js",
            "C:\\repo\\example\\main.js",
            "fixture/data.json",
        ],
    )
    def test_non_prod_markers(self, path):
        assert classify_path(path) == PathClassification.NON_PROD

    @pytest.mark.parametrize(
        "path",
        [
            "src/index.js",
            "lib/latest/index.js",
            "src/testing/utils.js",
            "node_modules/lodash/lodash.js",
            "src/specification.js",
        ],
    )
    def test_prod_paths(self, path):
        assert classify_path(path) == PathClassification.PROD

    def test_case_insensitive(self):
        assert classify_path("src/Test/app.js") == PathClassification.NON_PROD

    def test_empty_path_is_unknown(self):
        assert classify_path("") == PathClassification.UNKNOWN
        assert classify_path(None) == PathClassification.UNKNOWN
