"""Tests for dependency name extraction, normalization and manifest matching."""

from triage.models.manifest import ManifestEntry
from triage.services.analyzers.dependency_matcher import (
    extract_package_name,
    find_dependency_match,
    has_exact_match,
    normalize_package_name,
)


class TestExtractPackageName:
    def test_plain_name(self):
        assert extract_package_name("lodash") == "lodash"

    def test_jar_with_version_suffix(self):
        assert extract_package_name("commons-text-1.9.jar") == "commons-text"

    def test_maven_coordinates_keep_artifact_id(self):
        assert extract_package_name("org.apache.commons:commons-text:1.9") == "commons-text"

    def test_npm_version_suffix(self):
        assert extract_package_name("express@4.18.2") == "express"

    def test_scoped_package_with_version(self):
        assert extract_package_name("@babel/core@7.0.0") == "@babel/core"

    def test_scoped_package_without_version(self):
        assert extract_package_name("@angular/core") == "@angular/core"

    def test_prerelease_suffix(self):
        assert extract_package_name("jackson-databind-2.9.10.1.jar") == "jackson-databind"

    def test_wheel_extension(self):
        assert extract_package_name("requests-2.31.0.whl") == "requests"

    def test_empty(self):
        assert extract_package_name("") == ""
        assert extract_package_name(None) == ""


class TestNormalizePackageName:
    def test_lowercases(self):
        assert normalize_package_name("Jackson-Databind") == "jacksondatabind"

    def test_strips_separators(self):
        assert normalize_package_name("typing_extensions") == "typingextensions"

    def test_strips_scope(self):
        assert normalize_package_name("@babel/core") == "core"

    def test_none(self):
        assert normalize_package_name(None) == ""


class TestFindDependencyMatch:
    def test_exact_match(self):
        deps = {"lodash": ManifestEntry(version="4.17.21")}
        match = find_dependency_match("lodash", deps)
        assert match is not None
        assert match.name == "lodash"
        assert match.version == "4.17.21"
        assert match.partial_match is False

    def test_normalized_match(self):
        deps = {"Jackson_Databind": ManifestEntry(version="2.15.0")}
        match = find_dependency_match("jackson-databind", deps)
        assert match.name == "Jackson_Databind"
        assert match.partial_match is False

    def test_substring_match_is_partial(self):
        deps = {"lodash.merge": "4.6.2"}
        match = find_dependency_match("lodash", deps)
        assert match.name == "lodash.merge"
        assert match.version == "4.6.2"
        assert match.partial_match is True

    def test_containment_in_either_direction(self):
        deps = {"core": "7.0.0"}
        match = find_dependency_match("corejs", deps)
        assert match.partial_match is True

    def test_exact_match_preferred_over_earlier_partial(self):
        deps = {"lodash.merge": "4.6.2", "lodash": "4.17.21"}
        match = find_dependency_match("lodash", deps)
        assert match.name == "lodash"
        assert match.partial_match is False

    def test_no_match(self):
        assert find_dependency_match("express", {"lodash": "4.17.21"}) is None

    def test_empty_inputs(self):
        assert find_dependency_match("", {"lodash": "1.0.0"}) is None
        assert find_dependency_match("lodash", {}) is None
        assert find_dependency_match("lodash", None) is None

    def test_name_normalizing_to_empty_never_matches(self):
        assert find_dependency_match("--", {"lodash": "1.0.0"}) is None

    def test_dict_entries_expose_version(self):
        match = find_dependency_match("lodash", {"lodash": {"version": "1.2.3"}})
        assert match.version == "1.2.3"


class TestHasExactMatch:
    def test_exact(self):
        assert has_exact_match("lodash", {"lodash": "1.0.0"}) is True

    def test_substring_is_not_exact(self):
        assert has_exact_match("lodash", {"lodash.merge": "1.0.0"}) is False

    def test_empty(self):
        assert has_exact_match("", {"lodash": "1.0.0"}) is False
        assert has_exact_match("lodash", None) is False
