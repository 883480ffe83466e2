"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any triage imports so the settings
singleton never picks up a real report API key or host platform.
"""

import os
import sys

# Ensure the backend packages are importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any triage code imports the settings singleton
os.environ["TARGET_PLATFORM"] = "linux"
os.environ["REPORT_API_KEY"] = ""
os.environ["REPORT_API_URL"] = "https://reports.test/v1"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402

from tests.mocks.analysis import make_finding, make_manifest  # noqa: E402


@pytest.fixture
def lodash_finding():
    """Finding against an older lodash than the manifest declares."""
    return make_finding(
        cve_id="CVE-2021-1111",
        dependency="lodash",
        version="4.17.15",
        severity="HIGH",
        cvss_score=7.4,
    )


@pytest.fixture
def npm_manifest():
    """npm manifest with production, dev and optional dependencies."""
    return make_manifest(
        dependencies={
            "lodash": {"version": "4.17.21"},
            "express": {"version": "^4.18.2"},
            "jest": {"version": "29.7.0", "isDev": True},
            "fsevents": {"version": "2.3.3", "isOptional": True},
        },
        production_dependencies={"lodash": "4.17.21", "express": "^4.18.2"},
        dev_dependencies={"jest": "29.7.0"},
    )
