"""Tests for the Manifest and CallGraph input models."""

from triage.models.callgraph import CallGraph
from triage.models.manifest import Manifest, ManifestEntry, ManifestType


class TestManifest:
    def test_parses_camel_case_payload(self):
        manifest = Manifest.model_validate(
            {
                "type": "npm",
                "dependencies": {
                    "lodash": {"version": "4.17.21", "isDev": False},
                    "jest": {"version": "29.7.0", "isDev": True, "isPeer": False},
                },
                "productionDependencies": {"lodash": "4.17.21"},
                "devDependencies": {"jest": "29.7.0"},
            }
        )
        assert manifest.type == ManifestType.NPM
        assert manifest.dependencies["jest"].is_dev is True
        assert manifest.dependencies["jest"].is_peer is False
        assert manifest.production_dependencies == {"lodash": "4.17.21"}

    def test_plain_version_strings_become_entries(self):
        manifest = Manifest.model_validate(
            {"type": "pip", "dependencies": {"requests": "2.31.0", "flask": None}}
        )
        assert manifest.dependencies["requests"] == ManifestEntry(version="2.31.0")
        assert manifest.dependencies["flask"].version is None

    def test_entry_dicts_in_version_maps(self):
        manifest = Manifest.model_validate(
            {"type": "maven", "productionDependencies": {"commons-text": {"version": "1.10.0"}}}
        )
        assert manifest.production_dependencies == {"commons-text": "1.10.0"}

    def test_defaults(self):
        manifest = Manifest(type="npm")
        assert manifest.dependencies == {}
        assert manifest.dev_dependencies == {}
        assert manifest.name is None


class TestCallGraph:
    def test_nodes_and_edges_shape(self):
        graph = CallGraph.model_validate(
            {"nodes": [{"name": "app"}, {"id": 42}], "edges": [{"from": "app", "to": "lodash"}]}
        )
        assert [n.identifier for n in graph.nodes] == ["app", "42"]
        assert graph.edges[0].caller == "app"
        assert graph.edges[0].callee == "lodash"

    def test_functions_and_calls_shape(self):
        graph = CallGraph.model_validate(
            {"functions": ["main"], "calls": [{"source": "main", "target": "axios.get"}]}
        )
        assert graph.nodes[0].identifier == "main"
        assert graph.edges[0].caller == "main"
        assert graph.edges[0].callee == "axios.get"

    def test_extra_fields_ignored(self):
        graph = CallGraph.model_validate(
            {"nodes": [{"name": "app", "file": "a.js", "line": 3}], "edges": [], "meta": {}}
        )
        assert graph.nodes[0].identifier == "app"

    def test_empty(self):
        graph = CallGraph.model_validate({})
        assert graph.nodes == []
        assert graph.edges == []
