"""
Tests for workflow version graph domain models.

Covers endpoint parsing, node and primitive serialization, and graph
invariant validation.
"""

import pytest

from wrb.domain.models import (
    BadReferenceError,
    Connection,
    DestinationEndpoint,
    Node,
    NodeInput,
    NodeKind,
    PrimitiveKind,
    PrimitiveNode,
    SourceEndpoint,
    WorkflowVersionGraph,
    file_basename,
    split_numeric_suffix,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════════

class TestEndpoints:
    """Slash-separated connection endpoint strings."""

    def test_parse_source(self):
        """Source endpoints carry node and port."""
        endpoint = SourceEndpoint.parse("output/nmap-1/file")
        assert endpoint.node_id == "nmap-1"
        assert endpoint.port == "file"
        assert endpoint.format() == "output/nmap-1/file"

    def test_parse_destination_with_source(self):
        """Destination endpoints embed the feeding node."""
        endpoint = DestinationEndpoint.parse("input/httpx-1/urls/nmap-1")
        assert endpoint.node_id == "httpx-1"
        assert endpoint.port == "urls"
        assert endpoint.source_id == "nmap-1"
        assert str(endpoint) == "input/httpx-1/urls/nmap-1"

    def test_parse_legacy_destination(self):
        """Destinations without the source segment still parse."""
        endpoint = DestinationEndpoint.parse("input/httpx-1/urls")
        assert endpoint.source_id is None
        assert endpoint.format() == "input/httpx-1/urls"

    @pytest.mark.parametrize("raw", ["nmap-1/file", "input/nmap-1/file", "output//file", "output/a/b/c"])
    def test_malformed_source_rejected(self, raw):
        """Malformed source strings raise BadReferenceError."""
        with pytest.raises(BadReferenceError):
            SourceEndpoint.parse(raw)

    def test_malformed_destination_rejected(self):
        """Destinations need the input prefix."""
        with pytest.raises(BadReferenceError):
            DestinationEndpoint.parse("output/httpx-1/urls/nmap-1")

    def test_connection_between_sets_source_segment(self):
        """Connections built between two nodes embed the source in the destination."""
        connection = Connection.between("string-input-3", "output", "nmap-1", "target")
        assert connection.to_dict() == {
            "source": {"id": "output/string-input-3/output"},
            "destination": {"id": "input/nmap-1/target/string-input-3"},
        }


# ═══════════════════════════════════════════════════════════════════════════════
# Kinds and Helpers
# ═══════════════════════════════════════════════════════════════════════════════

class TestKinds:
    """Node and primitive kinds."""

    def test_split_numeric_suffix(self):
        """Numeric suffixes are split off IDs."""
        assert split_numeric_suffix("nmap-2") == ("nmap", 2)
        assert split_numeric_suffix("file-splitter-10") == ("file-splitter", 10)
        assert split_numeric_suffix("nmap") == ("nmap", None)
        assert split_numeric_suffix("nmap-x") == ("nmap-x", None)

    def test_file_basename(self):
        """Basename is the last path segment."""
        assert file_basename("https://example.com/lists/hosts.txt") == "hosts.txt"
        assert file_basename("https://github.com/org/repo.git") == "repo.git"

    def test_infer_node_kind(self):
        """Node kinds are inferred from type, script and ID prefix."""
        assert NodeKind.infer("recon-script-1", {"script": {"source": "ls"}}) == NodeKind.SCRIPT
        assert NodeKind.infer("file-splitter-1", {}) == NodeKind.SPLITTER
        assert NodeKind.infer("split-to-string-2", {}) == NodeKind.SPLITTER
        assert NodeKind.infer("nmap-1", {}) == NodeKind.TOOL
        assert NodeKind.infer("x-1", {"type": "module"}) == NodeKind.MODULE

    def test_label_addressable(self):
        """Only scripts and splitters are addressable by label alone."""
        assert NodeKind.SCRIPT.label_addressable
        assert NodeKind.SPLITTER.label_addressable
        assert not NodeKind.TOOL.label_addressable
        assert not NodeKind.MODULE.label_addressable

    def test_primitive_prefixes_and_type_names(self):
        """Each primitive kind has its ID prefix and remote type name."""
        assert PrimitiveKind.STRING.format_id(3) == "string-input-3"
        assert PrimitiveKind.BOOLEAN.format_id(1) == "boolean-input-1"
        assert PrimitiveKind.FILE.format_id(2) == "http-input-2"
        assert PrimitiveKind.FOLDER.format_id(1) == "git-input-1"
        assert PrimitiveKind.FILE.type_name == "URL"
        assert PrimitiveKind.FOLDER.type_name == "GIT"

    def test_primitive_kind_from_id(self):
        """IDs map back to kinds and indices."""
        assert PrimitiveKind.from_id("http-input-4") == PrimitiveKind.FILE
        assert PrimitiveKind.parse_index("http-input-4") == 4
        assert PrimitiveKind.from_id("nmap-1") is None
        assert PrimitiveKind.parse_index("string-input-x") is None

    def test_primitive_kind_from_declared_type(self):
        """Declared parameter types are case-insensitive."""
        assert PrimitiveKind.from_type("file") == PrimitiveKind.FILE
        assert PrimitiveKind.from_type("STRING") == PrimitiveKind.STRING
        assert PrimitiveKind.from_type("NUMBER") is None


# ═══════════════════════════════════════════════════════════════════════════════
# Nodes and Primitives
# ═══════════════════════════════════════════════════════════════════════════════

class TestNodeSerialization:
    """Node and primitive payload handling."""

    def test_node_from_dict(self, scan_data):
        """Nodes keep label, ports and kind."""
        node = Node.from_dict(scan_data["nodes"]["nmap-1"])
        assert node.id == "nmap-1"
        assert node.label == "nmap"
        assert node.kind == NodeKind.TOOL
        assert set(node.declared_ports()) == {"target", "verbose", "config", "templates"}
        assert "target/string-input-1" in node.inputs

    def test_node_keeps_unknown_fields(self, scan_data):
        """Fields the model does not know are written back."""
        raw = scan_data["nodes"]["nmap-1"]
        raw["meta"]["note"] = "keep me"
        node = Node.from_dict(raw)
        data = node.to_dict()
        assert data["id"] == "7c1e0e7a-tool"
        assert data["meta"]["note"] == "keep me"
        assert data["meta"]["label"] == "nmap"
        assert "type" not in data

    def test_node_writes_type_when_not_inferable(self):
        """A module node records its kind explicitly."""
        node = Node(id="recon-module-1", label="recon", kind=NodeKind.MODULE)
        assert node.to_dict()["type"] == "MODULE"

    def test_default_label(self):
        """The label derived from the ID counts as default."""
        assert Node(id="nmap-1", label="nmap").has_default_label
        assert not Node(id="nmap-1", label="ports").has_default_label

    def test_mirror_is_visible_copy(self):
        """Mirrored entries copy the declared port, visible and unnamed."""
        declared = NodeInput(type="FILE", order=2, name="urls", command="-l", multi=True)
        mirror = declared.mirror("in/http-input-1/a.txt")
        assert mirror.visible is True
        assert mirror.name is None
        assert mirror.command == "-l"
        assert mirror.value == "in/http-input-1/a.txt"

    def test_primitive_mirrored_value(self):
        """Files and folders are mirrored as in/<id>/<basename>."""
        file_primitive = PrimitiveNode(id="http-input-1", kind=PrimitiveKind.FILE, value="https://x.io/hosts.txt")
        folder = PrimitiveNode(id="git-input-2", kind=PrimitiveKind.FOLDER, value="https://github.com/o/r.git")
        string = PrimitiveNode(id="string-input-1", kind=PrimitiveKind.STRING, value="example.com")
        assert file_primitive.mirrored_value() == "in/http-input-1/hosts.txt"
        assert folder.mirrored_value() == "in/git-input-2/r.git"
        assert string.mirrored_value() == "example.com"

    def test_pending_upload_never_serialized(self):
        """The pending-upload marker stays client-side."""
        primitive = PrimitiveNode(
            id="http-input-1", kind=PrimitiveKind.FILE, value="trickest://file/a.txt", pending_upload=True,
        )
        data = primitive.to_dict()
        assert "pending_upload" not in data
        assert data["type_name"] == "URL"


# ═══════════════════════════════════════════════════════════════════════════════
# Graph Aggregate
# ═══════════════════════════════════════════════════════════════════════════════

class TestWorkflowVersionGraph:
    """Graph aggregate behaviour."""

    def test_round_trip_preserves_payload(self, scan_data):
        """A loaded graph serializes back to the same payload."""
        graph = WorkflowVersionGraph.from_dict(scan_data)
        assert graph.to_dict() == scan_data

    def test_fixture_graph_is_valid(self, scan_graph):
        """The fixture graph satisfies all invariants."""
        assert scan_graph.validate() == []

    def test_connection_queries(self, scan_graph):
        """Incoming and outgoing connections are found."""
        assert len(scan_graph.connections_to("nmap-1", "target")) == 1
        assert scan_graph.connections_to("nmap-1", "verbose") == []
        assert [c.destination.node_id for c in scan_graph.connections_from("nmap-1")] == ["httpx-1"]

    def test_validate_reports_dangling_connection(self, scan_graph):
        """Connections to missing nodes are reported."""
        scan_graph.connections.append(Connection.between("ghost-1", "file", "httpx-1", "urls"))
        errors = scan_graph.validate()
        assert len(errors) == 1
        assert "ghost-1" in errors[0]

    def test_validate_reports_missing_mirror(self, scan_graph):
        """A primitive feed without mirrored entry is reported."""
        del scan_graph.nodes["nmap-1"].inputs["target/string-input-1"]
        errors = scan_graph.validate()
        assert errors == ["Node 'nmap-1' has no mirrored input 'target/string-input-1'"]

    def test_validate_reports_stale_mirror(self, scan_graph):
        """A mirrored entry out of sync with its primitive is reported."""
        scan_graph.primitive_nodes["string-input-1"].value = "other.com"
        errors = scan_graph.validate()
        assert len(errors) == 1
        assert "other.com" in errors[0]

    def test_clone_is_independent(self, scan_graph):
        """Mutating a clone leaves the original untouched."""
        clone = scan_graph.clone()
        clone.primitive_nodes["string-input-1"].value = "changed"
        clone.connections.clear()
        assert scan_graph.primitive_nodes["string-input-1"].value == "example.com"
        assert len(scan_graph.connections) == 2
        assert clone != scan_graph

    def test_labeled_nodes(self, scan_graph):
        """Only nodes with non-default labels are listed."""
        labeled = [n.id for n in scan_graph.labeled_nodes()]
        assert labeled == ["file-splitter-1", "recon-script-1"]

    def test_mark_uploaded(self, scan_graph):
        """Uploading clears the marker and may swap the reference."""
        scan_graph.add_primitive(PrimitiveNode(
            id="http-input-1", kind=PrimitiveKind.FILE, value="trickest://file/a.txt",
            label="a.txt", pending_upload=True,
        ))
        assert [p.id for p in scan_graph.pending_uploads()] == ["http-input-1"]

        scan_graph.mark_uploaded("http-input-1", "trickest://file/uploaded/a.txt")

        primitive = scan_graph.get_primitive("http-input-1")
        assert primitive.pending_upload is False
        assert primitive.value == "trickest://file/uploaded/a.txt"
        assert scan_graph.pending_uploads() == []
