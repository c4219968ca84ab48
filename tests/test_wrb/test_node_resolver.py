"""
Tests for NodeResolver.

Covers ID, bare-name and label resolution, the ambiguity check, and
parameter reference parsing.
"""

import pytest

from wrb.application.services import NodeResolver
from wrb.domain.models import (
    AmbiguousReferenceError,
    BadReferenceError,
    IncompleteReferenceError,
    Node,
    NodeInput,
    NodeKind,
    PrimitiveKind,
    PrimitiveNode,
    UndefinedReferenceError,
    UnknownParameterError,
)


@pytest.fixture
def resolver(scan_graph):
    return NodeResolver(scan_graph)


# ═══════════════════════════════════════════════════════════════════════════════
# Node References
# ═══════════════════════════════════════════════════════════════════════════════

class TestResolveNode:
    """Node reference resolution."""

    def test_exact_id_wins(self, resolver):
        """An exact node ID resolves to itself."""
        assert resolver.resolve("nmap-2") == "nmap-2"

    def test_bare_name_resolves_to_first_instance(self, resolver):
        """A reference without suffix falls back to <ref>-1."""
        assert resolver.resolve("httpx") == "httpx-1"

    def test_splitter_label(self, resolver):
        """Splitters are addressable by label alone."""
        assert resolver.resolve("splitter") == "file-splitter-1"

    def test_script_label(self, resolver):
        """Scripts are addressable by label alone."""
        assert resolver.resolve("recon") == "recon-script-1"

    def test_shared_label_is_ambiguous(self, resolver):
        """A label shared by several nodes lists every candidate."""
        with pytest.raises(AmbiguousReferenceError) as exc_info:
            resolver.resolve("nmap")
        assert exc_info.value.candidates == ["nmap-1", "nmap-2"]

    def test_tool_label_is_incomplete(self, scan_graph):
        """A unique tool label without the two-part form is incomplete."""
        scan_graph.nodes["httpx-1"].label = "webscan"
        with pytest.raises(IncompleteReferenceError):
            NodeResolver(scan_graph).resolve("webscan")

    def test_tool_label_allowed_when_not_required(self, scan_graph):
        """Callers may accept label hits on any node kind."""
        scan_graph.nodes["httpx-1"].label = "webscan"
        assert NodeResolver(scan_graph).resolve("webscan", require_addressable=False) == "httpx-1"

    def test_unknown_reference(self, resolver):
        """Nothing matching raises UndefinedReferenceError."""
        with pytest.raises(UndefinedReferenceError):
            resolver.resolve("ffuf")

    def test_suffixed_reference_does_not_fall_back(self, resolver):
        """Only references without a numeric suffix get the -1 fallback."""
        with pytest.raises(UndefinedReferenceError):
            resolver.resolve("httpx-7")

    def test_unique_label_beats_default_instance(self, scan_graph):
        """An addressable label hit wins over the <ref>-1 fallback."""
        scan_graph.add_node(Node(id="clean-1", label="clean", kind=NodeKind.TOOL))
        scan_graph.add_node(Node(
            id="clean-script-1", label="clean", kind=NodeKind.SCRIPT, script={"source": "true"},
        ))
        with pytest.raises(AmbiguousReferenceError):
            NodeResolver(scan_graph).resolve("clean")

        scan_graph.nodes["clean-1"].label = "clean-tool"
        assert NodeResolver(scan_graph).resolve("clean") == "clean-script-1"


# ═══════════════════════════════════════════════════════════════════════════════
# Parameter References
# ═══════════════════════════════════════════════════════════════════════════════

class TestResolveParameter:
    """<node>.<param> resolution."""

    def test_tool_label_with_parameter(self, resolver):
        """Tool nodes are reachable by label in the two-part form."""
        assert resolver.resolve_parameter("httpx.urls") == ("httpx-1", "urls")

    def test_node_id_with_parameter(self, resolver):
        """IDs work in the two-part form."""
        assert resolver.resolve_parameter("nmap-2.target") == ("nmap-2", "target")

    def test_ambiguous_node_part(self, resolver):
        """The node part goes through the ambiguity check."""
        with pytest.raises(AmbiguousReferenceError):
            resolver.resolve_parameter("nmap.target")

    @pytest.mark.parametrize("ref", ["nmap-1.target.extra", ".target", "nmap-1.", "nmap-1"])
    def test_malformed_reference(self, resolver, ref):
        """Exactly one '.' with non-empty parts is required."""
        with pytest.raises(BadReferenceError):
            resolver.resolve_parameter(ref)

    def test_unknown_parameter(self, resolver):
        """Missing ports raise UnknownParameterError."""
        with pytest.raises(UnknownParameterError) as exc_info:
            resolver.resolve_parameter("httpx-1.threads")
        assert exc_info.value.param == "threads"

    def test_mirrored_entry_is_not_a_parameter(self, resolver):
        """Mirrored `<port>/<primitive>` entries are not addressable."""
        with pytest.raises(UnknownParameterError):
            resolver.parameter_type("nmap-1", "target/string-input-1")

    def test_parameter_type(self, resolver):
        """Declared port types are returned verbatim."""
        assert resolver.parameter_type("nmap-1", "templates") == "FOLDER"


# ═══════════════════════════════════════════════════════════════════════════════
# Primitive References
# ═══════════════════════════════════════════════════════════════════════════════

class TestResolvePrimitive:
    """Primitive node resolution."""

    def test_by_id(self, resolver):
        """Primitive IDs resolve to themselves."""
        assert resolver.resolve_primitive("string-input-1") == "string-input-1"

    def test_by_label(self, resolver):
        """A unique primitive label resolves."""
        assert resolver.resolve_primitive("example.com") == "string-input-1"

    def test_shared_label(self, scan_graph):
        """Several primitives with one label are ambiguous."""
        scan_graph.add_primitive(PrimitiveNode(
            id="string-input-2", kind=PrimitiveKind.STRING, value="example.com", label="example.com",
        ))
        with pytest.raises(AmbiguousReferenceError):
            NodeResolver(scan_graph).resolve_primitive("example.com")

    def test_unknown_primitive(self, resolver):
        """Unknown primitives raise UndefinedReferenceError."""
        with pytest.raises(UndefinedReferenceError) as exc_info:
            resolver.resolve_primitive("wordlist")
        assert "primitive node" in exc_info.value.message

    def test_resolver_sees_graph_edits(self, scan_graph):
        """The resolver reads the graph on every call."""
        resolver = NodeResolver(scan_graph)
        scan_graph.add_node(Node(id="ffuf-1", label="ffuf", inputs={"url": NodeInput(type="STRING")}))
        assert resolver.resolve_parameter("ffuf.url") == ("ffuf-1", "url")
