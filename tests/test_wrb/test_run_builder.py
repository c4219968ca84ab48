"""
Tests for the RunBuilder SDK facade.

Covers the full prepare flow: apply, allocation, output selection and
layout, and the abort-before-submit behaviour.
"""

import pytest
from pydantic import ValidationError

from wrb.domain.events import ConfigurationAppliedEvent, LayoutComputedEvent
from wrb.domain.models import (
    AmbiguousReferenceError,
    CannotAllocateError,
    Machines,
    RunConfiguration,
    UndefinedReferenceError,
)
from wrb.infrastructure.events import WRBEventBus
from wrb.sdk import PreparedRun, RunBuilder


@pytest.fixture
def builder(event_bus):
    return RunBuilder.create("testing", files=["a.txt", "b.txt"], event_bus=event_bus)


@pytest.fixture
def maxima():
    return Machines(small=3, large=5)


# ═══════════════════════════════════════════════════════════════════════════════
# Prepare
# ═══════════════════════════════════════════════════════════════════════════════

class TestPrepare:
    """End-to-end run preparation."""

    def test_prepare_changed_run(self, builder, scan_version, maxima, event_bus):
        """A new input produces a laid-out graph to store."""
        prepared = builder.prepare(
            scan_version,
            {
                "inputs": {"splitter.files": ["a.txt", "b.txt"]},
                "outputs": "splitter",
                "machines": {"small": 2},
            },
            maxima=maxima,
        )

        assert isinstance(prepared, PreparedRun)
        assert prepared.changed is True
        assert prepared.allocation.machines == Machines(small=2)
        assert prepared.outputs == ["file-splitter-1"]
        assert prepared.pending_uploads == ["http-input-1", "http-input-2"]
        assert prepared.forest.get("http-input-1").is_primitive
        assert "http-input-2" in prepared.to_payload()["primitiveNodes"]
        assert len(event_bus.get_event_history(LayoutComputedEvent)) == 1

    def test_prepare_unchanged_run(self, builder, scan_data, maxima, event_bus):
        """Re-applying wired values skips the layout."""
        prepared = builder.prepare(
            scan_data,
            {"inputs": {"nmap-1.target": "example.com"}, "outputs": ["httpx"]},
            maxima=maxima,
        )

        assert prepared.changed is False
        assert prepared.allocation.machines == Machines(small=1, large=1)
        assert prepared.outputs == ["httpx-1"]
        assert [r.name for r in prepared.forest.roots][:2] == ["file-splitter-1", "httpx-1"]
        assert event_bus.get_event_history(LayoutComputedEvent) == []

    def test_prepare_from_graph_and_domain_config(self, builder, scan_graph, maxima):
        """Graphs and RunConfiguration objects are accepted directly."""
        config = RunConfiguration(inputs={"nmap-2.target": "scanme.org"}, machines=4)
        prepared = builder.prepare(scan_graph, config, maxima=maxima)

        assert prepared.allocation.parallelism == 4
        assert prepared.graph.get_primitive("string-input-2").value == "scanme.org"
        assert "string-input-2" not in scan_graph.primitive_nodes

    def test_allocation_failure_aborts(self, builder, scan_version, maxima):
        """A bad machine request stops preparation with the machines key."""
        with pytest.raises(CannotAllocateError) as exc_info:
            builder.prepare(
                scan_version,
                {"inputs": {"nmap-2.target": "x"}, "machines": {"small": 2, "medium": 1}},
                maxima=maxima,
            )
        assert exc_info.value.machine_class == "medium"
        assert exc_info.value.key == "machines"

    def test_ambiguous_output_aborts(self, builder, scan_version, maxima):
        """Output references go through the ambiguity check."""
        with pytest.raises(AmbiguousReferenceError) as exc_info:
            builder.prepare(scan_version, {"outputs": ["nmap"]}, maxima=maxima)
        assert exc_info.value.key == "outputs"

    def test_apply_failure_aborts(self, builder, scan_version, maxima, event_bus):
        """A failing input publishes no success events."""
        with pytest.raises(UndefinedReferenceError):
            builder.prepare(scan_version, {"inputs": {"ffuf.url": "x"}}, maxima=maxima)
        assert event_bus.get_event_history(ConfigurationAppliedEvent) == []

    def test_malformed_config(self, builder, scan_version, maxima):
        """Malformed configuration documents raise ValidationError."""
        with pytest.raises(ValidationError):
            builder.prepare(scan_version, {"machines": [1]}, maxima=maxima)


# ═══════════════════════════════════════════════════════════════════════════════
# Individual Steps
# ═══════════════════════════════════════════════════════════════════════════════

class TestRunBuilderSteps:
    """Step methods used on their own."""

    def test_resolve_outputs_dedups(self, builder, scan_graph):
        """Outputs resolve any node kind and drop duplicates."""
        outputs = builder.resolve_outputs(scan_graph, ["httpx", "httpx-1", "recon", "nmap-2"])
        assert outputs == ["httpx-1", "recon-script-1", "nmap-2"]

    def test_allocate_single_machine(self, builder):
        """Tool mode needs no maxima."""
        allocation = builder.allocate(None, None, single_machine=True)
        assert allocation.machines == Machines(small=1)

    def test_create_modes(self, tmp_path):
        """Factory modes pick matching configs."""
        (tmp_path / "hosts.txt").write_text("example.com\n")
        builder = RunBuilder.create("development", base_dir=str(tmp_path), event_bus=WRBEventBus())
        graph_data = {
            "nodes": {
                "httpx-1": {
                    "name": "httpx-1",
                    "meta": {"label": "httpx"},
                    "inputs": {"urls": {"type": "FILE", "order": 0}},
                },
            },
        }
        prepared = builder.prepare(
            graph_data, {"inputs": {"httpx.urls": "hosts.txt"}}, maxima=Machines(small=1),
        )
        assert prepared.pending_uploads == ["http-input-1"]
        assert prepared.graph.get_primitive("http-input-1").value == "trickest://file/hosts.txt"
