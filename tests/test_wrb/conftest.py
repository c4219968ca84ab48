"""
Pytest fixtures for WRB tests.
"""

import pytest
from typing import Any, Dict

from wrb.config import WRBConfig
from wrb.application.services import ConfigApplier
from wrb.domain.models import WorkflowVersionGraph
from wrb.infrastructure.events import WRBEventBus
from wrb.infrastructure.files import InMemoryFileProbe


# ═══════════════════════════════════════════════════════════════════════════════
# Workflow Version Payloads
# ═══════════════════════════════════════════════════════════════════════════════

def scan_workflow_data() -> Dict[str, Any]:
    """
    Graph section of a small recon workflow.

    string-input-1 ("example.com") feeds nmap-1.target; nmap-1 feeds httpx-1.
    nmap-1 and nmap-2 share the label "nmap".
    """
    return {
        "nodes": {
            "nmap-1": {
                "name": "nmap-1",
                "id": "7c1e0e7a-tool",
                "meta": {"label": "nmap", "coordinates": {"x": 0.0, "y": 0.0}},
                "inputs": {
                    "target": {"type": "STRING", "order": 0, "description": "Target host", "visible": True},
                    "target/string-input-1": {
                        "type": "STRING",
                        "order": 0,
                        "description": "Target host",
                        "visible": True,
                        "value": "example.com",
                    },
                    "verbose": {"type": "BOOLEAN", "order": 1},
                    "config": {"type": "FILE", "order": 2},
                    "templates": {"type": "FOLDER", "order": 3},
                },
                "outputs": {"file": {"type": "FILE", "order": 0}},
            },
            "nmap-2": {
                "name": "nmap-2",
                "meta": {"label": "nmap", "coordinates": {"x": 0.0, "y": 0.0}},
                "inputs": {"target": {"type": "STRING", "order": 0}},
                "outputs": {"file": {"type": "FILE", "order": 0}},
            },
            "httpx-1": {
                "name": "httpx-1",
                "meta": {"label": "httpx", "coordinates": {"x": 0.0, "y": 0.0}},
                "inputs": {"urls": {"type": "FILE", "order": 0}},
                "outputs": {"file": {"type": "FILE", "order": 0}},
            },
            "file-splitter-1": {
                "name": "file-splitter-1",
                "meta": {"label": "splitter", "coordinates": {"x": 0.0, "y": 0.0}},
                "inputs": {"files": {"type": "FILE", "order": 0, "multi": True}},
                "outputs": {"output": {"type": "STRING", "order": 0}},
            },
            "recon-script-1": {
                "name": "recon-script-1",
                "meta": {"label": "recon", "coordinates": {"x": 0.0, "y": 0.0}},
                "script": {"source": "cat in/*"},
                "inputs": {"in": {"type": "STRING", "order": 0}},
                "outputs": {"file": {"type": "FILE", "order": 0}},
            },
        },
        "connections": [
            {
                "source": {"id": "output/string-input-1/output"},
                "destination": {"id": "input/nmap-1/target/string-input-1"},
            },
            {
                "source": {"id": "output/nmap-1/file"},
                "destination": {"id": "input/httpx-1/urls/nmap-1"},
            },
        ],
        "primitiveNodes": {
            "string-input-1": {
                "name": "string-input-1",
                "type": "STRING",
                "label": "example.com",
                "value": "example.com",
                "type_name": "STRING",
                "coordinates": {"x": 0.0, "y": 0.0},
            },
        },
        "annotations": {},
    }


def scan_workflow_version() -> Dict[str, Any]:
    """Full version payload as fetched from the remote service."""
    return {
        "id": "5f0e8a1c-version",
        "name": "recon",
        "version_number": 3,
        "workflow_info": "a9d2-workflow",
        "data": scan_workflow_data(),
    }


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════

@pytest.fixture
def config() -> WRBConfig:
    return WRBConfig.for_testing()


@pytest.fixture
def file_probe() -> InMemoryFileProbe:
    return InMemoryFileProbe(["a.txt", "b.txt", "lists/hosts.txt"])


@pytest.fixture
def event_bus() -> WRBEventBus:
    return WRBEventBus(max_history=100)


@pytest.fixture
def scan_data() -> Dict[str, Any]:
    return scan_workflow_data()


@pytest.fixture
def scan_version() -> Dict[str, Any]:
    return scan_workflow_version()


@pytest.fixture
def scan_graph() -> WorkflowVersionGraph:
    return WorkflowVersionGraph.from_dict(scan_workflow_data())


@pytest.fixture
def applier(config, file_probe, event_bus) -> ConfigApplier:
    return ConfigApplier(config, file_probe, event_bus)
