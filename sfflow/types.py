# sfflow/types.py
# Typed views over decoded Flow mappings. Documents stay plain dicts at
# runtime; these only describe the keys the graph view reads and writes.
from __future__ import annotations

from typing import Any, Dict, List, TypedDict


class FlowConnector(TypedDict, total=False):
    targetReference: str
    isGoTo: str
    processMetadataValues: List[Dict[str, Any]]


class ConnectedElement(TypedDict, total=False):
    """A rule, scheduled path or wait event: a named outcome with its own connector."""
    name: str
    label: str
    connector: FlowConnector


class ConnectorSlots(TypedDict, total=False):
    """Capability subset shared by every Flow node variant."""
    name: str
    connector: FlowConnector
    defaultConnector: FlowConnector
    nextValueConnector: FlowConnector
    noMoreValuesConnector: FlowConnector
    faultConnector: FlowConnector
    rules: List[ConnectedElement]
    scheduledPaths: List[ConnectedElement]
    waitEvents: List[ConnectedElement]


FlowNode = Dict[str, Any]
FlowDocument = Dict[str, Any]
