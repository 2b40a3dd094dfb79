# sfflow/graph/nodes.py
"""
Node graph view over a Flow document.

Nodes live in many differently named collections (decisions, screens, ...)
plus the single `start` node, and their outgoing edges live in several
connector slots. The functions here enumerate both uniformly so callers can
query and rewire a Flow without knowing each node variant.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, List, NamedTuple, Optional

from sfflow.schema.table import DEFAULT_SCHEMA, SchemaTable
from sfflow.types import ConnectorSlots, FlowConnector, FlowNode
from sfflow.utils.logger import get_logger

log = get_logger("graph")

# Enumeration order of connectors; callers rely on it positionally.
CONNECTOR_SLOTS = (
    "connector",
    "defaultConnector",
    "nextValueConnector",
    "noMoreValuesConnector",
    "faultConnector",
)
# Lists whose elements each carry their own "connector"
CONNECTOR_GROUPS = (
    "rules",
    "scheduledPaths",
    "waitEvents",
)


class ConnectorRef(NamedTuple):
    """
    Where a connector lives on its node.

    slot:  the node field holding it ("defaultConnector", "rules", ...)
    index: position in the owning list for CONNECTOR_GROUPS, None otherwise
    """
    slot: str
    index: Optional[int]
    connector: FlowConnector


def get_flow_nodes(flow: Mapping[str, Any], schema: SchemaTable = DEFAULT_SCHEMA) -> List[FlowNode]:
    """
    All nodes of a flow: the start node (if any), then each node collection
    in schema order, keeping the order inside every collection.

        nodes = get_flow_nodes(flow)
        print(f"Flow contains {len(nodes)} nodes")
    """
    nodes: List[FlowNode] = []
    start = flow.get(schema.entry_field)
    if isinstance(start, Mapping):
        nodes.append(start)

    for name in schema.node_fields:
        collection = flow.get(name)
        if not isinstance(collection, list):
            continue
        nodes.extend(n for n in collection if isinstance(n, Mapping))
    return nodes


def find_flow_node_by_name(
    flow: Mapping[str, Any],
    name: str,
    schema: SchemaTable = DEFAULT_SCHEMA,
) -> Optional[FlowNode]:
    """First node called `name`, or None. The (usually nameless) start node never matches None."""
    if name is None:
        return None
    for node in get_flow_nodes(flow, schema):
        if node.get("name") == name:
            return node
    return None


def iter_connector_refs(node: ConnectorSlots) -> Iterator[ConnectorRef]:
    """
    Yield every connector of a node, in this order:
      connector, defaultConnector, nextValueConnector, noMoreValuesConnector,
      faultConnector, each rule's connector, each scheduled path's connector,
      each wait event's connector.
    Unset slots are skipped.
    """
    for slot in CONNECTOR_SLOTS:
        conn = node.get(slot)
        if isinstance(conn, Mapping):
            yield ConnectorRef(slot, None, conn)

    for group in CONNECTOR_GROUPS:
        elements = node.get(group)
        if not isinstance(elements, list):
            continue
        for idx, element in enumerate(elements):
            if not isinstance(element, Mapping):
                continue
            conn = element.get("connector")
            if isinstance(conn, Mapping):
                yield ConnectorRef(group, idx, conn)


def get_connectors(node: ConnectorSlots) -> List[FlowConnector]:
    """
    Connectors of a node, in slot order (see iter_connector_refs).

        for conn in get_connectors(find_flow_node_by_name(flow, "MyDecision")):
            print(conn["targetReference"])
    """
    return [ref.connector for ref in iter_connector_refs(node)]


def _targets(node: Mapping[str, Any], child_name: str) -> bool:
    return any(c.get("targetReference") == child_name for c in get_connectors(node))


def find_parent_flow_nodes(
    flow: Mapping[str, Any],
    child_name: str,
    schema: SchemaTable = DEFAULT_SCHEMA,
) -> List[FlowNode]:
    """Nodes with at least one connector pointing at child_name; each node listed once."""
    return [node for node in get_flow_nodes(flow, schema) if _targets(node, child_name)]


def reparent_node(
    flow: Mapping[str, Any],
    source_node_name: str,
    target_node_name: str,
    schema: SchemaTable = DEFAULT_SCHEMA,
) -> int:
    """
    Point every connector that targets source_node_name at target_node_name.

    Connectors are rewritten in place; the node called source_node_name is
    not touched, only its incoming edges move. Returns the number of
    connectors rewritten (0 when nothing pointed at the source).

        reparent_node(flow, "OldNode", "NewNode")
    """
    updated = 0
    for parent in find_parent_flow_nodes(flow, source_node_name, schema):
        for ref in iter_connector_refs(parent):
            if ref.connector.get("targetReference") == source_node_name:
                ref.connector["targetReference"] = target_node_name
                updated += 1
                log.debug(
                    "reparent %s.%s%s: %s -> %s",
                    parent.get("name") or schema.entry_field,
                    ref.slot,
                    "" if ref.index is None else f"[{ref.index}]",
                    source_node_name,
                    target_node_name,
                )
    return updated
