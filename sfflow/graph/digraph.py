# sfflow/graph/digraph.py
from collections.abc import Mapping
from typing import Any, Dict, Set

import networkx as nx

from sfflow.graph.nodes import iter_connector_refs
from sfflow.schema.table import DEFAULT_SCHEMA, SchemaTable

# Graph id of a start node without a name
START_ID = "$start"


def _node_id(node: Mapping[str, Any], fallback: str) -> str:
    return node.get("name") or fallback


def build_flow_graph(flow: Mapping[str, Any], schema: SchemaTable = DEFAULT_SCHEMA) -> nx.MultiDiGraph:
    """
    Project a Flow onto a networkx MultiDiGraph.

    - one graph node per Flow node, attribute kind = owning collection ("start" for the entry node)
    - one edge per connector, attributes slot / index as in ConnectorRef
      (a decision with two rules targeting the same node yields two edges)
    - targets that name no node are still added, with kind=None
    """
    G = nx.MultiDiGraph()
    owners: Dict[str, Mapping[str, Any]] = {}

    start = flow.get(schema.entry_field)
    if isinstance(start, Mapping):
        sid = _node_id(start, START_ID)
        G.add_node(sid, kind=schema.entry_field, label=start.get("label"))
        owners[sid] = start

    for kind in schema.node_fields:
        collection = flow.get(kind)
        if not isinstance(collection, list):
            continue
        for node in collection:
            if not isinstance(node, Mapping) or not node.get("name"):
                continue
            nid = node["name"]
            G.add_node(nid, kind=kind, label=node.get("label"))
            owners[nid] = node

    for src, node in owners.items():
        for ref in iter_connector_refs(node):
            tgt = ref.connector.get("targetReference")
            if not tgt:
                continue
            if tgt not in G:
                G.add_node(tgt, kind=None, label=None)
            G.add_edge(src, tgt, slot=ref.slot, index=ref.index)
    return G


def unreachable_nodes(flow: Mapping[str, Any], schema: SchemaTable = DEFAULT_SCHEMA) -> Set[str]:
    """
    Names of Flow nodes that cannot be reached from the start node.
    Without a start node there is nothing to measure from: empty set.
    """
    G = build_flow_graph(flow, schema)
    start = flow.get(schema.entry_field)
    if not isinstance(start, Mapping):
        return set()
    root = _node_id(start, START_ID)
    reachable = nx.descendants(G, root) | {root}
    return {n for n, kind in G.nodes(data="kind") if kind is not None and n not in reachable}


def to_node_link(G: nx.MultiDiGraph) -> Dict[str, Any]:
    """JSON-ready node-link payload (nodes + edges) of a flow graph."""
    return {
        "nodes": [{"id": n, **attrs} for n, attrs in G.nodes(data=True)],
        "edges": [
            {"source": u, "target": v, **attrs}
            for u, v, attrs in G.edges(data=True)
        ],
    }
