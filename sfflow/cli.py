#!/usr/bin/env python3
# sfflow/cli.py

import json
import logging
from pathlib import Path
from typing import Optional

import typer

from sfflow.codec.flow import parse_from_file, stringify_to_file
from sfflow.errors import FlowError
from sfflow.graph.digraph import build_flow_graph, to_node_link, unreachable_nodes
from sfflow.graph.nodes import find_parent_flow_nodes, get_connectors, get_flow_nodes, reparent_node
from sfflow.schema.table import DEFAULT_SCHEMA, load_schema_table
from sfflow.utils.io import write_json
from sfflow.utils.logger import init_logger

app = typer.Typer(help="sfflow CLI - inspect and rewire Salesforce Flow XML files")

_state = {"schema": DEFAULT_SCHEMA}


def _fail(err: Exception) -> None:
    print(f"[error] {err}")
    raise typer.Exit(code=1)


def _load(path: Path):
    try:
        return parse_from_file(path, _state["schema"])
    except FlowError as err:
        _fail(err)


def _save(flow, path: Path) -> None:
    try:
        stringify_to_file(flow, path, _state["schema"])
    except FlowError as err:
        _fail(err)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
    schema: Optional[Path] = typer.Option(None, "--schema", help="Schema table (.json/.yaml) replacing the built-in Flow table"),
):
    """Global options."""
    init_logger(level=logging.DEBUG if verbose else None)
    _state["schema"] = DEFAULT_SCHEMA
    if schema is not None:
        try:
            _state["schema"] = load_schema_table(schema)
        except (FlowError, OSError, ValueError) as err:
            _fail(err)


@app.command()
def info(path: Path = typer.Argument(..., help="Flow XML file")):
    """Print flow metadata and every node with its connector targets."""
    flow = _load(path)
    nodes = get_flow_nodes(flow, _state["schema"])

    print(f"API Version: {flow.get('apiVersion')}")
    print(f"Label:       {flow.get('label')}")
    print(f"Status:      {flow.get('status')}")
    print(f"Nodes:       {len(nodes)}")
    for node in nodes:
        targets = [c.get("targetReference") for c in get_connectors(node)]
        arrow = f" -> {', '.join(str(t) for t in targets)}" if targets else ""
        print(f"- {node.get('name') or '(start)'}{arrow}")

    lost = unreachable_nodes(flow, _state["schema"])
    if lost:
        print(f"Unreachable from start: {', '.join(sorted(lost))}")


@app.command("format")
def format_(
    path: Path = typer.Argument(..., help="Flow XML file"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write here instead of rewriting PATH"),
):
    """Rewrite a flow in canonical form (lists sorted by name)."""
    flow = _load(path)
    target = out or path
    _save(flow, target)
    print(f"[ok] wrote {target}")


@app.command()
def parents(
    path: Path = typer.Argument(..., help="Flow XML file"),
    name: str = typer.Argument(..., help="Node whose parents to list"),
):
    """List the nodes with a connector pointing at NAME."""
    flow = _load(path)
    found = find_parent_flow_nodes(flow, name, _state["schema"])
    if not found:
        print(f"No parent nodes for {name}")
        return
    for node in found:
        print(node.get("name") or "(start)")


@app.command()
def reparent(
    path: Path = typer.Argument(..., help="Flow XML file"),
    source: str = typer.Argument(..., help="Node whose incoming connectors move"),
    target: str = typer.Argument(..., help="Node the connectors should point at"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write here instead of rewriting PATH"),
):
    """Point every connector that targets SOURCE at TARGET."""
    flow = _load(path)
    updated = reparent_node(flow, source, target, _state["schema"])
    destination = out or path
    _save(flow, destination)
    print(f"[ok] rewired {updated} connector(s) from {source} to {target} -> {destination}")


@app.command()
def graph(
    path: Path = typer.Argument(..., help="Flow XML file"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="JSON file for the node-link graph (stdout if omitted)"),
):
    """Export the flow's node graph as node-link JSON."""
    flow = _load(path)
    payload = to_node_link(build_flow_graph(flow, _state["schema"]))
    if out is None:
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return
    try:
        write_json(out, payload)
    except OSError as err:
        _fail(err)
    print(f"[ok] wrote graph to {out}")


if __name__ == "__main__":
    app()
