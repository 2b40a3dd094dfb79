# sfflow/codec/flow.py
"""Flow XML <-> normalized Flow dict."""
from __future__ import annotations

from typing import Any, Mapping

from sfflow.codec.xml import XML_CONFIG, XmlOptions, decode, encode, expand_self_closing
from sfflow.errors import FlowFileNotFoundError, FlowParseError, FlowPermissionError, FlowRootError
from sfflow.normalize.arrays import Normalizer
from sfflow.normalize.ordering import sort_flow_arrays
from sfflow.schema.table import DEFAULT_SCHEMA, SchemaTable
from sfflow.types import FlowDocument
from sfflow.utils.io import PathLike, read_text, write_text
from sfflow.utils.logger import get_logger

log = get_logger("codec")

ROOT_ELEMENT = "Flow"


def parse(xml: str, schema: SchemaTable = DEFAULT_SCHEMA, options: XmlOptions = XML_CONFIG) -> FlowDocument:
    """
    Parse Flow XML into a normalized Flow dict.

    Raises:
        FlowRootError:  the document has no <Flow> root element
        FlowParseError: the XML itself is invalid (decoder error kept as __cause__)
    """
    try:
        tree = decode(xml, options)
    except Exception as err:
        raise FlowParseError(f"Failed to parse XML: {err}") from err

    flow = tree.get(ROOT_ELEMENT) if isinstance(tree, dict) else None
    if not flow or not isinstance(flow, dict):
        raise FlowRootError("XML does not contain a Flow element")

    Normalizer(schema).normalize(flow)
    log.debug("parsed flow %r (%d chars)", flow.get("label"), len(xml))
    return flow


def parse_from_file(path: PathLike, schema: SchemaTable = DEFAULT_SCHEMA, options: XmlOptions = XML_CONFIG) -> FlowDocument:
    """Read and parse a Flow file; missing or unreadable files raise path-carrying errors."""
    try:
        xml = read_text(path)
    except FileNotFoundError as err:
        raise FlowFileNotFoundError(f"File not found: {path}", path) from err
    except PermissionError as err:
        raise FlowPermissionError(f"Permission denied to read file: {path}", path) from err
    return parse(xml, schema, options)


def stringify(flow: Mapping[str, Any], schema: SchemaTable = DEFAULT_SCHEMA, options: XmlOptions = XML_CONFIG) -> str:
    """
    Serialize a Flow to XML text in canonical form.

    Lists are sorted by name on a copy (flow is not modified), the root gets
    the metadata namespace, empty elements are written as open/close pairs,
    and the text ends with a single newline.
    """
    sorted_flow = sort_flow_arrays(flow, schema) or {}
    tree = {
        ROOT_ELEMENT: {
            f"{options.attr_prefix}xmlns": options.namespace,
            **sorted_flow,
        },
    }
    xml = expand_self_closing(encode(tree, options)) + "\n"
    log.debug("stringified flow %r (%d chars)", flow.get("label") if flow else None, len(xml))
    return xml


def stringify_to_file(
    flow: Mapping[str, Any],
    path: PathLike,
    schema: SchemaTable = DEFAULT_SCHEMA,
    options: XmlOptions = XML_CONFIG,
) -> None:
    """Write a Flow to path. The directory must exist."""
    xml = stringify(flow, schema, options)
    try:
        write_text(path, xml)
    except FileNotFoundError as err:
        raise FlowFileNotFoundError(f"Directory not found for file: {path}", path) from err
    except PermissionError as err:
        raise FlowPermissionError(f"Permission denied to write file: {path}", path) from err
    log.debug("wrote flow to %s", path)
