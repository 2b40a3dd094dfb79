# sfflow/codec/xml.py
"""
Thin adapter over xmltodict.

Text <-> generic tree of dict / list / str / None, attributes keyed with an
"@" prefix and mixed text under "#text". Nothing here knows about Flows.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict

import xmltodict


@dataclass(frozen=True)
class XmlOptions:
    version: str = "1.0"
    encoding: str = "UTF-8"
    namespace: str = "http://soap.sforce.com/2006/04/metadata"
    indent: str = "    "
    attr_prefix: str = "@"


XML_CONFIG = XmlOptions()

# "<tag attrs/>" at the end of a line
_SELF_CLOSING = re.compile(r"<(\w+)([^>]*)/>\n")
# text between two tags; "<" and ">" inside text are already entities
_TEXT_NODE = re.compile(r">([^<]+)<")
_QUOTE_ENTITIES = str.maketrans({'"': "&quot;", "'": "&apos;"})


def decode(text: str, options: XmlOptions = XML_CONFIG) -> Dict[str, Any]:
    """Parse XML text into a tree. Decoder errors (ExpatError, ...) propagate unchanged."""
    return xmltodict.parse(text, attr_prefix=options.attr_prefix)


def declaration(options: XmlOptions = XML_CONFIG) -> str:
    return f'<?xml version="{options.version}" encoding="{options.encoding}"?>'


def encode(tree: Dict[str, Any], options: XmlOptions = XML_CONFIG) -> str:
    """
    Serialize a tree with the declaration header and pretty indentation.
    The result has no trailing newline after the root's closing tag.
    """
    body = xmltodict.unparse(
        tree,
        full_document=False,
        short_empty_elements=False,
        pretty=True,
        indent=options.indent,
        newl="\n",
        attr_prefix=options.attr_prefix,
    )
    return declaration(options) + "\n" + escape_text_quotes(body)


def escape_text_quotes(xml: str) -> str:
    """
    Write '"' and "'" in text nodes as &quot; / &apos;, the way Salesforce
    metadata does. The SAX writer only escapes & < > there; attributes are
    left to its own quoting.
    """
    return _TEXT_NODE.sub(lambda m: ">" + m.group(1).translate(_QUOTE_ENTITIES) + "<", xml)


def expand_self_closing(xml: str) -> str:
    """Rewrite "<tag .../>" line endings into explicit "<tag ...></tag>" pairs."""
    return _SELF_CLOSING.sub(r"<\1\2></\1>\n", xml)
