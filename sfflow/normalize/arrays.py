# sfflow/normalize/arrays.py
"""
List normalization for decoded Flow documents.

An XML element that occurs once decodes to a bare mapping (or string), the
same element repeated decodes to a list. The passes below rewrite a decoded
Flow in place so that every field declared by the schema table is a list,
whatever the source happened to contain.
"""
from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Optional

from sfflow.schema.table import DEFAULT_SCHEMA, SchemaEntry, SchemaTable
from sfflow.utils.logger import get_logger

log = get_logger("normalize")


def ensure_list(container: Any, field_name: str) -> None:
    """
    Force container[field_name] to be a list.

      {"items": "x"}   -> {"items": ["x"]}
      {"items": None}  -> {"items": []}
      {}               -> {"items": []}

    Lists are left alone, so calling it twice equals calling it once.
    Containers that are not mappings are ignored.
    """
    if not isinstance(container, MutableMapping):
        return
    value = container.get(field_name)
    if not value:
        container[field_name] = []
    elif not isinstance(value, list):
        container[field_name] = [value]


class Normalizer:
    """Applies one schema table to decoded Flow documents."""

    def __init__(self, schema: SchemaTable = DEFAULT_SCHEMA):
        self.schema = schema

    def normalize(self, flow: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        """Top-level list fields first, then the nested entries. Mutates and returns flow."""
        for name in self.schema.array_fields:
            ensure_list(flow, name)
        self.process_nested(flow)
        log.debug(
            "normalized flow: %d nodes across %d collections",
            sum(len(flow[n]) for n in self.schema.node_fields),
            len(self.schema.node_fields),
        )
        return flow

    def process_nested(self, obj: Optional[MutableMapping[str, Any]]) -> None:
        """Apply every nested entry of the table whose field is present on obj."""
        if not isinstance(obj, MutableMapping):
            return
        for name, entry in self.schema.nested.items():
            value = obj.get(name)
            if not value:
                continue
            if name == self.schema.entry_field:
                # zero or one entry node: process the mapping itself
                if isinstance(value, MutableMapping):
                    self._process_element(value, entry)
                else:
                    log.debug("entry field %r is %s, not a mapping; skipped", name, type(value).__name__)
                continue
            self._process_field(obj, name, entry)

    def _process_field(self, container: MutableMapping[str, Any], name: str, entry: SchemaEntry) -> None:
        ensure_list(container, name)
        for element in container[name]:
            # empty XML elements decode to None, text-only ones to str
            if isinstance(element, MutableMapping):
                self._process_element(element, entry)

    def _process_element(self, element: MutableMapping[str, Any], entry: SchemaEntry) -> None:
        for child in entry.child_arrays:
            ensure_list(element, child)

        for child, child_entry in entry.nested.items():
            if element.get(child):
                self._process_field(element, child, child_entry)

        # same-shaped group one level down; an empty list ends the recursion
        if entry.recursive and element.get(entry.recursive):
            self._process_field(element, entry.recursive, entry)


def ensure_list_properties(flow: MutableMapping[str, Any], schema: SchemaTable = DEFAULT_SCHEMA) -> MutableMapping[str, Any]:
    """
    Make every list field of a decoded Flow a list, in place.

        flow = xmltodict.parse(text)["Flow"]
        ensure_list_properties(flow)
        flow["decisions"][0]["rules"]  # always a list now
    """
    return Normalizer(schema).normalize(flow)


def process_nested_arrays(obj: Optional[MutableMapping[str, Any]], schema: SchemaTable = DEFAULT_SCHEMA) -> None:
    """Nested part of the normalization only; top-level list fields are not added."""
    Normalizer(schema).process_nested(obj)
