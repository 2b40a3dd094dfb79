# sfflow/normalize/ordering.py
"""Canonical (name-sorted) ordering of Flow lists, used before serialization."""
from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Callable, Dict, Optional, Tuple

from pyuca import Collator

from sfflow.schema.table import DEFAULT_SCHEMA, SchemaTable
from sfflow.utils.logger import get_logger

log = get_logger("ordering")


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # loads the DUCET table once, on first sort
    return Collator()


def name_sort_key(name: str) -> Tuple[int, ...]:
    """
    Unicode collation key (root locale, lowercase first on case ties).

    Punctuation sorts before digits and digits before letters; accented
    letters sit next to their base letter:
        "a_" < "a1" < "Ecole" < "étape" < "Step_B" < "Step2"
    """
    return _collator().sort_key(name)


def _element_name(element: Any) -> str:
    if isinstance(element, Mapping):
        name = element.get("name")
        return str(name) if name else ""
    return ""


def sort_by_name(items: Any, key: Callable[[str], Any] = name_sort_key) -> Any:
    """
    New list sorted by each element's "name"; the input list is not touched.

    Missing or empty names compare as "" and therefore come first. The sort
    is stable, so equal names keep their input order. Non-list input is
    returned as is.
    """
    if not isinstance(items, list):
        return items
    return sorted(items, key=lambda el: key(_element_name(el)))


def sort_flow_arrays(
    flow: Optional[Mapping[str, Any]],
    schema: SchemaTable = DEFAULT_SCHEMA,
    key: Callable[[str], Any] = name_sort_key,
) -> Optional[Dict[str, Any]]:
    """
    Shallow copy of flow with every top-level list field sorted by name.

    Collections listed in the table's sort allow-list (decisions -> rules,
    screens -> fields/actions) also get those nested lists sorted; the
    elements holding them are copied so the caller's flow is never mutated.
    """
    if not flow:
        return flow

    sorted_flow = dict(flow)
    for name in schema.array_fields:
        value = sorted_flow.get(name)
        if isinstance(value, list):
            sorted_flow[name] = sort_by_name(value, key)

    for name, children in schema.sort_nested.items():
        value = sorted_flow.get(name)
        if isinstance(value, list):
            sorted_flow[name] = [_sort_children(el, children, key) for el in value]

    log.debug("sorted %d list fields", len(schema.array_fields))
    return sorted_flow


def _sort_children(element: Any, children: Tuple[str, ...], key: Callable[[str], Any]) -> Any:
    if not isinstance(element, Mapping):
        return element
    if not any(isinstance(element.get(c), list) for c in children):
        return element
    copy = dict(element)
    for child in children:
        if isinstance(copy.get(child), list):
            copy[child] = sort_by_name(copy[child], key)
    return copy
