# sfflow/schema/table.py
"""
Schema table for Flow documents.

Decides which fields of a decoded Flow must always be lists, how deep that
rule reaches, and which nested lists canonical ordering sorts. The table is
plain data: supporting a new nested structure means adding an entry to
FLOW_SCHEMA, not code.
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Optional, Tuple

from jsonschema import ValidationError, validate

from sfflow.errors import SchemaConfigError
from sfflow.schema.config_schema import SCHEMA_TABLE_SCHEMA
from sfflow.utils.io import PathLike, load_any
from sfflow.utils.logger import get_logger

log = get_logger("schema")

def _empty_mapping() -> Mapping[str, Any]:
    # mappingproxy is unhashable before 3.12, so dataclasses refuse it as a plain default
    return MappingProxyType({})


@dataclass(frozen=True)
class SchemaEntry:
    """
    One field group.

    child_arrays: child fields of every element that must be lists
    nested:       child field -> entry applied to that child's elements
    recursive:    child field whose elements have this same entry's shape
    """
    child_arrays: Tuple[str, ...]
    nested: Mapping[str, "SchemaEntry"] = field(default_factory=_empty_mapping)
    recursive: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SchemaEntry":
        children = tuple(data.get("childArrays", ()))
        nested_raw = data.get("nestedConfig") or {}
        recursive = data.get("recursive")

        for child in nested_raw:
            if child not in children:
                raise SchemaConfigError(f"nestedConfig key '{child}' is not listed in childArrays {list(children)}")
        if recursive is not None and recursive not in children:
            raise SchemaConfigError(f"recursive field '{recursive}' is not listed in childArrays {list(children)}")

        nested = {k: cls.from_mapping(v) for k, v in nested_raw.items()}
        return cls(
            child_arrays=children,
            nested=MappingProxyType(nested),
            recursive=recursive,
        )

    def to_mapping(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"childArrays": list(self.child_arrays)}
        if self.nested:
            out["nestedConfig"] = {k: v.to_mapping() for k, v in self.nested.items()}
        if self.recursive is not None:
            out["recursive"] = self.recursive
        return out


@dataclass(frozen=True)
class SchemaTable:
    """Immutable configuration handed to the normalizer, the sorter and the graph view."""
    node_fields: Tuple[str, ...]
    auxiliary_fields: Tuple[str, ...]
    nested: Mapping[str, SchemaEntry]
    sort_nested: Mapping[str, Tuple[str, ...]] = field(default_factory=_empty_mapping)
    entry_field: str = "start"

    @property
    def array_fields(self) -> Tuple[str, ...]:
        """Every top-level field that is always a list: node collections first."""
        return self.node_fields + self.auxiliary_fields

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SchemaTable":
        """Build a table from its JSON/YAML layout, validating it first."""
        try:
            validate(instance=data, schema=SCHEMA_TABLE_SCHEMA)
        except ValidationError as e:
            path = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise SchemaConfigError(f"Invalid schema table at {path}: {e.message}") from e

        nested = {k: SchemaEntry.from_mapping(v) for k, v in data["nestedArrays"].items()}
        sort_nested = {k: tuple(v["childArrays"]) for k, v in (data.get("nestedSort") or {}).items()}
        return cls(
            node_fields=tuple(data["nodeFields"]),
            auxiliary_fields=tuple(data["auxiliaryFields"]),
            nested=MappingProxyType(nested),
            sort_nested=MappingProxyType(sort_nested),
            entry_field=data.get("entryField", "start"),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "nodeFields": list(self.node_fields),
            "auxiliaryFields": list(self.auxiliary_fields),
            "entryField": self.entry_field,
            "nestedArrays": {k: v.to_mapping() for k, v in self.nested.items()},
            "nestedSort": {k: {"childArrays": list(v)} for k, v in self.sort_nested.items()},
        }


def load_schema_table(path: PathLike) -> SchemaTable:
    """Load a schema table from a .json / .yaml / .yml file."""
    data = load_any(path)
    if not isinstance(data, Mapping):
        raise SchemaConfigError(f"Schema table file {path} must contain a mapping, got {type(data).__name__}")
    table = SchemaTable.from_mapping(data)
    log.debug("loaded schema table from %s (%d nested entries)", path, len(table.nested))
    return table


# ---------------------------------------------------------------------------
# Flow content
# ---------------------------------------------------------------------------
FLOW_SCHEMA: Dict[str, Any] = {
    "nodeFields": [
        "decisions",
        "actionCalls",
        "apexPluginCalls",
        "assignments",
        "collectionProcessors",
        "customErrors",
        "loops",
        "recordCreates",
        "recordDeletes",
        "recordLookups",
        "recordRollbacks",
        "recordUpdates",
        "screens",
        "subflows",
        "transforms",
        "waits",
        "orchestratedStages",
    ],
    "auxiliaryFields": [
        "choices",
        "constants",
        "dynamicChoiceSets",
        "environments",
        "formulas",
        "processMetadataValues",
        "stages",
        "steps",
        "textTemplates",
        "variables",
    ],
    "entryField": "start",
    "nestedArrays": {
        "decisions": {
            "childArrays": ["rules"],
            "nestedConfig": {
                "rules": {"childArrays": ["conditions"]},
            },
        },
        "screens": {
            "childArrays": ["fields", "actions", "rules", "triggers"],
            "nestedConfig": {
                "rules": {"childArrays": ["conditions", "ruleActions"]},
                "triggers": {"childArrays": ["handlers"]},
                # screen fields can hold further screen fields (sections, columns)
                "fields": {
                    "childArrays": [
                        "fields",
                        "choiceReferences",
                        "inputParameters",
                        "outputParameters",
                        "dataTypeMappings",
                    ],
                    "recursive": "fields",
                },
            },
        },
        "recordLookups": {"childArrays": ["filters", "outputAssignments", "queriedFields"]},
        "recordCreates": {"childArrays": ["inputAssignments"]},
        "recordUpdates": {"childArrays": ["filters", "inputAssignments"]},
        "recordDeletes": {"childArrays": ["filters"]},
        "assignments": {"childArrays": ["assignmentItems"]},
        "actionCalls": {"childArrays": ["inputParameters", "outputParameters", "dataTypeMappings"]},
        "apexPluginCalls": {"childArrays": ["inputParameters", "outputParameters"]},
        "subflows": {"childArrays": ["inputAssignments", "outputAssignments"]},
        "waits": {
            "childArrays": ["waitEvents"],
            "nestedConfig": {
                "waitEvents": {
                    "childArrays": ["conditions", "filters", "inputParameters", "outputParameters"],
                },
            },
        },
        "transforms": {
            "childArrays": ["transformValues"],
            "nestedConfig": {
                "transformValues": {
                    "childArrays": ["transformValueActions"],
                    "nestedConfig": {
                        "transformValueActions": {"childArrays": ["inputParameters"]},
                    },
                },
            },
        },
        "orchestratedStages": {
            "childArrays": [
                "stageSteps",
                "exitConditions",
                "exitActionInputParameters",
                "exitActionOutputParameters",
            ],
            "nestedConfig": {
                "stageSteps": {
                    "childArrays": [
                        "assignees",
                        "entryConditions",
                        "exitConditions",
                        "inputParameters",
                        "outputParameters",
                        "entryActionInputParameters",
                        "entryActionOutputParameters",
                        "exitActionInputParameters",
                        "exitActionOutputParameters",
                    ],
                },
            },
        },
        # single mapping, not a list
        "start": {
            "childArrays": ["filters", "scheduledPaths", "capabilityTypes"],
            "nestedConfig": {
                "capabilityTypes": {"childArrays": ["inputs"]},
            },
        },
        "dynamicChoiceSets": {"childArrays": ["filters", "outputAssignments"]},
        "collectionProcessors": {"childArrays": ["conditions", "mapItems", "sortOptions"]},
        "customErrors": {"childArrays": ["customErrorMessages"]},
    },
    "nestedSort": {
        "decisions": {"childArrays": ["rules"]},
        "screens": {"childArrays": ["fields", "actions"]},
    },
}

DEFAULT_SCHEMA = SchemaTable.from_mapping(FLOW_SCHEMA)
