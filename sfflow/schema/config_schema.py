# sfflow/schema/config_schema.py
# JSON Schema for a schema table mapping (see sfflow/schema/table.py).
# "$defs/entry" is self-referencing: nestedArrays entries nest to any depth.

FIELD_NAME = {"type": "string", "minLength": 1}

SCHEMA_TABLE_SCHEMA = {
    "type": "object",
    "required": ["nodeFields", "auxiliaryFields", "nestedArrays"],
    "properties": {
        # Node-bearing collections, in graph enumeration order
        "nodeFields": {
            "type": "array",
            "items": FIELD_NAME,
            "uniqueItems": True,
        },
        # Collections that always hold lists but are not graph nodes
        "auxiliaryFields": {
            "type": "array",
            "items": FIELD_NAME,
            "uniqueItems": True,
        },
        # Singleton entry node (a mapping, not a list)
        "entryField": FIELD_NAME,

        "nestedArrays": {
            "type": "object",
            "additionalProperties": {"$ref": "#/$defs/entry"},
        },

        # Nested lists that canonical ordering sorts by name
        "nestedSort": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["childArrays"],
                "properties": {
                    "childArrays": {"type": "array", "items": FIELD_NAME},
                },
                "additionalProperties": False,
            },
        },
    },
    "additionalProperties": False,
    "$defs": {
        "entry": {
            "type": "object",
            "required": ["childArrays"],
            "properties": {
                "childArrays": {
                    "type": "array",
                    "items": FIELD_NAME,
                    "uniqueItems": True,
                },
                "nestedConfig": {
                    "type": "object",
                    "additionalProperties": {"$ref": "#/$defs/entry"},
                },
                # Child whose elements repeat the shape of the current entry
                "recursive": FIELD_NAME,
            },
            "additionalProperties": False,
        },
    },
}
