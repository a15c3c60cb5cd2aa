#!/usr/bin/env python3
"""
FNPROTECT VALIDATOR - The Judge
-------------------------------
The Validator is the final safety gate before a guard record leaves the
engine. It checks the exported document against a small structural catalog
of the Usage / ClusterUsage kinds so that a malformed record aborts the
invocation instead of reaching the cluster.

Author: FnProtect Team
Date: 2026-10-18
"""

from typing import Any, Dict, Tuple
import logging
from ruamel.yaml.comments import CommentedMap

logger = logging.getLogger("fnprotect.validator")

_REF_SCHEMA = {
    "type": "object",
    "required": ["apiVersion", "kind", "resourceRef"],
    "fields": {
        "apiVersion": {"type": "string"},
        "kind": {"type": "string"},
        "resourceRef": {
            "type": "object",
            "required": ["name"],
            "fields": {"name": {"type": "string"}},
        },
    },
}

_USAGE_SCHEMA = {
    "required": ["apiVersion", "kind", "metadata", "spec"],
    "fields": {
        "apiVersion": {"type": "string"},
        "kind": {"type": "string"},
        "metadata": {
            "type": "object",
            "required": ["name"],
            "fields": {"name": {"type": "string"}, "namespace": {"type": "string"}},
        },
        "spec": {
            "type": "object",
            "required": ["of", "reason"],
            "fields": {"of": _REF_SCHEMA, "reason": {"type": "string"}},
        },
    },
}

# Distilled catalog of the guard-record kinds this engine emits
GUARD_CATALOG: Dict[str, Dict[str, Any]] = {
    "Usage": _USAGE_SCHEMA,
    "ClusterUsage": _USAGE_SCHEMA,
}


class GuardValidator:
    """
    Enforces schema integrity on exported guard documents.
    Unknown fields are a violation: the exporter writes every key.
    """

    def __init__(self, catalog: Dict[str, Any] = None):
        self.catalog = catalog if catalog is not None else GUARD_CATALOG

    def validate(self, doc: Any) -> Tuple[bool, str]:
        if not isinstance(doc, (dict, CommentedMap)):
            return False, "Aborting: guard document is not a mapping."

        kind = doc.get("kind")
        schema = self.catalog.get(kind)
        if not schema:
            return False, f"Validation Failed: '{kind}' is not a known guard-record kind."

        valid, err = self._deep_validate(doc, schema)
        if not valid:
            logger.debug("guard document rejected: %s", err)
        return valid, err

    def _deep_validate(self, doc: Any, schema: Dict[str, Any], path: str = "") -> Tuple[bool, str]:
        for req in schema.get("required", []):
            if req not in doc:
                return False, f"Structural Error: Field '{path + req}' is required but missing."

        schema_fields = schema.get("fields", {})
        for key, value in doc.items():
            field_info = schema_fields.get(key)

            if not field_info:
                return False, f"Strict Mode Violation: Unknown field '{path + key}'."

            expected_type = field_info.get("type")

            if expected_type == "object":
                if not isinstance(value, (dict, CommentedMap)):
                    return False, f"Logic Error: '{path + key}' must be a map/object."
                valid, err = self._deep_validate(value, field_info, path=f"{path}{key}.")
                if not valid:
                    return False, err

            elif expected_type == "string":
                # Names and references must be usable identifiers
                if not isinstance(value, str) or not value:
                    return False, f"Logic Error: '{path + key}' must be a non-empty string."

        return True, "Guard document passes structural integrity check."
