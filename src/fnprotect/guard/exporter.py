#!/usr/bin/env python3
"""
FNPROTECT EXPORTER - Wire Documents
-----------------------------------
Converts GuardRecords into Kubernetes-shaped documents and renders
documents back to YAML with a canonical key order.

Author: FnProtect Team
Date: 2026-10-18
"""

import io
from typing import Any, List, Union
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from fnprotect.core.models import GuardRecord, Scope


class GuardExporter:
    """
    The Reconstructor: the only place a GuardRecord becomes an
    unstructured document.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["apiVersion", "kind", "metadata", "spec", "data", "status"]

    def to_document(self, record: GuardRecord) -> CommentedMap:
        """Builds the Usage/ClusterUsage document for a record."""
        metadata = CommentedMap()
        metadata["name"] = record.name
        if record.scope is Scope.NAMESPACED:
            metadata["namespace"] = record.namespace

        resource_ref = CommentedMap()
        resource_ref["name"] = record.of_name

        of = CommentedMap()
        of["apiVersion"] = record.of_api_version
        of["kind"] = record.of_kind
        of["resourceRef"] = resource_ref

        spec = CommentedMap()
        spec["of"] = of
        spec["reason"] = record.reason.value

        doc = CommentedMap()
        doc["apiVersion"] = record.api_version
        doc["kind"] = record.kind
        doc["metadata"] = metadata
        doc["spec"] = spec
        return doc

    def _get_sorted_map(self, data: Any) -> Any:
        """
        Recursively orders keys: well-known Kubernetes keys first, the rest
        in their original relative position.
        """
        if not isinstance(data, dict):
            return data

        keys = list(data.keys())

        def sort_logic(key):
            if key in self.preferred_order:
                return self.preferred_order.index(key)
            return len(self.preferred_order) + keys.index(key)

        sorted_map = CommentedMap()
        for key in sorted(keys, key=sort_logic):
            value = data[key]
            if isinstance(value, dict):
                value = self._get_sorted_map(value)
            elif isinstance(value, list):
                value = [self._get_sorted_map(item) for item in value]
            sorted_map[key] = value
        return sorted_map

    def dump(self, data: Any) -> str:
        stream = io.StringIO()
        self.yaml.dump(self._get_sorted_map(data), stream)
        return stream.getvalue()

    def export(self, docs: Union[Any, List[Any]]) -> str:
        """
        Exports documents into a single string with explicit separators.
        """
        stream = io.StringIO()
        docs = docs if isinstance(docs, list) else [docs]

        written = 0
        for doc in docs:
            if isinstance(doc, GuardRecord):
                doc = self.to_document(doc)
            if not doc:
                continue
            if written:
                stream.write("---\n")
            self.yaml.dump(self._get_sorted_map(doc), stream)
            written += 1

        return stream.getvalue()
