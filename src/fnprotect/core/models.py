#!/usr/bin/env python3
"""
FNPROTECT CORE MODELS
---------------------
Defines the fundamental data structures used across the FnProtect engine.
These models represent the resource graph handed to a single function
invocation and the guard records synthesized from it.

Author: FnProtect Team
Date: 2026-10-18
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Label that opts a resource into deletion protection
PROTECTION_LABEL = "protection.fn.crossplane.io/block-deletion"

# Requirement group whose members are protected without a label check
WATCHED_RESOURCE_GROUP = "ops.crossplane.io/watched-resource"

_REASON_PREFIX = "created by function-deletion-protection "


class Reason(Enum):
    """The four trigger paths that can produce a guard record."""

    LABEL_TRIGGERED = _REASON_PREFIX + "via label " + PROTECTION_LABEL
    CHILD_RESOURCE_TRIGGERED = _REASON_PREFIX + "because a composed resource is protected"
    OPERATION_TRIGGERED = _REASON_PREFIX + "by an Operation"
    WATCH_TRIGGERED = _REASON_PREFIX + "by a WatchOperation"


class Scope(Enum):
    CLUSTER = "cluster"
    NAMESPACED = "namespaced"


class SchemaName(Enum):
    CURRENT = "current"
    LEGACY = "legacy"


@dataclass
class TargetResource:
    """
    A typed reference to any guardable entity.

    Identity is (kind, namespace, name). The raw manifest is carried so the
    response can echo desired resources back exactly as they were received.
    """
    api_version: str
    kind: str
    name: str
    namespace: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)
    manifest: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_manifest(cls, manifest: Dict[str, Any]) -> "TargetResource":
        """Builds a TargetResource from an unstructured Kubernetes object."""
        metadata = manifest.get("metadata") or {}
        labels = metadata.get("labels") or {}
        return cls(
            api_version=str(manifest.get("apiVersion") or ""),
            kind=str(manifest.get("kind") or ""),
            name=str(metadata.get("name") or ""),
            namespace=metadata.get("namespace") or None,
            labels={str(k): str(v) for k, v in labels.items()},
            manifest=manifest,
        )

    def to_manifest(self) -> Dict[str, Any]:
        if self.manifest:
            return self.manifest
        metadata: Dict[str, Any] = {"name": self.name}
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.labels:
            metadata["labels"] = dict(self.labels)
        return {"apiVersion": self.api_version, "kind": self.kind, "metadata": metadata}


@dataclass
class ResourceGraph:
    """
    The per-invocation universe of resources.

    Built once per request by the request reader. The engine treats it as
    read-only and works on copies of the composed maps.
    """
    composite_desired: Optional[TargetResource] = None
    composite_observed: Optional[TargetResource] = None
    composed_desired: Dict[str, TargetResource] = field(default_factory=dict)
    composed_observed: Dict[str, TargetResource] = field(default_factory=dict)
    required_groups: Dict[str, List[TargetResource]] = field(default_factory=dict)


@dataclass(frozen=True)
class SchemaDescriptor:
    """API group, version and kinds of one guard-record schema."""
    name: SchemaName
    api_group: str
    version: str
    cluster_kind: str
    namespaced_kind: str

    @property
    def api_version(self) -> str:
        return f"{self.api_group}/{self.version}"


@dataclass(frozen=True)
class ScopeResolution:
    scope: Scope
    namespace: Optional[str] = None


@dataclass(frozen=True)
class GuardRecord:
    """
    The synthesized protection entity (a Usage or ClusterUsage).

    The referenced resource's namespace is carried by the record's own
    namespace field, never inside the `of` reference.
    """
    schema: SchemaName
    scope: Scope
    api_version: str
    kind: str
    name: str
    of_api_version: str
    of_kind: str
    of_name: str
    reason: Reason
    namespace: Optional[str] = None


DesiredEntry = Union[TargetResource, GuardRecord]


@dataclass
class ProtectionResult:
    """Output of one orchestrator run."""
    composed: Dict[str, DesiredEntry] = field(default_factory=dict)
    required: Dict[str, GuardRecord] = field(default_factory=dict)
    protected_count: int = 0

    @property
    def guard_records(self) -> Dict[str, GuardRecord]:
        """Every guard record produced, keyed by its desired-resource key."""
        records = {k: v for k, v in self.composed.items() if isinstance(v, GuardRecord)}
        records.update(self.required)
        return records


@dataclass
class FunctionInput:
    """The function's per-invocation configuration."""
    cache_ttl: Optional[str] = None     # Go-style duration text, e.g. "5m"
    enable_v1_mode: bool = False        # Legacy (apiextensions) Usage schema
