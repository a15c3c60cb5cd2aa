#!/usr/bin/env python3
"""
FNPROTECT REQUEST READER - The Intake Desk
------------------------------------------
Reads a composition-function request document (the JSON/YAML form of a
RunFunctionRequest) into a typed FunctionInput and ResourceGraph.

    meta:     {tag}
    input:    {cacheTTL, enableV1Mode}
    observed: {composite: {resource}, resources: {key: {resource}}}
    desired:  {composite: {resource}, resources: {key: {resource}}}
    requiredResources: {group: {items: [{resource}]}}

Author: FnProtect Team
Date: 2026-10-18
"""

import logging
from typing import Any, Dict, List, Optional

from fnprotect.core.errors import ConfigurationError, GraphReadError
from fnprotect.core.models import FunctionInput, ResourceGraph, TargetResource

logger = logging.getLogger("fnprotect.function")

# Older hosts deliver required resources as "extraResources"
REQUIRED_SECTIONS = ("requiredResources", "extraResources")


class RequestReader:
    """
    Translates raw request mappings into engine types. Every accessor is a
    pure read of the request; nothing is cached between calls.
    """

    def get_tag(self, request: Dict[str, Any]) -> str:
        meta = request.get("meta") or {}
        return str(meta.get("tag", "")) if isinstance(meta, dict) else ""

    def get_input(self, request: Dict[str, Any]) -> FunctionInput:
        raw = request.get("input")
        if raw is None:
            return FunctionInput()
        if not isinstance(raw, dict):
            raise ConfigurationError("cannot get Function input from request: input must be an object")

        cache_ttl = raw.get("cacheTTL")
        if cache_ttl is not None and not isinstance(cache_ttl, str):
            raise ConfigurationError("cannot get Function input from request: cacheTTL must be a string")

        v1_mode = raw.get("enableV1Mode", False)
        if not isinstance(v1_mode, bool):
            raise ConfigurationError("cannot get Function input from request: enableV1Mode must be a boolean")

        return FunctionInput(
            cache_ttl=cache_ttl or None,
            enable_v1_mode=v1_mode,
        )

    def get_desired_composite(self, request: Dict[str, Any]) -> Optional[TargetResource]:
        return self._composite(request, "desired")

    def get_observed_composite(self, request: Dict[str, Any]) -> Optional[TargetResource]:
        return self._composite(request, "observed")

    def get_desired_composed(self, request: Dict[str, Any]) -> Dict[str, TargetResource]:
        return self._composed(request, "desired")

    def get_observed_composed(self, request: Dict[str, Any]) -> Dict[str, TargetResource]:
        return self._composed(request, "observed")

    def get_required_resources(self, request: Dict[str, Any]) -> Dict[str, List[TargetResource]]:
        section: Dict[str, Any] = {}
        for name in REQUIRED_SECTIONS:
            raw = request.get(name)
            if raw is None:
                continue
            if not isinstance(raw, dict):
                raise GraphReadError(f"{name} must be an object")
            section.update(raw)

        groups: Dict[str, List[TargetResource]] = {}
        for group, resources in section.items():
            resources = resources or {}
            items = resources.get("items") or [] if isinstance(resources, dict) else None
            if not isinstance(items, list):
                raise GraphReadError(f"required resources {group!r} must carry a list of items")
            groups[str(group)] = [self._resource(item, f"required resource in {group!r}") for item in items]
        return groups

    def read_graph(self, request: Dict[str, Any]) -> ResourceGraph:
        """
        Reads the full resource graph, wrapping each failure with the
        section that could not be read.
        """
        readers = [
            ("composite_desired", self.get_desired_composite, "cannot get desired composite"),
            ("composite_observed", self.get_observed_composite, "cannot get observed composite"),
            ("composed_observed", self.get_observed_composed, "cannot get observed resources"),
            ("composed_desired", self.get_desired_composed, "cannot get desired composed resources"),
            ("required_groups", self.get_required_resources, "cannot get required resources"),
        ]
        values = {}
        for attr, reader, message in readers:
            try:
                values[attr] = reader(request)
            except GraphReadError as e:
                raise GraphReadError.wrap(e, message) from e
        logger.debug("read resource graph composed=%d observed=%d required groups=%d",
                     len(values["composed_desired"]), len(values["composed_observed"]),
                     len(values["required_groups"]))
        return ResourceGraph(**values)

    def _state(self, request: Dict[str, Any], which: str) -> Dict[str, Any]:
        state = request.get(which)
        if state is None:
            return {}
        if not isinstance(state, dict):
            raise GraphReadError(f"{which} state must be an object")
        return state

    def _composite(self, request: Dict[str, Any], which: str) -> Optional[TargetResource]:
        composite = self._state(request, which).get("composite")
        if not composite:
            return None
        if not isinstance(composite, dict):
            raise GraphReadError(f"{which} composite must be an object")
        manifest = composite.get("resource")
        if not manifest:
            return None
        return self._resource(composite, f"{which} composite")

    def _composed(self, request: Dict[str, Any], which: str) -> Dict[str, TargetResource]:
        resources = self._state(request, which).get("resources")
        if resources is None:
            return {}
        if not isinstance(resources, dict):
            raise GraphReadError(f"{which} resources must be an object")
        return {str(key): self._resource(value, f"{which} resource {key!r}") for key, value in resources.items()}

    def _resource(self, wrapper: Any, where: str) -> TargetResource:
        if not isinstance(wrapper, dict):
            raise GraphReadError(f"{where} must be an object")
        manifest = wrapper.get("resource") or {}
        if not isinstance(manifest, dict):
            raise GraphReadError(f"{where} must hold a resource object")
        metadata = manifest.get("metadata") or {}
        if not isinstance(metadata, dict) or not isinstance(metadata.get("labels") or {}, dict):
            raise GraphReadError(f"{where} has malformed metadata")
        fields = {
            "apiVersion": manifest.get("apiVersion"),
            "kind": manifest.get("kind"),
            "metadata.name": metadata.get("name"),
            "metadata.namespace": metadata.get("namespace"),
        }
        for path, value in fields.items():
            if value is not None and not isinstance(value, str):
                raise GraphReadError(f"{where} has a non-string {path}")
        return TargetResource.from_manifest(manifest)
