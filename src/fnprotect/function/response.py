#!/usr/bin/env python3
"""
FNPROTECT RESPONSE BUILDER
--------------------------
Assembles the RunFunctionResponse document returned to the host:
echoed tag, cache TTL, desired state and results.

Author: FnProtect Team
Date: 2026-10-18
"""

import copy
from datetime import timedelta
from typing import Any, Dict

from fnprotect.core.models import DesiredEntry, GuardRecord
from fnprotect.function.duration import format_duration
from fnprotect.guard.exporter import GuardExporter

DEFAULT_TTL = timedelta(minutes=1)

SEVERITY_FATAL = "SEVERITY_FATAL"
TARGET_COMPOSITE = "TARGET_COMPOSITE"


class ResponseBuilder:

    def __init__(self, exporter: GuardExporter = None):
        self.exporter = exporter or GuardExporter()

    def to(self, request: Dict[str, Any], ttl: timedelta = DEFAULT_TTL) -> Dict[str, Any]:
        """
        Starts a response for `request`. The request's desired state is
        copied so the function only ever adds to what earlier pipeline
        steps produced.
        """
        meta = request.get("meta") or {}
        response: Dict[str, Any] = {
            "meta": {"tag": meta.get("tag", "") if isinstance(meta, dict) else "", "ttl": format_duration(ttl)},
            "results": [],
            "conditions": [],
        }
        desired = request.get("desired")
        if isinstance(desired, dict) and desired:
            response["desired"] = copy.deepcopy(desired)
        return response

    def set_ttl(self, response: Dict[str, Any], ttl: timedelta):
        response["meta"]["ttl"] = format_duration(ttl)

    def fatal(self, response: Dict[str, Any], err: BaseException):
        response["results"].append({
            "severity": SEVERITY_FATAL,
            "message": str(err),
            "target": TARGET_COMPOSITE,
        })

    def set_desired_composed(self, response: Dict[str, Any], composed: Dict[str, DesiredEntry]):
        """
        Replaces desired.resources with the given entries, keyed as given.
        Entries already present keep their wrapper (e.g. a `ready` field).
        """
        desired = response.setdefault("desired", {})
        existing = desired.get("resources") or {}

        resources = {}
        for key, entry in composed.items():
            if isinstance(entry, GuardRecord):
                resources[key] = {"resource": self.exporter.to_document(entry)}
            elif key in existing:
                resources[key] = existing[key]
            else:
                resources[key] = {"resource": copy.deepcopy(entry.to_manifest())}

        if resources:
            desired["resources"] = resources
        else:
            desired.pop("resources", None)

    @staticmethod
    def is_fatal(response: Dict[str, Any]) -> bool:
        return any(r.get("severity") == SEVERITY_FATAL for r in response.get("results", []))
