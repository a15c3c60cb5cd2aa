#!/usr/bin/env python3
"""
FNPROTECT ENGINE - The High Orchestrator
----------------------------------------
The ProtectionOrchestrator walks one ResourceGraph through the four
protection phases:

  1. Composed pass     (label on desired or observed copy)
  2. Composite cascade (own label, or any protected child)
  3. Required pass     (watched group unconditionally, others by label)
  4. Aggregate

Phase outputs are staged and committed only once the phase completes, so
a synthesis failure never leaves a half-finished phase behind.

Author: FnProtect Team
Date: 2026-10-18
"""

import logging
from collections import Counter
from typing import Any, Dict

from fnprotect.core.errors import SynthesisError
from fnprotect.core.models import (
    WATCHED_RESOURCE_GROUP,
    DesiredEntry,
    GuardRecord,
    ProtectionResult,
    Reason,
    ResourceGraph,
    TargetResource,
)
from fnprotect.guard.synthesizer import GuardRecordSynthesizer
from fnprotect.rules.labels import LabelMatcher

logger = logging.getLogger("fnprotect.engine")

COMPOSED_KEY_SUFFIX = "-usage"
REQUIRED_KEY_SUFFIX = "required-resource-fn-protection"


class ProtectionOrchestrator:
    """
    Principal orchestrator for deletion protection.
    Stateless: every call to run() works on its own copy of the graph.
    """

    def __init__(self, matcher: LabelMatcher = None, synthesizer: GuardRecordSynthesizer = None):
        self.matcher = matcher or LabelMatcher()
        self.synthesizer = synthesizer or GuardRecordSynthesizer()

    def run(self, graph: ResourceGraph, legacy_mode_enabled: bool = False) -> ProtectionResult:
        """
        Decides protection for the whole graph and returns the augmented
        desired composed set, the required-resource guards and the count.

        Raises:
            SynthesisError: a guard record could not be built. Carries the
                phases committed before the failure.
        """
        result = ProtectionResult(composed=dict(graph.composed_desired))

        # Phase 1: Composed pass
        composed_guards = self._guard_composed(graph, legacy_mode_enabled, result)
        self._commit(result.composed, composed_guards)
        result.protected_count += len(composed_guards)

        # Phase 2: Composite cascade (depends on the complete phase 1 count)
        composite_guard = self._guard_composite(graph, legacy_mode_enabled, result)
        self._commit(result.composed, composite_guard)
        result.protected_count += len(composite_guard)

        # Phase 3: Required resources
        if graph.required_groups:
            logger.debug("processing required resources")
            result.required = self._guard_required(graph, result)
            result.protected_count += len(result.required)

        logger.debug("usages created total=%d", result.protected_count)
        return result

    def _guard_composed(self, graph: ResourceGraph, legacy: bool,
                        result: ProtectionResult) -> Dict[str, GuardRecord]:
        staged: Dict[str, GuardRecord] = {}
        # Sorted for stable logs; decisions are independent per key
        for key in sorted(graph.composed_desired):
            observed = graph.composed_observed.get(key)
            # Resources not yet created on the cluster cannot be guarded
            if observed is None:
                continue

            desired = graph.composed_desired[key]
            # The label can be set in the pipeline or applied outside of it
            if not (self.matcher.is_protected(desired) or self.matcher.is_protected(observed)):
                continue

            logger.debug("protecting composed resource kind=%s name=%s namespace=%s",
                         observed.kind, observed.name, observed.namespace or "")
            staged[key + COMPOSED_KEY_SUFFIX] = self._synthesize(
                observed, Reason.LABEL_TRIGGERED, legacy, result, phase="composed")
        return staged

    def _guard_composite(self, graph: ResourceGraph, legacy: bool,
                         result: ProtectionResult) -> Dict[str, GuardRecord]:
        children_protected = result.protected_count > 0
        labeled = (self.matcher.is_protected(graph.composite_observed)
                   or self.matcher.is_protected(graph.composite_desired))
        if not (labeled or children_protected):
            return {}

        target = graph.composite_observed or graph.composite_desired
        if target is None:
            return {}

        # A protected child takes precedence over the composite's own label
        reason = Reason.CHILD_RESOURCE_TRIGGERED if children_protected else Reason.LABEL_TRIGGERED

        logger.debug("protecting composite kind=%s name=%s namespace=%s reason=%s",
                     target.kind, target.name, target.namespace or "", reason.name)
        key = f"xr-{target.name}{COMPOSED_KEY_SUFFIX}".lower()
        return {key: self._synthesize(target, reason, legacy, result, phase="composite")}

    def _guard_required(self, graph: ResourceGraph, result: ProtectionResult) -> Dict[str, GuardRecord]:
        staged: Dict[str, GuardRecord] = {}
        # The watched group goes last so its reason wins for resources listed twice
        groups = sorted(graph.required_groups, key=lambda g: (g == WATCHED_RESOURCE_GROUP, g))
        for group in groups:
            watched = group == WATCHED_RESOURCE_GROUP
            for resource in graph.required_groups[group]:
                if not (watched or self.matcher.is_protected(resource)):
                    continue
                reason = Reason.WATCH_TRIGGERED if watched else Reason.OPERATION_TRIGGERED
                # Operations are only served by the current Usage API
                staged[self.required_key(resource)] = self._synthesize(
                    resource, reason, False, result, phase="required")
        return staged

    @staticmethod
    def required_key(resource: TargetResource) -> str:
        return f"{resource.kind}-{resource.name}-{resource.namespace or ''}-{REQUIRED_KEY_SUFFIX}"

    def _synthesize(self, target: TargetResource, reason: Reason, legacy: bool,
                    result: ProtectionResult, phase: str) -> GuardRecord:
        try:
            record = self.synthesizer.synthesize(target, reason, legacy)
        except SynthesisError as e:
            logger.error("aborting %s phase: %s", phase, e)
            raise SynthesisError(str(e), committed={
                "composed": dict(result.composed),
                "required": dict(result.required),
                "protected_count": result.protected_count,
            }) from e
        logger.debug("created usage kind=%s name=%s namespace=%s",
                     record.kind, record.name, record.namespace or "")
        return record

    def _commit(self, composed: Dict[str, DesiredEntry], staged: Dict[str, GuardRecord]):
        """
        Inserts staged guards into the desired set. A key that already names
        a desired resource is replaced and the collision is logged.
        """
        for key, record in staged.items():
            if key in composed:
                logger.warning("guard key %s replaces an existing desired resource", key)
            composed[key] = record

    def generate_summary(self, result: ProtectionResult) -> Dict[str, Any]:
        """Observability summary of a run; never used for decisions."""
        records = list(result.guard_records.values())
        by_reason = Counter(r.reason.name for r in records)
        by_scope = Counter(r.scope.value for r in records)
        return {
            "protected_count": result.protected_count,
            "composed_guards": sum(1 for v in result.composed.values() if isinstance(v, GuardRecord)),
            "required_guards": len(result.required),
            "by_reason": dict(by_reason),
            "by_scope": dict(by_scope),
        }
