#!/usr/bin/env python3
"""
FNPROTECT SCOPE RESOLVER
------------------------
Maps a target's namespace presence to a guard-record scope.

Author: FnProtect Team
Date: 2026-10-18
"""

from fnprotect.core.models import Scope, ScopeResolution, SchemaDescriptor, TargetResource


class ScopeResolver:

    def resolve_scope(self, target: TargetResource) -> ScopeResolution:
        """Empty or missing namespace means cluster-scoped."""
        if target.namespace:
            return ScopeResolution(scope=Scope.NAMESPACED, namespace=target.namespace)
        return ScopeResolution(scope=Scope.CLUSTER)

    def kind_for(self, resolution: ScopeResolution, schema: SchemaDescriptor) -> str:
        if resolution.scope is Scope.NAMESPACED:
            return schema.namespaced_kind
        return schema.cluster_kind
