#!/usr/bin/env python3
"""
FNPROTECT SCHEMA SELECTOR
-------------------------
Chooses between the two structurally identical guard-record schemas.

  current : protection.crossplane.io/v1beta1   ClusterUsage / Usage
  legacy  : apiextensions.crossplane.io/v1beta1 Usage (both scopes)

The legacy group only ever defined `Usage`; namespaced records reuse it.

Author: FnProtect Team
Date: 2026-10-18
"""

from fnprotect.core.models import SchemaDescriptor, SchemaName

CURRENT_SCHEMA = SchemaDescriptor(
    name=SchemaName.CURRENT,
    api_group="protection.crossplane.io",
    version="v1beta1",
    cluster_kind="ClusterUsage",
    namespaced_kind="Usage",
)

LEGACY_SCHEMA = SchemaDescriptor(
    name=SchemaName.LEGACY,
    api_group="apiextensions.crossplane.io",
    version="v1beta1",
    cluster_kind="Usage",
    namespaced_kind="Usage",
)


class SchemaSelector:

    def select_schema(self, legacy_mode_enabled: bool) -> SchemaDescriptor:
        return LEGACY_SCHEMA if legacy_mode_enabled else CURRENT_SCHEMA
