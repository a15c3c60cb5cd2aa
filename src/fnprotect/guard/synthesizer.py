#!/usr/bin/env python3
"""
FNPROTECT GUARD SYNTHESIZER - The Record Keeper
-----------------------------------------------
Composes naming, scope resolution and schema selection into one
GuardRecord for a target resource, then proves the record survives
conversion to its wire document before handing it back.

Author: FnProtect Team
Date: 2026-10-18
"""

import logging

from fnprotect.core.errors import SynthesisError
from fnprotect.core.models import GuardRecord, Reason, TargetResource
from fnprotect.guard.exporter import GuardExporter
from fnprotect.guard.naming import NameGenerator
from fnprotect.guard.schema import SchemaSelector
from fnprotect.guard.scope import ScopeResolver
from fnprotect.validator.validator import GuardValidator

logger = logging.getLogger("fnprotect.synthesizer")


class GuardRecordSynthesizer:
    """
    Pure construction: the same target, reason and mode always yield an
    identical record.
    """

    def __init__(self, names: NameGenerator = None, scopes: ScopeResolver = None,
                 schemas: SchemaSelector = None, exporter: GuardExporter = None,
                 validator: GuardValidator = None):
        self.names = names or NameGenerator()
        self.scopes = scopes or ScopeResolver()
        self.schemas = schemas or SchemaSelector()
        self.exporter = exporter or GuardExporter()
        self.validator = validator or GuardValidator()

    def synthesize(self, target: TargetResource, reason: Reason, legacy_mode_enabled: bool = False) -> GuardRecord:
        """
        Builds the guard record protecting `target`.

        Raises:
            SynthesisError: the record cannot be converted to a valid
                Usage/ClusterUsage document.
        """
        schema = self.schemas.select_schema(legacy_mode_enabled)
        resolution = self.scopes.resolve_scope(target)

        record = GuardRecord(
            schema=schema.name,
            scope=resolution.scope,
            api_version=schema.api_version,
            kind=self.scopes.kind_for(resolution, schema),
            name=self.names.derive_name(target.kind, target.name, resolution.namespace),
            namespace=resolution.namespace,
            of_api_version=target.api_version,
            of_kind=target.kind,
            of_name=target.name,
            reason=reason,
        )

        valid, err = self.validator.validate(self.exporter.to_document(record))
        if not valid:
            raise SynthesisError(
                f"cannot convert usage to unstructured: {err} "
                f"(target {target.kind} {target.namespace or ''}/{target.name})"
            )
        return record
