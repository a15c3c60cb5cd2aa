#!/usr/bin/env python3
"""
FNPROTECT FUNCTION HANDLER - The Front Door
-------------------------------------------
Runs one deletion-protection invocation end to end:

  input -> cacheTTL -> resource graph -> orchestrator -> desired state

Every failure becomes a single fatal result on an otherwise well-formed
response; nothing is raised to the host. A fatal response never carries
guard records.

Author: FnProtect Team
Date: 2026-10-18
"""

import logging
from typing import Any, Dict, Optional, Tuple

from fnprotect.core.engine import ProtectionOrchestrator
from fnprotect.core.errors import ConfigurationError, FunctionError
from fnprotect.core.models import ProtectionResult
from fnprotect.function.duration import parse_duration
from fnprotect.function.request import RequestReader
from fnprotect.function.response import DEFAULT_TTL, ResponseBuilder

logger = logging.getLogger("fnprotect.function")


class DeletionProtectionFunction:
    """
    Stateless function runner. Overrides, when given, replace the matching
    fields of the request's input (used by the CLI flags).
    """

    def __init__(self, orchestrator: ProtectionOrchestrator = None, reader: RequestReader = None,
                 responses: ResponseBuilder = None, legacy_override: Optional[bool] = None,
                 cache_ttl_override: Optional[str] = None):
        self.orchestrator = orchestrator or ProtectionOrchestrator()
        self.reader = reader or RequestReader()
        self.responses = responses or ResponseBuilder()
        self.legacy_override = legacy_override
        self.cache_ttl_override = cache_ttl_override

    def run_function(self, request: Dict[str, Any]) -> Dict[str, Any]:
        response, _ = self.evaluate(request)
        return response

    def evaluate(self, request: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[ProtectionResult]]:
        """
        Returns the response and, when the run succeeded, the
        ProtectionResult behind it.
        """
        logger.info("Running function tag=%s", self.reader.get_tag(request))
        response = self.responses.to(request, DEFAULT_TTL)

        try:
            result = self._protect(request, response)
        except FunctionError as e:
            logger.error("fatal: %s", e)
            self.responses.fatal(response, e)
            return response, None

        composed = dict(result.composed)
        composed.update(result.required)
        self.responses.set_desired_composed(response, composed)
        logger.debug("usages created total=%d", result.protected_count)
        return response, result

    def _protect(self, request: Dict[str, Any], response: Dict[str, Any]) -> ProtectionResult:
        fn_input = self.reader.get_input(request)
        legacy = fn_input.enable_v1_mode if self.legacy_override is None else self.legacy_override
        cache_ttl = self.cache_ttl_override or fn_input.cache_ttl

        if cache_ttl:
            try:
                self.responses.set_ttl(response, parse_duration(cache_ttl))
            except ValueError as e:
                raise ConfigurationError.wrap(e, "cannot set cacheTTL") from e

        graph = self.reader.read_graph(request)
        return self.orchestrator.run(graph, legacy)
