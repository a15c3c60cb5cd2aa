#!/usr/bin/env python3
"""
FNPROTECT ERRORS
----------------
Error taxonomy for a function invocation. Every error here is fatal at the
function boundary; the handler turns it into a single fatal result.

Author: FnProtect Team
Date: 2026-10-18
"""

from typing import Any, Dict, Optional


class FunctionError(Exception):
    """Base class for all invocation failures."""

    @classmethod
    def wrap(cls, err: BaseException, message: str, **kwargs: Any) -> "FunctionError":
        """Prefixes the cause's message, keeping the original as __cause__."""
        wrapped = cls(f"{message}: {err}", **kwargs)
        wrapped.__cause__ = err
        return wrapped


class ConfigurationError(FunctionError):
    """The function input (or its cacheTTL) could not be read."""


class GraphReadError(FunctionError):
    """Observed, desired or required state could not be read from the request."""


class SynthesisError(FunctionError):
    """
    A guard record could not be converted to its external document.

    `committed` holds the outputs of the phases that completed before the
    failure. They are never rolled back here; the caller decides.
    """

    def __init__(self, message: str, committed: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.committed = committed or {}
