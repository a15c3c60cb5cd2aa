#!/usr/bin/env python3
"""
FNPROTECT NAME GENERATOR
------------------------
Derives stable, human-readable names for guard records.

    <kind>-<name>-<hash6>-fn-protection

The 6-character hash is taken over the full identity (kind, name, namespace)
so that same-named resources in different namespaces never collide.

Author: FnProtect Team
Date: 2026-10-18
"""

import hashlib
from typing import Optional

# Suffix applied to every generated guard-record name
USAGE_NAME_SUFFIX = "fn-protection"
HASH_LENGTH = 6


class NameGenerator:
    """Pure, deterministic naming. No clock, no randomness."""

    def __init__(self, suffix: str = USAGE_NAME_SUFFIX, hash_length: int = HASH_LENGTH):
        self.suffix = suffix
        self.hash_length = hash_length

    def short_hash(self, kind: str, name: str, namespace: Optional[str] = None) -> str:
        # NUL separators keep ("a-b", "c") and ("a", "b-c") apart
        identity = "\x00".join([kind, name, namespace or ""])
        return hashlib.sha256(identity.encode("utf-8")).hexdigest()[: self.hash_length]

    def derive_name(self, kind: str, name: str, namespace: Optional[str] = None) -> str:
        base = f"{kind}-{name}".lower()
        return f"{base}-{self.short_hash(kind, name, namespace)}-{self.suffix}"
