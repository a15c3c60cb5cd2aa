#!/usr/bin/env python3
"""
FNPROTECT LABEL MATCHER - The Gatekeeper
----------------------------------------
Decides whether a single resource opted into deletion protection.
Only an exact, case-insensitive "true" on the protection label counts.

Author: FnProtect Team
Date: 2026-10-18
"""

from typing import Optional

from fnprotect.core.models import PROTECTION_LABEL, TargetResource


class LabelMatcher:
    """
    Pure predicate over resource labels. Holds no state between calls.
    """

    def __init__(self, label_key: str = PROTECTION_LABEL):
        self.label_key = label_key

    def is_protected(self, resource: Optional[TargetResource]) -> bool:
        """
        Returns True iff the resource carries the protection label set to
        "true" (any casing). Values are not trimmed: "TRUE " is not protected.
        """
        if resource is None or not resource.labels:
            return False

        value = resource.labels.get(self.label_key)
        if value is None:
            return False
        return value.casefold() == "true"
