"""
Temporal Analysis - Target Resolution
=====================================

Works out who a message is aimed at. Detectors only talk to the
TargetResolver protocol, so the heuristic can be swapped without touching
detector logic.
"""

import re
from typing import Optional, Pattern, Protocol

from bullywatch.core.constants import (
    ADDRESS_PATTERN,
    MAX_TEXT_SCAN_LENGTH,
    MENTION_PATTERN,
)


# =============================================================================
# Compiled Regex Patterns
# =============================================================================

MENTION_REGEX: Pattern = re.compile(MENTION_PATTERN, re.ASCII)  # ASCII digits only
ADDRESS_REGEX: Pattern = re.compile(ADDRESS_PATTERN)


# =============================================================================
# Resolver Protocol
# =============================================================================

class TargetResolver(Protocol):
    """Resolves the target user of a message, if any."""

    def resolve(self, text: Optional[str], quoted_sender: Optional[str]) -> Optional[str]:
        ...

    def has_address(self, text: Optional[str]) -> bool:
        ...


# =============================================================================
# Default Resolver
# =============================================================================

class MentionTargetResolver:
    """
    Quoted-reply first, then the first "@digits" mention in the text.

    Text is clipped to max_scan_length characters before matching.
    """

    def __init__(self, max_scan_length: int = MAX_TEXT_SCAN_LENGTH) -> None:
        self.max_scan_length = max_scan_length

    def _clip(self, text: Optional[str]) -> str:
        if not isinstance(text, str):
            return ""
        return text[:self.max_scan_length]

    def extract_mention(self, text: Optional[str]) -> Optional[str]:
        """First user id mentioned as @digits, or None."""
        match = MENTION_REGEX.search(self._clip(text))
        return match.group(1) if match else None

    def has_address(self, text: Optional[str]) -> bool:
        """
        Check for a mention or a second-person address form.

        Address forms say "someone is being spoken to" but never name who,
        so they do not produce a target on their own.
        """
        clipped = self._clip(text)
        return bool(MENTION_REGEX.search(clipped) or ADDRESS_REGEX.search(clipped))

    def resolve(self, text: Optional[str], quoted_sender: Optional[str]) -> Optional[str]:
        if quoted_sender:
            return quoted_sender
        return self.extract_mention(text)


__all__ = [
    "TargetResolver",
    "MentionTargetResolver",
    "MENTION_REGEX",
    "ADDRESS_REGEX",
]
