"""Keyword-based intent classification."""

from __future__ import annotations

from scheduling_agent.models import Intent

# Substrings checked in order; the first hit wins.
_INTENT_KEYWORDS: tuple[tuple[str, Intent], ...] = (
    ("reschedul", Intent.RESCHEDULE),
    ("cancel", Intent.CANCEL),
)


def classify_intent(text: str) -> Intent:
    """Map a free-text turn to one of the three top-level intents.

    Matching is case-insensitive and substring-based. Anything that mentions
    neither rescheduling nor cancelling is treated as a booking request, so
    this never fails.
    """
    lowered = text.lower()
    for keyword, intent in _INTENT_KEYWORDS:
        if keyword in lowered:
            return intent
    return Intent.BOOK
