"""Seedable phrase variation for chat narratives."""

from __future__ import annotations

import random
from typing import Dict, List, Optional, Sequence

OPENINGS: Dict[str, List[str]] = {
    "analysis": [
        "Looking at your data,",
        "Based on the numbers,",
        "Here's what I found:",
        "Interesting pattern here —",
        "The data shows",
    ],
    "good": [
        "Good news —",
        "Strong performance:",
        "Here's a highlight —",
    ],
    "concern": [
        "Worth noting:",
        "Something to watch:",
        "Heads up —",
    ],
}

FOLLOW_UPS: Dict[str, List[str]] = {
    "itinerary": [
        "\n\nWant me to break this down by cabin type or campaign type?",
        "\n\nI can dig deeper into any of these destinations if you'd like.",
        "",
    ],
    "cabin": [
        "\n\nShould I show you how this varies by itinerary?",
        "\n\nWant to see the trend over time?",
        "",
    ],
    "campaign": [
        "\n\nI can show you which itineraries respond best to each campaign type.",
        "\n\nWant me to identify customers for a reactivation campaign?",
        "",
    ],
    "churn": [
        "\n\nI can filter this list by itinerary preference or loyalty tier if that helps.",
        "",
    ],
    "audience": [
        "\n\nWant me to narrow this down by loyalty tier or cabin preference?",
        "\n\nI can project ROI for a different campaign type if you'd like.",
        "",
    ],
}


class PhraseBank:
    """Uniform picks from fixed phrase pools; seed it to make wording repeatable."""

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random(seed)

    def pick(self, pool: Sequence[str]) -> str:
        return self._rng.choice(pool)

    def opening(self, tone: str = "analysis") -> str:
        return self.pick(OPENINGS[tone])

    def follow_up(self, topic: str) -> str:
        return self.pick(FOLLOW_UPS[topic])
