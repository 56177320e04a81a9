"""Emotional valence analysis for concepts.

Assigns a tentative valence in [-1, 1] to a concept observed in a memory.
This is a lightweight, rule-based approach:

- Known emotion words carry a fixed valence.
- Any other concept takes its valence from positive/negative words found
  in a window around its first mention.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ValenceResult:
    """Result of valence analysis."""

    valence: float  # -1.0 (negative) to 1.0 (positive)
    indicators: list[str] = field(default_factory=list)


class ValenceAnalyzer:
    """Scores the emotional charge of a concept in its memory context."""

    # Emotion words with fixed valence (-1.0 to 1.0)
    EMOTION_VALENCE: dict[str, float] = {
        # Positive
        "happy": 0.8,
        "joyful": 0.9,
        "excited": 0.7,
        "hopeful": 0.6,
        "grateful": 0.8,
        "love": 0.9,
        "trust": 0.7,
        "calm": 0.5,
        "peaceful": 0.6,
        "enthusiasm": 0.8,
        "curiosity": 0.5,
        "anticipation": 0.4,
        # Negative
        "sad": -0.7,
        "angry": -0.8,
        "afraid": -0.6,
        "anxious": -0.5,
        "worried": -0.4,
        "frustrated": -0.6,
        "hate": -0.9,
        "fear": -0.7,
        "disgusted": -0.6,
        "melancholy": -0.5,
        # Neutral
        "surprised": 0.1,
    }

    POSITIVE_WORDS = [
        "good",
        "great",
        "happy",
        "love",
        "wonderful",
        "excellent",
        "positive",
        "enjoy",
    ]

    NEGATIVE_WORDS = [
        "bad",
        "sad",
        "hate",
        "terrible",
        "awful",
        "negative",
        "difficult",
        "problem",
    ]

    def __init__(self, window: int = 50, step: float = 0.2) -> None:
        """Initialize the analyzer.

        Args:
            window: Characters inspected on each side of the concept mention.
            step: Valence contributed by each sentiment word in the window.
        """
        self.window = window
        self.step = step

    def analyze(self, name: str, content: str) -> ValenceResult:
        """Compute the valence of ``name`` as it appears in ``content``."""
        name_lower = name.lower()

        if name_lower in self.EMOTION_VALENCE:
            return ValenceResult(
                valence=self.EMOTION_VALENCE[name_lower],
                indicators=[f"emotion:{name_lower}"],
            )

        text = (content or "").lower()
        index = text.find(name_lower) if name_lower else -1
        if index < 0:
            return ValenceResult(valence=0.0)

        start = max(0, index - self.window)
        end = min(len(text), index + self.window)
        context = text[start:end]

        valence = 0.0
        indicators: list[str] = []
        for word in self.POSITIVE_WORDS:
            if word in context:
                valence += self.step
                indicators.append(f"positive:{word}")
        for word in self.NEGATIVE_WORDS:
            if word in context:
                valence -= self.step
                indicators.append(f"negative:{word}")

        return ValenceResult(
            valence=round(max(-1.0, min(1.0, valence)), 3),
            indicators=indicators,
        )
