"""Data models for classify_articles pipeline stage."""

from dataclasses import dataclass

POLITICAL_BIASES = ("left", "center", "right")
EMOTIONAL_TONES = ("neutral", "positive", "negative")
MAX_EXPLANATION_LENGTH = 200


@dataclass(frozen=True)
class BiasAnalysis:
    """AI-derived bias and tone judgment of one article. Always total and bounded."""
    political_bias: str
    confidence: float
    emotional_tone: str
    factual_ratio: float
    explanation: str


FALLBACK_ANALYSIS = BiasAnalysis(
    political_bias="center",
    confidence=0.5,
    emotional_tone="neutral",
    factual_ratio=0.7,
    explanation="AI analysis unavailable - using default neutral assessment.",
)
