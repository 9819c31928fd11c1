"""Bias classification of articles using an LLM.

The classifier never raises: API errors, timeouts, unparseable output and
out-of-domain values all resolve to `FALLBACK_ANALYSIS` (or to the fallback
value for the offending field).
"""

import json
import logging
import math
import os
import re
from typing import Any

from openai import OpenAI

from classify_articles.instructions import BIAS_ANALYSIS_SYSTEM_PROMPT, build_analysis_prompt
from classify_articles.models import (
    EMOTIONAL_TONES,
    FALLBACK_ANALYSIS,
    MAX_EXPLANATION_LENGTH,
    POLITICAL_BIASES,
    BiasAnalysis,
)

logger = logging.getLogger(__name__)

_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _clamp_unit(value: Any, default: float) -> float:
    """Clamp a numeric value into [0, 1]; non-numeric values yield `default`."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    try:
        number = float(value)
    except (OverflowError, ValueError):
        return default
    if math.isnan(number):
        return default
    return max(0.0, min(1.0, number))


def validate_analysis(data: Any) -> BiasAnalysis:
    """Repair a parsed model response into a total, bounded BiasAnalysis."""
    if not isinstance(data, dict):
        return FALLBACK_ANALYSIS

    bias = data.get("political_bias")
    if bias not in POLITICAL_BIASES:
        bias = FALLBACK_ANALYSIS.political_bias

    tone = data.get("emotional_tone")
    if tone not in EMOTIONAL_TONES:
        tone = FALLBACK_ANALYSIS.emotional_tone

    explanation = data.get("explanation")
    if isinstance(explanation, str) and explanation.strip():
        explanation = explanation.strip()[:MAX_EXPLANATION_LENGTH]
    else:
        explanation = FALLBACK_ANALYSIS.explanation

    return BiasAnalysis(
        political_bias=bias,
        confidence=_clamp_unit(data.get("confidence"), FALLBACK_ANALYSIS.confidence),
        emotional_tone=tone,
        factual_ratio=_clamp_unit(data.get("factual_ratio"), FALLBACK_ANALYSIS.factual_ratio),
        explanation=explanation,
    )


def parse_analysis(content: str | None) -> BiasAnalysis:
    """Parse raw model text into a BiasAnalysis, falling back on bad JSON."""
    if not content:
        logger.warning("Empty classifier response")
        return FALLBACK_ANALYSIS

    text = _CODE_FENCE_RE.sub("", content.strip())
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Failed to parse classifier response as JSON: %s", content[:200])
        return FALLBACK_ANALYSIS

    return validate_analysis(data)


class BiasClassifier:
    """Classify article political bias, tone and factual ratio with an LLM."""

    def __init__(
        self,
        client: Any = None,
        model: str = "gpt-4o-mini",
        enabled: bool = True,
        min_title_length: int = 10,
        request_timeout: float = 20.0,
        max_tokens: int = 500,
    ) -> None:
        self.model = model
        self.enabled = enabled
        self.min_title_length = min_title_length
        self.max_tokens = max_tokens
        if client is None and enabled:
            client = OpenAI(
                api_key=os.environ.get("OPENAI_API_KEY"),
                timeout=request_timeout,
                max_retries=0,
            )
        self._client = client

    def should_classify(self, title: str | None) -> bool:
        """Only spend a call on enabled classifiers and non-trivial titles."""
        return self.enabled and self._client is not None and len(title or "") > self.min_title_length

    def classify(self, title: str, summary: str, source_id: str = "") -> BiasAnalysis:
        """Return a validated analysis for one article. Never raises."""
        prompt = build_analysis_prompt(title, summary, source_id)

        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": BIAS_ANALYSIS_SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=0.1,
                max_tokens=self.max_tokens,
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.error("Classifier request failed for %r: %s", (title or "")[:50], e)
            return FALLBACK_ANALYSIS

        return parse_analysis(content)
