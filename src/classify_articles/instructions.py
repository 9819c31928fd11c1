BIAS_ANALYSIS_SYSTEM_PROMPT = (
    "You are an expert media bias analyst. "
    "Analyze news articles objectively and return only valid JSON."
)

BIAS_ANALYSIS_INSTRUCTIONS = """
Analyze this news article for political bias and content characteristics:

Title: "{title}"
Summary: "{summary}"
Source: {source_id}

Return a JSON object with exactly these fields:
{{
  "political_bias": "left|center|right",
  "confidence": 0.85,
  "emotional_tone": "neutral|positive|negative",
  "factual_ratio": 0.75,
  "explanation": "Brief explanation of the analysis (max 100 words)"
}}

Guidelines:
- political_bias: Determine if content leans left, right, or is center/neutral
- confidence: How confident you are in the bias assessment (0.0-1.0)
- emotional_tone: Overall emotional framing of the content
- factual_ratio: Ratio of factual reporting vs opinion/speculation (0.0-1.0)
- explanation: Concise reasoning for your assessment

Return only the JSON object, no other text.
"""


def build_analysis_prompt(title: str, summary: str, source_id: str) -> str:
    """Fill the analysis instructions for one article."""
    return BIAS_ANALYSIS_INSTRUCTIONS.format(
        title=title or "",
        summary=summary or "",
        source_id=source_id or "unknown",
    ).strip()
