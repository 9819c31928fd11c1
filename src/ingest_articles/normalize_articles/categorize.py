"""Keyword-based topic and section assignment."""

import re
from datetime import datetime, timedelta

TOPIC_KEYWORDS = [
    ("Politics", r"politics|political|election|vote|congress|senate|president|government|policy|"
                 r"democrat|republican|biden|trump|campaign|legislation"),
    ("Technology", r"technology|tech|ai|artificial intelligence|software|hardware|startup|silicon valley|"
                   r"apple|google|microsoft|meta|tesla|crypto|blockchain"),
    ("Business", r"business|economy|economic|finance|financial|stock|market|trade|company|corporate|"
                 r"earnings|revenue|investment|banking"),
    ("Health", r"health|medical|medicine|hospital|doctor|disease|covid|pandemic|vaccine|healthcare|"
               r"pharmaceutical|fda"),
    ("Science", r"science|research|study|climate|environment|space|nasa|discovery|breakthrough|"
                r"experiment|scientific"),
    ("Sports", r"sports|football|basketball|baseball|soccer|olympics|nfl|nba|mlb|fifa|championship|"
               r"tournament|athlete"),
    ("Entertainment", r"entertainment|celebrity|movie|film|tv|television|music|hollywood|netflix|disney|"
                      r"streaming|concert"),
    ("International", r"international|world|global|china|russia|europe|ukraine|israel|gaza|palestine|"
                      r"nato|un|united nations"),
]

_TOPIC_PATTERNS = [(topic, re.compile(rf"\b({words})\b")) for topic, words in TOPIC_KEYWORDS]
_BREAKING_RE = re.compile(r"\b(breaking|urgent|alert|just in|developing|live|emergency|crisis)\b")
_LOCAL_RE = re.compile(r"\b(local|city|county|mayor|school district|community|neighborhood|town|municipal)\b")

BREAKING_WINDOW = timedelta(hours=2)
DEFAULT_TOPIC = "General"


def categorize_article(title: str, summary: str) -> str:
    """Assign the first matching topic, or General."""
    text = f"{title} {summary}".lower()
    for topic, pattern in _TOPIC_PATTERNS:
        if pattern.search(text):
            return topic
    return DEFAULT_TOPIC


def determine_section(title: str, summary: str, published_at: datetime, now: datetime) -> str:
    """Place an article in the breaking, local or featured section."""
    text = f"{title} {summary}".lower()
    if now - published_at < BREAKING_WINDOW and _BREAKING_RE.search(text):
        return "breaking"
    if _LOCAL_RE.search(text):
        return "local"
    return "featured"
