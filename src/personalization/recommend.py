"""Score candidate articles against a user's profile."""

from typing import Iterable

from ingest_articles.models import Article
from personalization.models import UserProfile

RECOMMENDATION_LIMIT = 20

INTEREST_TOPIC_WEIGHT = 3
FOLLOWED_TOPIC_WEIGHT = 2
FOLLOWED_SOURCE_WEIGHT = 2
BIAS_MATCH_WEIGHT = 1
ALREADY_READ_PENALTY = 2


def score_article(article: Article, profile: UserProfile) -> int:
    """Relevance score of one article for one user. Only positive scores are recommended."""
    score = 0
    text = f"{article.title} {article.summary}".lower()
    topic = article.topic.lower()

    if any(t.strip() and t.strip().lower() in text for t in profile.interests.topics):
        score += INTEREST_TOPIC_WEIGHT

    if any(topic in (t.name.lower(), t.id.lower()) for t in profile.followed_topics):
        score += FOLLOWED_TOPIC_WEIGHT

    if any(s.id == article.source_id for s in profile.followed_sources):
        score += FOLLOWED_SOURCE_WEIGHT

    preference = profile.interests.bias_preference
    if preference == "balanced":
        if article.declared_bias == "center":
            score += BIAS_MATCH_WEIGHT
    elif preference == article.declared_bias:
        score += BIAS_MATCH_WEIGHT

    if any(event.id == article.id for event in profile.reading_history):
        score -= ALREADY_READ_PENALTY

    return score


def recommend(
    profile: UserProfile,
    candidates: Iterable[Article],
    limit: int = RECOMMENDATION_LIMIT,
) -> list[Article]:
    """Best-scoring candidates first. Equal scores keep candidate order."""
    scored = [(score_article(article, profile), article) for article in candidates]
    scored = [item for item in scored if item[0] > 0]
    scored.sort(key=lambda item: item[0], reverse=True)
    return [article for _, article in scored[:limit]]
