"""Data models for per-user personalization state."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from common.datetime import parse_datetime
from common.serialization import serialize_dataclass
from ingest_articles.models import Article, Source

BIAS_PREFERENCES = ("balanced", "left", "center", "right")
HISTORY_LIMIT = 1000


@dataclass(frozen=True)
class SourceRef:
    id: str
    name: str
    followed_at: Optional[datetime] = None

    @classmethod
    def from_source(cls, source: Source) -> SourceRef:
        return cls(id=source.id, name=source.name)


@dataclass(frozen=True)
class TopicRef:
    id: str
    name: str
    followed_at: Optional[datetime] = None

    @classmethod
    def from_name(cls, name: str) -> TopicRef:
        return cls(id=name.strip().lower(), name=name.strip())


@dataclass(frozen=True)
class ArticleRef:
    """The parts of an article kept in a user's saved list."""
    id: str
    title: str = ""
    url: str = ""
    source_id: str = ""
    source_name: str = ""
    category: str = ""
    bias: str = ""
    saved_at: Optional[datetime] = None

    @classmethod
    def from_article(cls, article: Article) -> ArticleRef:
        return cls(
            id=article.id,
            title=article.title,
            url=article.url,
            source_id=article.source_id,
            source_name=article.source_name,
            category=article.topic,
            bias=article.declared_bias,
        )


@dataclass(frozen=True)
class ReadEvent:
    id: str
    read_at: datetime
    last_read_at: datetime
    read_count: int = 1
    title: str = ""
    source_id: str = ""
    source_name: str = ""
    category: str = ""
    bias: str = ""
    read_time_minutes: int = 0


@dataclass(frozen=True)
class Interests:
    topics: tuple[str, ...] = ()
    categories: tuple[str, ...] = ()
    bias_preference: str = "balanced"
    source_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    created_at: datetime
    last_updated: datetime
    followed_sources: tuple[SourceRef, ...] = ()
    followed_topics: tuple[TopicRef, ...] = ()
    saved_articles: tuple[ArticleRef, ...] = ()
    reading_history: tuple[ReadEvent, ...] = ()
    interests: Interests = field(default_factory=Interests)


def new_profile(user_id: str, now: datetime) -> UserProfile:
    return UserProfile(user_id=user_id, created_at=now, last_updated=now)


def profile_to_dict(profile: UserProfile) -> dict[str, Any]:
    return serialize_dataclass(profile)


def _optional_datetime(value: Any) -> Optional[datetime]:
    return parse_datetime(value) if value else None


def _strings(values: Any) -> tuple[str, ...]:
    return tuple(v for v in values or () if isinstance(v, str))


def profile_from_dict(data: dict[str, Any]) -> UserProfile:
    """Rebuild a profile from its stored JSON form.

    Raises:
        AttributeError, KeyError, TypeError, ValueError: If the document is malformed.
    """
    interests = data.get("interests") or {}
    bias_preference = interests.get("bias_preference", "balanced")
    if bias_preference not in BIAS_PREFERENCES:
        bias_preference = "balanced"

    return UserProfile(
        user_id=data["user_id"],
        created_at=parse_datetime(data.get("created_at")),
        last_updated=parse_datetime(data.get("last_updated")),
        followed_sources=tuple(
            SourceRef(id=s["id"], name=s.get("name", ""), followed_at=_optional_datetime(s.get("followed_at")))
            for s in data.get("followed_sources") or []
        ),
        followed_topics=tuple(
            TopicRef(id=t["id"], name=t.get("name", ""), followed_at=_optional_datetime(t.get("followed_at")))
            for t in data.get("followed_topics") or []
        ),
        saved_articles=tuple(
            ArticleRef(**{**a, "saved_at": _optional_datetime(a.get("saved_at"))})
            for a in data.get("saved_articles") or []
        ),
        reading_history=tuple(
            ReadEvent(
                **{
                    **e,
                    "read_at": parse_datetime(e["read_at"]),
                    "last_read_at": parse_datetime(e.get("last_read_at") or e["read_at"]),
                }
            )
            for e in (data.get("reading_history") or [])[:HISTORY_LIMIT]
        ),
        interests=Interests(
            topics=_strings(interests.get("topics")),
            categories=_strings(interests.get("categories")),
            bias_preference=bias_preference,
            source_types=_strings(interests.get("source_types")),
        ),
    )
