"""Per-user follows, saves, reading history and interests."""

from __future__ import annotations

import dataclasses
import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional, Union

from common.datetime import utc_now
from ingest_articles.models import Article, Source
from personalization.analytics import ReadingAnalytics, compute_analytics
from personalization.models import (
    BIAS_PREFERENCES,
    HISTORY_LIMIT,
    ArticleRef,
    ReadEvent,
    SourceRef,
    TopicRef,
    UserProfile,
    new_profile,
    profile_from_dict,
    profile_to_dict,
)
from personalization.recommend import RECOMMENDATION_LIMIT
from personalization.recommend import recommend as recommend_articles
from personalization.repository import ProfileRepository

logger = logging.getLogger(__name__)

LOCK_STRIPES = 64

TIME_RANGES = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


class PersistenceError(Exception):
    """A profile could not be read or written. The mutation did not happen."""


def _toggle(items: tuple, item: Any) -> tuple:
    if any(existing.id == item.id for existing in items):
        return tuple(existing for existing in items if existing.id != item.id)
    return items + (item,)


class PersonalizationStore:
    """Profile operations with per-user serialized read-modify-write.

    Mutations for one user hold that user's lock for the whole
    load/modify/save cycle. Users map onto a fixed pool of locks, so
    memory stays bounded however many users are seen; different users
    only contend when they share a stripe.
    """

    def __init__(
        self,
        repository: ProfileRepository,
        clock: Callable[[], datetime] = utc_now,
        max_write_attempts: int = 3,
        retry_delay: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
        history_limit: int = HISTORY_LIMIT,
        lock_stripes: int = LOCK_STRIPES,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.max_write_attempts = max(1, max_write_attempts)
        self.retry_delay = retry_delay
        self.sleep = sleep
        self.history_limit = history_limit
        self._locks = tuple(threading.Lock() for _ in range(max(1, lock_stripes)))

    def _lock_for(self, user_id: str) -> threading.Lock:
        return self._locks[hash(user_id) % len(self._locks)]

    def _read(self, user_id: str) -> Optional[UserProfile]:
        try:
            return self.repository.get(user_id)
        except Exception as e:
            raise PersistenceError(f"Failed to load profile {user_id!r}: {e}") from e

    def _retry(self, action: Callable[[], None], description: str) -> None:
        last_error: Optional[Exception] = None
        for attempt in range(1, self.max_write_attempts + 1):
            try:
                action()
                return
            except Exception as e:
                last_error = e
                logger.warning(
                    "%s failed (attempt %d/%d): %s",
                    description, attempt, self.max_write_attempts, e,
                )
                if attempt < self.max_write_attempts:
                    self.sleep(self.retry_delay)
        raise PersistenceError(f"{description} failed: {last_error}") from last_error

    def _write(self, user_id: str, profile: UserProfile) -> None:
        self._retry(lambda: self.repository.put(user_id, profile), f"Saving profile {user_id!r}")

    def _delete(self, user_id: str) -> None:
        self._retry(lambda: self.repository.delete(user_id), f"Deleting profile {user_id!r}")

    def _mutate(self, user_id: str, change: Callable[[UserProfile, datetime], UserProfile]) -> UserProfile:
        with self._lock_for(user_id):
            now = self.clock()
            profile = self._read(user_id) or new_profile(user_id, now)
            updated = dataclasses.replace(change(profile, now), last_updated=now)
            self._write(user_id, updated)
            return updated

    def get_profile(self, user_id: str) -> UserProfile:
        """Return the user's profile, creating and storing an empty one on first access."""
        profile = self._read(user_id)
        if profile is not None:
            return profile
        with self._lock_for(user_id):
            profile = self._read(user_id)
            if profile is None:
                profile = new_profile(user_id, self.clock())
                self._write(user_id, profile)
            return profile

    # Follows

    def toggle_follow_source(self, user_id: str, source: Union[Source, SourceRef]) -> UserProfile:
        ref = SourceRef.from_source(source) if isinstance(source, Source) else source

        def change(profile: UserProfile, now: datetime) -> UserProfile:
            item = dataclasses.replace(ref, followed_at=now)
            return dataclasses.replace(profile, followed_sources=_toggle(profile.followed_sources, item))

        return self._mutate(user_id, change)

    def toggle_follow_topic(self, user_id: str, topic: Union[str, TopicRef]) -> UserProfile:
        ref = TopicRef.from_name(topic) if isinstance(topic, str) else topic

        def change(profile: UserProfile, now: datetime) -> UserProfile:
            item = dataclasses.replace(ref, followed_at=now)
            return dataclasses.replace(profile, followed_topics=_toggle(profile.followed_topics, item))

        return self._mutate(user_id, change)

    def is_following_source(self, user_id: str, source_id: str) -> bool:
        return any(s.id == source_id for s in self.get_profile(user_id).followed_sources)

    def is_following_topic(self, user_id: str, topic_id: str) -> bool:
        topic_id = topic_id.strip().lower()
        return any(t.id == topic_id for t in self.get_profile(user_id).followed_topics)

    # Saved articles

    def toggle_save(self, user_id: str, article: Union[Article, ArticleRef]) -> UserProfile:
        ref = ArticleRef.from_article(article) if isinstance(article, Article) else article

        def change(profile: UserProfile, now: datetime) -> UserProfile:
            item = dataclasses.replace(ref, saved_at=now)
            return dataclasses.replace(profile, saved_articles=_toggle(profile.saved_articles, item))

        return self._mutate(user_id, change)

    def is_saved(self, user_id: str, article_id: str) -> bool:
        return any(a.id == article_id for a in self.get_profile(user_id).saved_articles)

    def get_saved_articles(
        self,
        user_id: str,
        category: Optional[str] = None,
        source: Optional[str] = None,
        days: Optional[int] = None,
    ) -> list[ArticleRef]:
        """Saved articles, most recently saved first."""
        saved = list(self.get_profile(user_id).saved_articles)
        if category:
            saved = [a for a in saved if a.category == category]
        if source:
            saved = [a for a in saved if a.source_id == source]
        if days:
            cutoff = self.clock() - timedelta(days=days)
            saved = [a for a in saved if a.saved_at is not None and a.saved_at > cutoff]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        saved.sort(key=lambda a: a.saved_at or epoch, reverse=True)
        return saved

    # Reading history

    def record_read(self, user_id: str, article: Article, read_time_minutes: int = 0) -> UserProfile:
        """Record a read. Repeat reads bump the counter instead of adding an entry."""

        def change(profile: UserProfile, now: datetime) -> UserProfile:
            history = list(profile.reading_history)
            for index, event in enumerate(history):
                if event.id == article.id:
                    history[index] = dataclasses.replace(
                        event,
                        read_count=event.read_count + 1,
                        last_read_at=now,
                        read_time_minutes=read_time_minutes or event.read_time_minutes,
                    )
                    break
            else:
                event = ReadEvent(
                    id=article.id,
                    read_at=now,
                    last_read_at=now,
                    title=article.title,
                    source_id=article.source_id,
                    source_name=article.source_name,
                    category=article.topic,
                    bias=article.declared_bias,
                    read_time_minutes=read_time_minutes,
                )
                history.insert(0, event)
                del history[self.history_limit:]
            return dataclasses.replace(profile, reading_history=tuple(history))

        return self._mutate(user_id, change)

    def get_reading_history(
        self,
        user_id: str,
        category: Optional[str] = None,
        time_range: Optional[str] = None,
    ) -> list[ReadEvent]:
        """Reading history, most recently read first.

        Args:
            time_range: "today", "week" or "month"
        """
        history = list(self.get_profile(user_id).reading_history)
        if category:
            history = [e for e in history if e.category == category]
        if time_range:
            now = self.clock()
            if time_range == "today":
                cutoff = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
            elif time_range in TIME_RANGES:
                cutoff = now - TIME_RANGES[time_range]
            else:
                raise ValueError(f"Unknown time range: {time_range}")
            history = [e for e in history if e.last_read_at >= cutoff]
        history.sort(key=lambda e: e.last_read_at, reverse=True)
        return history

    # Interests

    def update_interests(
        self,
        user_id: str,
        topics: Optional[Iterable[str]] = None,
        categories: Optional[Iterable[str]] = None,
        bias_preference: Optional[str] = None,
        source_types: Optional[Iterable[str]] = None,
    ) -> UserProfile:
        if bias_preference is not None and bias_preference not in BIAS_PREFERENCES:
            raise ValueError(f"Invalid bias preference: {bias_preference}")

        updates: dict[str, Any] = {}
        if topics is not None:
            updates["topics"] = tuple(dict.fromkeys(topics))
        if categories is not None:
            updates["categories"] = tuple(dict.fromkeys(categories))
        if bias_preference is not None:
            updates["bias_preference"] = bias_preference
        if source_types is not None:
            updates["source_types"] = tuple(dict.fromkeys(source_types))

        def change(profile: UserProfile, now: datetime) -> UserProfile:
            return dataclasses.replace(profile, interests=dataclasses.replace(profile.interests, **updates))

        return self._mutate(user_id, change)

    def add_interest_topic(self, user_id: str, topic: str) -> UserProfile:
        def change(profile: UserProfile, now: datetime) -> UserProfile:
            topics = profile.interests.topics
            if topic in topics:
                return profile
            return dataclasses.replace(
                profile, interests=dataclasses.replace(profile.interests, topics=topics + (topic,))
            )

        return self._mutate(user_id, change)

    def remove_interest_topic(self, user_id: str, topic: str) -> UserProfile:
        def change(profile: UserProfile, now: datetime) -> UserProfile:
            topics = tuple(t for t in profile.interests.topics if t != topic)
            return dataclasses.replace(profile, interests=dataclasses.replace(profile.interests, topics=topics))

        return self._mutate(user_id, change)

    # Derived views

    def recommend(
        self,
        user_id: str,
        candidates: Iterable[Article],
        limit: int = RECOMMENDATION_LIMIT,
    ) -> list[Article]:
        return recommend_articles(self.get_profile(user_id), candidates, limit)

    def analytics(self, user_id: str) -> ReadingAnalytics:
        return compute_analytics(self.get_profile(user_id), self.clock())

    # Data management

    def export_profile(self, user_id: str) -> dict[str, Any]:
        data = profile_to_dict(self.get_profile(user_id))
        data["exported_at"] = self.clock().isoformat()
        return data

    def import_profile(self, user_id: str, data: dict[str, Any]) -> UserProfile:
        """Replace the user's profile with an exported document.

        Raises:
            ValueError: If the document cannot be parsed. The stored profile is unchanged.
        """
        try:
            imported = profile_from_dict({**data, "user_id": user_id})
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid profile data: {e}") from e
        return self._mutate(user_id, lambda profile, now: imported)

    def clear_profile(self, user_id: str) -> UserProfile:
        """Delete the user's stored profile.

        Returns:
            The empty profile the user starts over with. It is stored again on next access.
        """
        with self._lock_for(user_id):
            self._delete(user_id)
            return new_profile(user_id, self.clock())
