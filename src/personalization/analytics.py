"""Reading analytics derived from a profile."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from classify_articles.models import POLITICAL_BIASES
from personalization.models import ReadEvent, UserProfile

STREAK_WINDOW_DAYS = 30


@dataclass(frozen=True)
class ReadingAnalytics:
    total_read: int = 0
    total_saved: int = 0
    bias_exposure: dict[str, int] = field(default_factory=dict)
    category_preferences: dict[str, int] = field(default_factory=dict)
    source_diversity: int = 0
    avg_reading_time_minutes: int = 0
    reading_streak_days: int = 0


def _utc_date(value: datetime) -> date:
    return value.astimezone(timezone.utc).date()


def average_reading_time(history: Iterable[ReadEvent]) -> int:
    """Mean reading time over the whole history in whole minutes, rounding halves up.

    Entries without a recorded time count as zero minutes.
    """
    events = list(history)
    if not events:
        return 0
    total = sum(event.read_time_minutes or 0 for event in events)
    mean = Decimal(total) / Decimal(len(events))
    return int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def reading_streak(history: Iterable[ReadEvent], today: date, window: int = STREAK_WINDOW_DAYS) -> int:
    """Consecutive days with reading activity, counting back from today.

    A day without reads breaks the streak, except today itself.
    """
    days = set()
    for event in history:
        days.add(_utc_date(event.read_at))
        days.add(_utc_date(event.last_read_at))

    streak = 0
    for offset in range(window):
        if today - timedelta(days=offset) in days:
            streak += 1
        elif offset > 0:
            break
    return streak


def bias_exposure(history: Iterable[ReadEvent]) -> dict[str, int]:
    """Reads per bias label. Every label is present, unread ones with 0."""
    exposure = {bias: 0 for bias in POLITICAL_BIASES}
    for event in history:
        if event.bias in exposure:
            exposure[event.bias] += 1
    return exposure


def compute_analytics(profile: UserProfile, now: datetime) -> ReadingAnalytics:
    history = profile.reading_history
    return ReadingAnalytics(
        total_read=len(history),
        total_saved=len(profile.saved_articles),
        bias_exposure=bias_exposure(history),
        category_preferences=dict(Counter(event.category for event in history if event.category)),
        source_diversity=len({event.source_id for event in history}),
        avg_reading_time_minutes=average_reading_time(history),
        reading_streak_days=reading_streak(history, _utc_date(now)),
    )
