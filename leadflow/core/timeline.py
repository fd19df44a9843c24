"""Timeline helpers - interaction ordering and elapsed time"""
from datetime import datetime
from typing import Iterable, List, Optional

from leadflow.models import Interaction


def sort_interactions(interactions: Iterable[Interaction]) -> List[Interaction]:
    """Ascending by event time, independent of insertion order"""
    return sorted(interactions, key=lambda i: i.created_at.timestamp())


def last_interaction(interactions: Iterable[Interaction]) -> Optional[Interaction]:
    """Most recent interaction, None for an empty timeline"""
    ordered = sort_interactions(interactions)
    return ordered[-1] if ordered else None


def _elapsed_seconds(since: datetime, now: Optional[datetime]) -> float:
    now = now or datetime.now().astimezone()
    return now.timestamp() - since.timestamp()


def elapsed_time(since: datetime, now: Optional[datetime] = None) -> str:
    """
    Time elapsed since a moment.

    "HH:MM" under a day, "Xd HH:MM" beyond, "00:00" for future moments.
    """
    seconds = _elapsed_seconds(since, now)
    if seconds < 0:
        return "00:00"

    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)
    if hours >= 24:
        days, hours = divmod(hours, 24)
        return f"{days}d {hours:02d}:{minutes:02d}"
    return f"{hours:02d}:{minutes:02d}"



def is_over_threshold(since: datetime, hours: float, now: Optional[datetime] = None) -> bool:
    """True once at least `hours` have passed since the moment"""
    return _elapsed_seconds(since, now) >= hours * 3600
