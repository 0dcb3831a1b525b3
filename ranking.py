"""
Ranking of post collections.

hot:  score / (age_hours + 2) ** 1.8, fresh posts with modest scores can
      outrank older posts with larger ones
new:  newest first
top:  highest net score first

Sorting is stable, so posts with equal keys keep their input order.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, List, Optional

from schemas import Post

HOT_GRAVITY = 1.8
HOT_OFFSET = 2


class SortPolicy(str, Enum):
    hot = "hot"
    new = "new"
    top = "top"


def age_hours(created_at: datetime, now: datetime) -> float:
    return (now - created_at).total_seconds() / 3600


def hot_score(post: Post, now: Optional[datetime] = None) -> float:
    now = now or datetime.now(timezone.utc)
    # Posts dated after "now" (clock skew) count as brand new
    age = max(age_hours(post.created_at, now), 0.0)
    return post.score / (age + HOT_OFFSET) ** HOT_GRAVITY


def rank_posts(posts: Iterable[Post], policy: SortPolicy = SortPolicy.hot, now: Optional[datetime] = None) -> List[Post]:
    policy = SortPolicy(policy)
    if policy == SortPolicy.new:
        return sorted(posts, key=lambda p: p.created_at, reverse=True)
    if policy == SortPolicy.top:
        return sorted(posts, key=lambda p: p.score, reverse=True)
    # One timestamp for the whole sort
    now = now or datetime.now(timezone.utc)
    return sorted(posts, key=lambda p: hot_score(p, now), reverse=True)


def filter_posts(posts: Iterable[Post], community: Optional[str] = None, search: Optional[str] = None) -> List[Post]:
    """Community selection and case-insensitive search over title and content"""
    needle = (search or "").lower()
    result = []
    for post in posts:
        if community and community != "all" and post.community != community:
            continue
        if needle and needle not in post.title.lower() and needle not in post.content.lower():
            continue
        result.append(post)
    return result
