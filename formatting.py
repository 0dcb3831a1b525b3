"""
View models handed to the presentation layer.
"""

from datetime import datetime

from schemas import Comment, Post
from ranking import hot_score


def format_time_ago(created_at: datetime, now: datetime) -> str:
    diff_ms = int((now - created_at).total_seconds() * 1000)
    hours = diff_ms // 3600000
    minutes = diff_ms // 60000
    if hours > 0:
        return f"{hours}h ago"
    if minutes > 0:
        return f"{minutes}m ago"
    return "just now"


def format_number(num: int) -> str:
    if num >= 1000000:
        return f"{num / 1000000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}k"
    return str(num)


def post_view(post: Post, now: datetime) -> dict:
    data = post.model_dump(mode="json")
    data["score_display"] = format_number(post.score)
    data["time_ago"] = format_time_ago(post.created_at, now)
    data["hot_score"] = hot_score(post, now)
    return data


def _comment_data(comment: Comment, now: datetime, depth: int) -> dict:
    data = comment.model_dump(mode="json", exclude={"replies"})
    data["score_display"] = format_number(comment.score)
    data["time_ago"] = format_time_ago(comment.created_at, now)
    data["depth"] = depth
    data["replies"] = []
    return data


def comment_view(comment: Comment, now: datetime, depth: int = 0) -> dict:
    """Nested view of a comment subtree; depth is the real nesting depth"""
    root = _comment_data(comment, now, depth)
    stack = [(reply, depth + 1, root["replies"]) for reply in reversed(comment.replies)]
    while stack:
        node, level, siblings = stack.pop()
        data = _comment_data(node, now, level)
        siblings.append(data)
        stack.extend((reply, level + 1, data["replies"]) for reply in reversed(node.replies))
    return root
