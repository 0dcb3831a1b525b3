"""
Sample content: communities, authors, posts and a threaded discussion.
"""

from datetime import date, datetime, timedelta
from typing import Dict, List, Tuple

from schemas import Author, Comment, Community, Post, PostKind

AUTHORS = [
    Author(id="1", username="tech_guru", avatar="🧑‍💻", karma=1250, cake_day=date(2023, 1, 15)),
    Author(id="2", username="coding_ninja", avatar="🥷", karma=890, cake_day=date(2023, 3, 22)),
    Author(id="3", username="dev_enthusiast", avatar="👩‍💻", karma=2100, cake_day=date(2022, 11, 8)),
    Author(id="4", username="pixel_artist", avatar="🎨", karma=567, cake_day=date(2023, 6, 12)),
]

COMMUNITIES = [
    Community(name="programming", members=125000, description="All about programming and development", icon="💻"),
    Community(name="webdev", members=89000, description="Web development discussions", icon="🌐"),
    Community(name="javascript", members=156000, description="JavaScript community", icon="⚡"),
    Community(name="react", members=78000, description="React.js discussions", icon="⚛️"),
    Community(name="design", members=45000, description="UI/UX Design community", icon="🎨"),
]


def sample_posts(now: datetime) -> List[Post]:
    return [
        Post(
            id="1",
            title="Just built my first full-stack app with React and Node.js!",
            content="After months of learning, I finally completed my first full-stack project. "
                    "It's a task management app with authentication, real-time updates, and a clean UI. "
                    "The journey was challenging but incredibly rewarding!",
            kind=PostKind.text,
            author=AUTHORS[0],
            community="webdev",
            upvotes=1247,
            downvotes=23,
            created_at=now - timedelta(hours=1),
            awards=3,
        ),
        Post(
            id="2",
            title="Best practices for React component optimization",
            content="Here are some key strategies I've learned for optimizing React components: "
                    "Use React.memo for expensive renders, implement proper key props, avoid inline "
                    "functions in JSX, and leverage useMemo and useCallback hooks strategically.",
            kind=PostKind.text,
            author=AUTHORS[1],
            community="react",
            upvotes=892,
            downvotes=12,
            created_at=now - timedelta(hours=2),
            awards=2,
        ),
        Post(
            id="3",
            title="Amazing CSS animation library I discovered",
            content="Check out this incredible animation library that makes creating smooth, "
                    "performant CSS animations a breeze!",
            kind=PostKind.link,
            url="https://animate.style/",
            author=AUTHORS[2],
            community="design",
            upvotes=634,
            downvotes=8,
            created_at=now - timedelta(hours=3),
            awards=1,
        ),
    ]


def sample_comments(now: datetime) -> Dict[str, Tuple[Comment, ...]]:
    """Comment forests keyed by post id"""
    reply = Comment(
        id="2",
        content="I used Node.js with Express, MongoDB for the database, and Socket.io for real-time features.",
        author=AUTHORS[0],
        upvotes=32,
        downvotes=0,
        created_at=now - timedelta(minutes=45),
        level=1,
        parent_id="1",
    )
    root = Comment(
        id="1",
        content="This is really impressive! What tech stack did you use for the backend?",
        author=AUTHORS[1],
        upvotes=45,
        downvotes=2,
        created_at=now - timedelta(minutes=50),
        replies=(reply,),
        level=0,
    )
    return {"1": (root,)}
