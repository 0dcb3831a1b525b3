"""
In-memory registry

Owns the canonical post collection, the community list and one comment
forest per post. Every mutation goes through the registry; callers only
ever receive frozen snapshots.

Lookups that miss are a silent no-op (returning None) unless the caller
asks for strict mode, in which case NotFound is raised.
"""

from datetime import datetime, timezone
from enum import Enum
from itertools import count
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

import comment_tree
import seed
from comment_tree import Forest
from errors import InvariantViolation, NotFound, ValidationError
from ranking import SortPolicy, filter_posts, rank_posts
from schemas import Author, Comment, Community, Post, PostCreate, VoteDirection
from votes import vote_on


class TargetKind(str, Enum):
    post = "post"
    comment = "comment"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Registry:
    def __init__(
        self,
        communities: Optional[List[Community]] = None,
        clock: Callable[[], datetime] = utcnow,
        nested_reply_levels: bool = False,
        max_depth: int = comment_tree.MAX_DEPTH,
    ):
        self.clock = clock
        self.nested_reply_levels = nested_reply_levels
        self.max_depth = max_depth
        self._communities: List[Community] = list(communities or [])
        self._posts: List[Post] = []
        self._comments: Dict[str, Forest] = {}
        # comment id -> post id
        self._comment_posts: Dict[str, str] = {}
        self._ids = count(1)

    @classmethod
    def with_sample_data(cls, **kwargs) -> "Registry":
        registry = cls(**kwargs)
        registry.seed()
        return registry

    # Loading

    def reset(self) -> None:
        self._communities = []
        self._posts = []
        self._comments = {}
        self._comment_posts = {}
        self._ids = count(1)

    def load(
        self,
        communities: Iterable[Community] = (),
        posts: Iterable[Post] = (),
        comments: Optional[Dict[str, Forest]] = None,
    ) -> None:
        """Replace all content. Posts are kept in the given order, newest first."""
        self.reset()
        self._communities = list(communities)
        self._posts = list(posts)
        for post_id, forest in (comments or {}).items():
            forest = tuple(forest)
            comment_tree.check_forest(forest, self.nested_reply_levels)
            self._comments[post_id] = forest
            for comment, _ in comment_tree.iter_comments(forest):
                if comment.id in self._comment_posts:
                    raise InvariantViolation(f"comment {comment.id} appears in two threads")
                self._comment_posts[comment.id] = post_id
        # comment_count is the size of the thread
        self._posts = [
            post.model_copy(update={"comment_count": comment_tree.count_comments(self._comments.get(post.id, ()))})
            for post in self._posts
        ]
        self._bump_ids()

    def seed(self) -> None:
        """Replace all content with the sample communities, posts and comments"""
        now = self.clock()
        self.load(seed.COMMUNITIES, seed.sample_posts(now), seed.sample_comments(now))
        logger.info(f"Seeded {len(self._posts)} posts and {len(self._comment_posts)} comments")

    def _bump_ids(self) -> None:
        used = [p.id for p in self._posts] + list(self._comment_posts)
        highest = max((int(i) for i in used if i.isdigit()), default=0)
        self._ids = count(highest + 1)

    def _next_id(self) -> str:
        return str(next(self._ids))

    # Reads

    def list_communities(self) -> List[Community]:
        return list(self._communities)

    def get_community(self, name: str) -> Optional[Community]:
        for community in self._communities:
            if community.name == name:
                return community
        return None

    def list_posts(
        self,
        community: Optional[str] = None,
        search: Optional[str] = None,
        sort: SortPolicy = SortPolicy.hot,
    ) -> List[Post]:
        return rank_posts(filter_posts(self._posts, community, search), sort, self.clock())

    def get_post(self, post_id: str) -> Optional[Post]:
        index = self._find_post(post_id)
        return None if index is None else self._posts[index]

    def list_comments(self, post_id: str) -> Forest:
        return self._comments.get(post_id, ())

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        post_id = self._comment_posts.get(comment_id)
        if post_id is None:
            return None
        return comment_tree.find_comment(self._comments[post_id], comment_id)

    def _find_post(self, post_id: str) -> Optional[int]:
        for index, post in enumerate(self._posts):
            if post.id == post_id:
                return index
        return None

    def _missing(self, kind: str, target_id: str, strict: bool) -> None:
        if strict:
            raise NotFound(kind, target_id)
        logger.info(f"Ignoring request for unknown {kind} {target_id}")
        return None

    # Mutations

    def vote(self, kind: TargetKind, target_id: str, direction: VoteDirection, strict: bool = False):
        if TargetKind(kind) == TargetKind.post:
            return self.vote_post(target_id, direction, strict)
        return self.vote_comment(target_id, direction, strict)

    def vote_post(self, post_id: str, direction: VoteDirection, strict: bool = False) -> Optional[Post]:
        index = self._find_post(post_id)
        if index is None:
            return self._missing("post", post_id, strict)
        direction = VoteDirection(direction)
        post = vote_on(self._posts[index], direction)
        self._posts[index] = post
        logger.debug(f"Post {post_id} voted {direction.value}: +{post.upvotes} -{post.downvotes}")
        return post

    def vote_comment(self, comment_id: str, direction: VoteDirection, strict: bool = False) -> Optional[Comment]:
        post_id = self._comment_posts.get(comment_id)
        if post_id is None:
            return self._missing("comment", comment_id, strict)
        direction = VoteDirection(direction)
        forest = comment_tree.find_and_update_vote(self._comments[post_id], comment_id, direction)
        comment_tree.check_forest(forest, self.nested_reply_levels)
        self._comments[post_id] = forest
        comment = comment_tree.find_comment(forest, comment_id)
        logger.debug(f"Comment {comment_id} voted {direction.value}: +{comment.upvotes} -{comment.downvotes}")
        return comment

    def toggle_save(self, post_id: str, strict: bool = False) -> Optional[Post]:
        index = self._find_post(post_id)
        if index is None:
            return self._missing("post", post_id, strict)
        post = self._posts[index]
        post = post.model_copy(update={"saved": not post.saved})
        self._posts[index] = post
        return post

    def create_post(self, author: Author, fields: PostCreate) -> Post:
        title = fields.title.strip()
        if not title:
            logger.warning("Rejected post with empty title")
            raise ValidationError("title must not be empty")
        if self.get_community(fields.community) is None:
            logger.warning(f"Rejected post for unknown community {fields.community}")
            raise ValidationError(f"unknown community: {fields.community}")

        post = Post(
            id=self._next_id(),
            title=fields.title,
            content=fields.content,
            kind=fields.kind,
            url=fields.url,
            author=author,
            community=fields.community,
            # Authors upvote their own submissions
            upvotes=1,
            downvotes=0,
            user_vote=VoteDirection.up,
            comment_count=0,
            created_at=self.clock(),
            awards=0,
        )
        self._posts.insert(0, post)
        logger.info(f"Post {post.id} created in {post.community} by {author.username}")
        return post

    def add_comment(
        self,
        author: Author,
        post_id: str,
        content: str,
        parent_id: Optional[str] = None,
        strict: bool = False,
    ) -> Optional[Comment]:
        if not content.strip():
            logger.warning("Rejected empty comment")
            raise ValidationError("comment must not be empty")
        post_index = self._find_post(post_id)
        if post_index is None:
            return self._missing("post", post_id, strict)

        forest = self._comments.get(post_id, ())
        level = 0
        if parent_id is not None:
            found = comment_tree.find_with_depth(forest, parent_id)
            if found is None:
                return self._missing("comment", parent_id, strict)
            parent, depth = found
            if depth + 1 > self.max_depth:
                logger.warning(f"Rejected reply to {parent_id}: thread deeper than {self.max_depth}")
                raise ValidationError(f"replies may not nest deeper than {self.max_depth} levels")
            level = comment_tree.reply_level(parent, self.nested_reply_levels)

        comment = Comment(
            id=self._next_id(),
            content=content,
            author=author,
            upvotes=1,
            downvotes=0,
            user_vote=VoteDirection.up,
            created_at=self.clock(),
            level=level,
            parent_id=parent_id,
        )
        forest = comment_tree.insert_reply(forest, parent_id, comment)
        comment_tree.check_forest(forest, self.nested_reply_levels)
        self._comments[post_id] = forest
        self._comment_posts[comment.id] = post_id

        post = self._posts[post_index]
        self._posts[post_index] = post.model_copy(update={"comment_count": post.comment_count + 1})
        logger.info(f"Comment {comment.id} added to post {post_id} by {author.username}")
        return comment

    def counts(self) -> Tuple[int, int]:
        return len(self._posts), len(self._comment_posts)
