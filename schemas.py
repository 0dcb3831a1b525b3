"""
Schemas for the forum engine (Reddit style)

Entities are frozen Pydantic models: every snapshot handed out by the
registry is immutable, mutations produce copies.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class VoteDirection(str, Enum):
    up = "up"
    down = "down"


class PostKind(str, Enum):
    text = "text"
    link = "link"
    image = "image"


class Entity(BaseModel):
    model_config = ConfigDict(frozen=True)


class Author(Entity):
    """
    Account referenced by posts and comments
    """
    id: str
    username: str
    avatar: str = Field("", description="Avatar glyph")
    karma: int = Field(0, description="Cumulative reputation")
    cake_day: date = Field(..., description="Account creation date")


class Community(Entity):
    """
    Static reference data, looked up by name
    """
    name: str
    members: int = Field(0, ge=0)
    description: str = ""
    icon: str = ""


class Votable(Entity):
    upvotes: int = Field(0, ge=0)
    downvotes: int = Field(0, ge=0)
    user_vote: Optional[VoteDirection] = Field(None, description="Choice of the acting user")

    @computed_field
    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


class Post(Votable):
    """
    Submissions to a community
    """
    id: str
    title: str = Field(..., min_length=1, max_length=300)
    content: str = ""
    kind: PostKind = PostKind.text
    url: Optional[str] = None
    author: Author
    community: str = Field(..., description="Community name")
    comment_count: int = Field(0, ge=0, description="Total comments in the thread")
    created_at: datetime
    awards: int = Field(0, ge=0)
    saved: bool = False


class Comment(Votable):
    """
    Node of a comment tree. Replies are owned by their parent.
    """
    id: str
    content: str = Field(..., min_length=1)
    author: Author
    created_at: datetime
    replies: Tuple["Comment", ...] = ()
    level: int = Field(0, ge=0)
    parent_id: Optional[str] = None


Comment.model_rebuild()


# Request payloads

class PostCreate(BaseModel):
    title: str = Field(..., max_length=300)
    content: str = Field("", max_length=40000)
    kind: PostKind = PostKind.text
    url: Optional[str] = None
    community: str

    @model_validator(mode="after")
    def check_url(self):
        if self.kind == PostKind.link and not (self.url or "").strip():
            raise ValueError("url is required for link posts")
        return self


class CommentCreate(BaseModel):
    content: str = Field(..., max_length=10000)
    parent_id: Optional[str] = Field(None, description="Optional parent comment id for threading")


class VoteRequest(BaseModel):
    direction: VoteDirection
