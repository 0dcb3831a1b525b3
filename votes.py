"""
Vote ledger: the tri-state vote transition shared by posts and comments.

    none --up--> up --up--> none
    none --down--> down --down--> none
    up --down--> down, down --up--> up
"""

from typing import NamedTuple, Optional, TypeVar

from errors import InvariantViolation
from schemas import VoteDirection, Votable

V = TypeVar("V", bound=Votable)


class VoteTally(NamedTuple):
    upvotes: int
    downvotes: int
    user_vote: Optional[VoteDirection]


def apply_vote(
    upvotes: int,
    downvotes: int,
    current: Optional[VoteDirection],
    direction: VoteDirection,
) -> VoteTally:
    if direction == current:
        # Retract
        if direction == VoteDirection.up:
            upvotes -= 1
        else:
            downvotes -= 1
        choice = None
    else:
        if direction == VoteDirection.up:
            upvotes += 1
            if current == VoteDirection.down:
                downvotes -= 1
        else:
            downvotes += 1
            if current == VoteDirection.up:
                upvotes -= 1
        choice = direction

    if upvotes < 0 or downvotes < 0:
        raise InvariantViolation(
            f"negative vote counter after {direction.value} vote "
            f"(upvotes={upvotes}, downvotes={downvotes})"
        )
    return VoteTally(upvotes, downvotes, choice)


def vote_on(entity: V, direction: VoteDirection) -> V:
    """Return a copy of a post or comment with the vote applied"""
    tally = apply_vote(entity.upvotes, entity.downvotes, entity.user_vote, direction)
    return entity.model_copy(update=tally._asdict())
