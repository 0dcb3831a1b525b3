"""
Comment forest operations.

A forest is a tuple of root comments; each comment owns its replies. Trees
are persistent: a mutation rebuilds only the path from the root to the
changed node and shares every other subtree, so previously returned
forests stay valid snapshots.

Walks use an explicit stack, so thread depth is not tied to the
interpreter recursion limit.
"""

from typing import Iterator, List, Optional, Set, Tuple

from errors import InvariantViolation
from schemas import Comment, VoteDirection
from votes import vote_on

Forest = Tuple[Comment, ...]

MAX_DEPTH = 100


def iter_comments(forest: Forest, depth: int = 0) -> Iterator[Tuple[Comment, int]]:
    """Depth-first pre-order walk yielding (comment, depth)"""
    stack = [(comment, depth) for comment in reversed(forest)]
    while stack:
        comment, level = stack.pop()
        yield comment, level
        stack.extend((reply, level + 1) for reply in reversed(comment.replies))


def count_comments(forest: Forest) -> int:
    return sum(1 for _ in iter_comments(forest))


def find_comment(forest: Forest, comment_id: str) -> Optional[Comment]:
    found = find_with_depth(forest, comment_id)
    return found[0] if found else None


def find_with_depth(forest: Forest, comment_id: str) -> Optional[Tuple[Comment, int]]:
    for comment, depth in iter_comments(forest):
        if comment.id == comment_id:
            return comment, depth
    return None


def _path_to(forest: Forest, comment_id: str) -> Optional[List[int]]:
    # Child indices from the root collection down to the target
    stack = [(comment, (index, None)) for index, comment in reversed(list(enumerate(forest)))]
    while stack:
        comment, link = stack.pop()
        if comment.id == comment_id:
            path = []
            while link is not None:
                index, link = link
                path.append(index)
            return path[::-1]
        stack.extend(
            (reply, (index, link)) for index, reply in reversed(list(enumerate(comment.replies)))
        )
    return None


def _replace(forest: Forest, comment_id: str, update) -> Forest:
    # Returns the same forest object when no node matched
    path = _path_to(forest, comment_id)
    if path is None:
        return forest

    chain = []
    siblings = forest
    for index in path:
        chain.append((siblings, index))
        siblings = siblings[index].replies

    siblings, index = chain.pop()
    new = update(siblings[index])
    while chain:
        replaced = siblings[:index] + (new,) + siblings[index + 1:]
        siblings, index = chain.pop()
        new = siblings[index].model_copy(update={"replies": replaced})
    return siblings[:index] + (new,) + siblings[index + 1:]


def find_and_update_vote(forest: Forest, comment_id: str, direction: VoteDirection) -> Forest:
    return _replace(forest, comment_id, lambda c: vote_on(c, direction))


def insert_reply(forest: Forest, parent_id: Optional[str], comment: Comment) -> Forest:
    """
    Append a reply to the comment with id `parent_id`, or prepend a new
    top-level comment when `parent_id` is None. The comment's level is
    taken as given.
    """
    if parent_id is None:
        return (comment,) + forest
    return _replace(
        forest,
        parent_id,
        lambda parent: parent.model_copy(update={"replies": parent.replies + (comment,)}),
    )


def reply_level(parent: Comment, nested: bool = False) -> int:
    # Replies are tagged level 1 at any depth unless nested levels are on
    return parent.level + 1 if nested else 1


def check_forest(forest: Forest, nested: bool = False) -> None:
    seen: Set[str] = set()
    stack: List[Tuple[Comment, Optional[Comment]]] = [(root, None) for root in reversed(forest)]
    while stack:
        comment, parent = stack.pop()
        if comment.id in seen:
            raise InvariantViolation(f"comment {comment.id} reachable twice")
        seen.add(comment.id)
        if comment.upvotes < 0 or comment.downvotes < 0:
            raise InvariantViolation(f"negative vote counter on comment {comment.id}")
        if parent is None:
            if comment.level != 0:
                raise InvariantViolation(f"root comment {comment.id} has level {comment.level}")
        else:
            if comment.parent_id != parent.id:
                raise InvariantViolation(f"comment {comment.id} filed under {parent.id} but points to {comment.parent_id}")
            if comment.level != reply_level(parent, nested):
                raise InvariantViolation(f"comment {comment.id} has level {comment.level}")
        stack.extend((reply, comment) for reply in reversed(comment.replies))
