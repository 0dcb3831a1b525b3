import pydantic
import pytest

import seed
from database import Registry, TargetKind
from errors import InvariantViolation, NotFound, ValidationError
from ranking import SortPolicy
from schemas import PostCreate, PostKind, VoteDirection

from factories import COMMUNITIES, make_comment, make_post

UP, DOWN = VoteDirection.up, VoteDirection.down


@pytest.fixture
def small(clock):
    registry = Registry(clock=clock)
    registry.load(
        COMMUNITIES,
        [make_post("1", upvotes=10, downvotes=2, hours_old=1), make_post("2", upvotes=3, hours_old=2)],
        {"1": (make_comment("1", replies=[make_comment("2", level=1, parent_id="1")]),)},
    )
    return registry


class TestSampleData:
    def test_seeded_content(self, registry):
        assert [c.name for c in registry.list_communities()] == ["programming", "webdev", "javascript", "react", "design"]
        assert registry.counts() == (3, 2)
        assert [c.id for c in registry.list_comments("1")] == ["1"]

    def test_reseed_discards_changes(self, registry, author):
        registry.vote_post("1", DOWN)
        registry.create_post(author, PostCreate(title="temp", community="react"))
        registry.seed()
        assert registry.counts() == (3, 2)
        assert registry.get_post("1").user_vote is None


class TestPostVotes:
    def test_vote_round_trip(self, small):
        post = small.vote(TargetKind.post, "1", UP)
        assert (post.upvotes, post.downvotes, post.user_vote) == (11, 2, UP)
        post = small.vote(TargetKind.post, "1", UP)
        assert (post.upvotes, post.downvotes, post.user_vote) == (10, 2, None)

    def test_vote_flip(self, small):
        small.vote_post("1", UP)
        post = small.vote_post("1", DOWN)
        assert (post.upvotes, post.downvotes, post.user_vote) == (10, 3, DOWN)
        assert small.get_post("1").score == 7

    def test_vote_leaves_other_posts_alone(self, small):
        before = small.get_post("2")
        small.vote_post("1", UP)
        assert small.get_post("2") is before

    def test_unknown_post_is_noop(self, small):
        assert small.vote_post("404", UP) is None
        assert [p.upvotes for p in small.list_posts(sort=SortPolicy.new)] == [10, 3]

    def test_unknown_post_strict(self, small):
        with pytest.raises(NotFound) as exc:
            small.vote(TargetKind.post, "404", UP, strict=True)
        assert exc.value.target_id == "404"

    def test_accepts_string_direction(self, small):
        assert small.vote("post", "1", "down").user_vote == DOWN


class TestSnapshots:
    def test_returned_posts_are_frozen(self, small):
        post = small.get_post("1")
        with pytest.raises(pydantic.ValidationError):
            post.upvotes = 1000

    def test_old_snapshot_survives_mutation(self, small):
        before = small.get_post("1")
        small.vote_post("1", UP)
        small.toggle_save("1")
        assert before.upvotes == 10 and not before.saved

    def test_listed_collection_is_a_copy(self, small):
        listed = small.list_posts()
        listed.clear()
        assert len(small.list_posts()) == 2


class TestCreatePost:
    def test_whitespace_title_rejected(self, small, author):
        with pytest.raises(ValidationError):
            small.create_post(author, PostCreate(title="  ", community="programming"))
        assert [p.id for p in small.list_posts(sort=SortPolicy.new)] == ["1", "2"]

    def test_unknown_community_rejected(self, small, author):
        with pytest.raises(ValidationError):
            small.create_post(author, PostCreate(title="Hello", community="nowhere"))
        assert small.counts()[0] == 2

    def test_defaults(self, small, author, clock):
        post = small.create_post(author, PostCreate(title="Hello", content="world", community="design"))
        assert (post.upvotes, post.downvotes, post.user_vote) == (1, 0, UP)
        assert post.comment_count == 0 and post.awards == 0 and not post.saved
        assert post.author == author
        assert post.created_at == clock()
        assert post.kind == PostKind.text

    def test_prepends_and_ids_are_unique(self, small, author):
        first = small.create_post(author, PostCreate(title="A", community="design"))
        second = small.create_post(author, PostCreate(title="B", community="design"))
        assert len({first.id, second.id, "1", "2"}) == 4
        assert [p.id for p in small.list_posts(sort=SortPolicy.new)] == [second.id, first.id, "1", "2"]

    def test_link_post_requires_url(self):
        with pytest.raises(pydantic.ValidationError):
            PostCreate(title="link", kind=PostKind.link, community="design")
        assert PostCreate(title="link", kind=PostKind.link, url="https://animate.style/", community="design").url

    def test_title_length_limit(self):
        with pytest.raises(pydantic.ValidationError):
            PostCreate(title="x" * 301, community="design")
        PostCreate(title="é" * 300, community="design")

    def test_new_post_is_newest(self, small, author):
        post = small.create_post(author, PostCreate(title="Fresh", community="design"))
        assert small.list_posts(sort=SortPolicy.new)[0].id == post.id


class TestListPosts:
    def test_filters_before_ranking(self, registry):
        assert [p.id for p in registry.list_posts(community="react")] == ["2"]
        assert [p.id for p in registry.list_posts(search="CSS")] == ["3"]
        assert [p.id for p in registry.list_posts(community="webdev", search="css")] == []

    def test_sort_policies(self, registry):
        assert [p.id for p in registry.list_posts(sort=SortPolicy.new)] == ["1", "2", "3"]
        assert [p.id for p in registry.list_posts(sort=SortPolicy.top)] == ["1", "2", "3"]

    def test_hot_uses_registry_clock(self, clock):
        registry = Registry(clock=clock)
        registry.load(COMMUNITIES, [make_post("old", upvotes=10, hours_old=10), make_post("fresh", upvotes=3)])
        assert [p.id for p in registry.list_posts()] == ["fresh", "old"]
        clock.advance(hours=100)
        assert [p.id for p in registry.list_posts()] == ["old", "fresh"]


class TestSave:
    def test_toggle(self, small):
        assert small.toggle_save("2").saved
        assert not small.toggle_save("2").saved

    def test_unknown(self, small):
        assert small.toggle_save("404") is None
        with pytest.raises(NotFound):
            small.toggle_save("404", strict=True)


class TestComments:
    def test_top_level_comment_prepends(self, small, author):
        comment = small.add_comment(author, "1", "First!")
        assert [c.id for c in small.list_comments("1")] == [comment.id, "1"]
        assert (comment.upvotes, comment.downvotes, comment.user_vote, comment.level) == (1, 0, UP, 0)
        assert comment.parent_id is None

    def test_reply_appends_with_flat_level(self, small, author):
        reply = small.add_comment(author, "1", "deeper", parent_id="2")
        assert reply.level == 1
        assert reply.parent_id == "2"
        assert [r.id for r in small.get_comment("2").replies] == [reply.id]

    def test_nested_levels(self, clock, author):
        registry = Registry.with_sample_data(clock=clock, nested_reply_levels=True)
        reply = registry.add_comment(author, "1", "deeper", parent_id="2")
        assert reply.level == 2

    def test_comment_count_tracks_thread(self, small, author):
        small.add_comment(author, "1", "a")
        small.add_comment(author, "1", "b", parent_id="1")
        assert small.get_post("1").comment_count == 4

    def test_empty_body_rejected(self, small, author):
        with pytest.raises(ValidationError):
            small.add_comment(author, "1", "   ")
        assert len(small.list_comments("1")) == 1
        assert small.get_post("1").comment_count == 2

    def test_unknown_post(self, small, author):
        assert small.add_comment(author, "404", "hello") is None
        with pytest.raises(NotFound):
            small.add_comment(author, "404", "hello", strict=True)

    def test_unknown_parent(self, small, author):
        assert small.add_comment(author, "1", "hello", parent_id="404") is None
        assert small.get_post("1").comment_count == 2
        with pytest.raises(NotFound):
            small.add_comment(author, "1", "hello", parent_id="404", strict=True)

    def test_parent_must_be_in_same_thread(self, small, author):
        other = small.add_comment(author, "2", "elsewhere")
        assert small.add_comment(author, "1", "reply", parent_id=other.id) is None

    def test_threads_are_scoped_per_post(self, small, author):
        small.add_comment(author, "2", "hello")
        assert [c.content for c in small.list_comments("2")] == ["hello"]
        assert [c.id for c in small.list_comments("1")] == ["1"]
        assert small.list_comments("404") == ()

    def test_comment_ids_unique_across_threads(self, small, author):
        new_ids = {small.add_comment(author, pid, "x").id for pid in ("1", "2", "1")}
        assert len(new_ids) == 3
        assert not new_ids & {"1", "2"}

    def test_vote_nested_comment(self, small):
        comment = small.vote(TargetKind.comment, "2", DOWN)
        assert (comment.downvotes, comment.user_vote) == (1, DOWN)
        assert small.get_comment("2").downvotes == 1
        comment = small.vote_comment("2", DOWN)
        assert (comment.downvotes, comment.user_vote) == (0, None)

    def test_vote_new_reply(self, small, author):
        reply = small.add_comment(author, "1", "hi", parent_id="1")
        assert small.vote_comment(reply.id, UP).upvotes == 0

    def test_unknown_comment_vote(self, small):
        assert small.vote_comment("404", UP) is None
        with pytest.raises(NotFound):
            small.vote(TargetKind.comment, "404", UP, strict=True)


class TestLoad:
    def test_duplicate_comment_across_threads(self, clock):
        registry = Registry(clock=clock)
        with pytest.raises(InvariantViolation):
            registry.load(COMMUNITIES, [make_post("1"), make_post("2")], {"1": (make_comment("7"),), "2": (make_comment("7"),)})

    def test_ids_continue_after_loaded_content(self, small, author):
        assert small.create_post(author, PostCreate(title="x", community="design")).id == "3"

    def test_comment_count_matches_thread_size(self, small, registry):
        assert small.get_post("1").comment_count == 2
        assert small.get_post("2").comment_count == 0
        assert [p.comment_count for p in registry.list_posts(sort=SortPolicy.new)] == [2, 0, 0]

    def test_future_dated_post_ranks_as_new(self, clock):
        registry = Registry(clock=clock)
        registry.load(COMMUNITIES, [make_post("now", upvotes=5), make_post("later", upvotes=5, hours_old=-3)])
        assert {p.id for p in registry.list_posts()} == {"now", "later"}


class TestThreadDepth:
    def reply_chain(self, registry, author, length):
        parent = None
        for i in range(length):
            parent = registry.add_comment(author, "2", f"reply {i}", parent_id=parent and parent.id)
        return parent

    def test_replies_stop_at_max_depth(self, clock, author):
        registry = Registry(clock=clock, max_depth=5)
        registry.load(COMMUNITIES, [make_post("1"), make_post("2")])
        deepest = self.reply_chain(registry, author, 6)
        with pytest.raises(ValidationError):
            registry.add_comment(author, "2", "too deep", parent_id=deepest.id)
        assert registry.get_post("2").comment_count == 6

    def test_default_depth_is_readable(self, clock, author):
        registry = Registry(clock=clock)
        registry.load(COMMUNITIES, [make_post("1"), make_post("2")])
        deepest = self.reply_chain(registry, author, registry.max_depth + 1)
        assert registry.vote_comment(deepest.id, DOWN).user_vote == DOWN
        with pytest.raises(ValidationError):
            registry.add_comment(author, "2", "too deep", parent_id=deepest.id)


def test_sample_author_ids_are_unique():
    ids = [a.id for a in seed.AUTHORS]
    assert len(ids) == len(set(ids))
    assert {a.id: a.username for a in seed.AUTHORS}["4"] == "pixel_artist"
