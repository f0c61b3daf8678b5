"""Tests for the ordered queue."""

import asyncio
import random

import pytest

from spotgen.application.entries import Album, Track
from spotgen.domain.entities import Queue
from spotgen.domain.errors import CatalogError, EntryNotFoundError


class StubEntry:
    """Entry resolving to a fixed value after an optional delay."""

    def __init__(self, value, delay=0.0, error=None):
        self.value = value
        self.delay = delay
        self.error = error
        self.entry = str(value)

    async def dispatch(self):
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        return self.value

    def __str__(self):
        return self.entry


def resolved_track(context, uri="", title="", entry="entry"):
    track = Track(context, entry=entry, uri=uri)
    track.title = title
    return track


class TestContainer:
    def test_add_preserves_order(self):
        queue = Queue()
        queue.add("foo")
        queue.add("bar")
        assert list(queue) == ["foo", "bar"]
        assert queue.get(1) == "bar"
        assert len(queue) == 2
        assert "foo" in queue

    def test_concat_preserves_order(self):
        first = Queue(["foo", "bar"])
        result = first.concat(Queue(["baz"]))
        assert list(result) == ["foo", "bar", "baz"]
        assert list(first) == ["foo", "bar"]

    def test_filter_and_slice(self):
        queue = Queue([1, 2, 3, 4])
        assert list(queue.filter(lambda x: x % 2 == 0)) == [2, 4]
        assert list(queue.slice(1, 3)) == [2, 3]


class TestOrdering:
    def test_sort_defaults_to_text(self, context):
        foo = Track(context, entry="foo")
        bar = Track(context, entry="bar")
        assert list(Queue([foo, bar]).sort()) == [bar, foo]

    def test_sort_with_comparator_returns_new_queue(self):
        queue = Queue([2, 1, 3])
        result = queue.sort(lambda a, b: a - b)
        assert list(result) == [1, 2, 3]
        assert list(queue) == [2, 1, 3]

    def test_reverse(self):
        assert list(Queue([1, 2, 3]).reverse()) == [3, 2, 1]

    def test_shuffle_is_a_permutation(self):
        items = list(range(20))
        result = Queue(items).shuffle(random.Random(1))
        assert sorted(result) == items

    def test_group_by_first_appearance(self):
        queue = Queue([("t1", "A"), ("t2", "B"), ("t3", "A")])
        result = queue.group(lambda x: x[1])
        assert [x[0] for x in result] == ["t1", "t3", "t2"]

    def test_alternate_round_robin(self):
        queue = Queue([("x1", "X"), ("y1", "Y"), ("x2", "X"), ("x3", "X"), ("y2", "Y")])
        result = queue.alternate(lambda x: x[1])
        assert [x[1] for x in result] == ["X", "Y", "X", "Y", "X"]
        assert [x[0] for x in result] == ["x1", "y1", "x2", "y2", "x3"]

    def test_interleave_sub_queues(self):
        queue = Queue([Queue([1, 2, 3]), Queue([4]), 5, Queue([6, 7])])
        assert list(queue.interleave()) == [1, 4, 5, 6, 2, 7, 3]

    def test_flatten_matches_manual_concatenation(self):
        inner = Queue([2, Queue([3, 4])])
        queue = Queue([1, inner, Queue(), 5])
        assert list(queue.flatten()) == [1, 2, 3, 4, 5]


class TestDedup:
    @pytest.mark.asyncio
    async def test_same_uri_is_duplicate(self, context):
        foo1 = resolved_track(context, uri="spotify:track:1", title="A - Foo", entry="foo")
        foo2 = resolved_track(context, uri="spotify:track:1", title="A - Foo", entry="foo")
        bar = resolved_track(context, uri="spotify:track:2", title="A - Bar", entry="bar")
        result = await Queue([foo1, foo2, bar]).dedup()
        assert list(result) == [foo1, bar]

    @pytest.mark.asyncio
    async def test_different_uris_are_distinct_even_with_same_title(self, context):
        a = resolved_track(context, uri="spotify:track:1", title="A - Foo")
        b = resolved_track(context, uri="spotify:track:2", title="A - Foo")
        assert list(await Queue([a, b]).dedup()) == [a, b]

    @pytest.mark.asyncio
    async def test_normalized_title_without_uri(self, context):
        a = resolved_track(context, uri="spotify:track:1", title="Sigur Rós - Hoppípolla")
        b = resolved_track(context, title="sigur ros - hoppipolla")
        assert list(await Queue([a, b]).dedup()) == [a]

    @pytest.mark.asyncio
    async def test_dedup_is_idempotent(self, context):
        tracks = [
            resolved_track(context, uri="spotify:track:1", title="A - Foo"),
            resolved_track(context, uri="spotify:track:1", title="A - Foo"),
            resolved_track(context, title="A - Bar"),
            resolved_track(context, title="a - bar!"),
        ]
        once = await Queue(tracks).dedup()
        twice = await once.dedup()
        assert list(twice) == list(once)
        assert len(once) == 2

    @pytest.mark.asyncio
    async def test_unresolvable_entry_is_kept(self, context):
        unresolved = Track(context, entry="nothing matches this")
        result = await Queue([unresolved]).dedup()
        assert list(result) == [unresolved]

    @pytest.mark.asyncio
    async def test_non_track_entries_are_kept(self, context):
        album = Album(context, entry="album")
        assert list(await Queue([album, album]).dedup()) == [album, album]


class TestAsync:
    @pytest.mark.asyncio
    async def test_for_each_async_is_sequential(self):
        events = []

        async def visit(value):
            events.append(("start", value))
            await asyncio.sleep(0.01 if value == 1 else 0)
            events.append(("end", value))

        await Queue([1, 2]).for_each_async(visit)
        assert events == [("start", 1), ("end", 1), ("start", 2), ("end", 2)]

    @pytest.mark.asyncio
    async def test_dispatch_preserves_order_under_delays(self):
        queue = Queue(
            [StubEntry("a", 0.05), StubEntry("b", 0.0), StubEntry("c", 0.02)]
        )
        result = await queue.dispatch(concurrency=3)
        assert list(result) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_dispatch_drops_recoverable_failures(self):
        queue = Queue(
            [
                StubEntry("a"),
                StubEntry("x", error=EntryNotFoundError("x")),
                StubEntry("y", error=CatalogError("boom")),
                StubEntry("b"),
            ]
        )
        result = await queue.dispatch()
        assert list(result) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_dispatch_propagates_other_errors(self):
        queue = Queue([StubEntry("a"), StubEntry("x", error=ValueError("bad"))])
        with pytest.raises(ValueError, match="bad"):
            await queue.dispatch()

    @pytest.mark.asyncio
    async def test_dispatch_respects_concurrency(self):
        active = 0
        peak = 0

        class Counting(StubEntry):
            async def dispatch(self):
                nonlocal active, peak
                active += 1
                peak = max(peak, active)
                await asyncio.sleep(0.01)
                active -= 1
                return self.value

        result = await Queue([Counting(i) for i in range(6)]).dispatch(concurrency=2)
        assert list(result) == list(range(6))
        assert peak <= 2
