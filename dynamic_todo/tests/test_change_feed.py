"""Tests for ChangeFeed fan-out."""

from __future__ import annotations

import pytest

from dynamic_todo.services.change_feed import ALL_SUBJECTS, ChangeFeed, make_notification


def collector():
    seen = []

    async def callback(notification):
        seen.append(notification)

    return seen, callback


class TestChangeFeed:
    def test_notification_shape(self):
        assert make_notification("alice", {"success": True}) == {
            "jsonrpc": "2.0",
            "method": "ui/changed",
            "params": {"userId": "alice", "result": {"success": True}},
        }

    @pytest.mark.asyncio
    async def test_delivers_to_subject_only(self):
        feed = ChangeFeed()
        alice, alice_cb = collector()
        bob, bob_cb = collector()
        feed.subscribe("alice", alice_cb)
        feed.subscribe("bob", bob_cb)

        delivered = await feed.publish("alice", {"version": 2})

        assert delivered == 1
        assert len(alice) == 1
        assert bob == []

    @pytest.mark.asyncio
    async def test_wildcard_subscriber(self):
        feed = ChangeFeed()
        seen, cb = collector()
        feed.subscribe(ALL_SUBJECTS, cb)

        await feed.publish("alice", {})
        await feed.publish("bob", {})

        assert [n["params"]["userId"] for n in seen] == ["alice", "bob"]

    @pytest.mark.asyncio
    async def test_unsubscribe(self):
        feed = ChangeFeed()
        seen, cb = collector()
        sub_id = feed.subscribe("alice", cb)
        feed.unsubscribe(sub_id)

        assert await feed.publish("alice", {}) == 0
        assert seen == []
        assert feed.subscriber_count() == 0

    @pytest.mark.asyncio
    async def test_failing_subscriber_dropped_others_served(self):
        feed = ChangeFeed()
        seen, cb = collector()

        async def broken(notification):
            raise RuntimeError("gone")

        feed.subscribe("alice", broken)
        feed.subscribe("alice", cb)

        assert await feed.publish("alice", {}) == 1
        assert len(seen) == 1
        assert feed.subscriber_count("alice") == 1

        assert await feed.publish("alice", {}) == 1
        assert len(seen) == 2
