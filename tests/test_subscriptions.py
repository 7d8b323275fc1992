"""Tests for the in-process change feed."""

from professordex.services.subscriptions import ChangeFeed, get_change_feed

SCOPE = "users/u1/collections/c1/cards"


class TestChangeFeed:
    async def test_subscriber_receives_snapshot(self) -> None:
        feed = ChangeFeed()

        async with feed.subscribe(SCOPE) as subscription:
            reached = feed.publish(SCOPE, [{"card_id": "sv3pt5-1"}])
            snapshot = await subscription.get()

        assert reached == 1
        assert snapshot == [{"card_id": "sv3pt5-1"}]

    async def test_other_scopes_not_delivered(self) -> None:
        feed = ChangeFeed()

        async with feed.subscribe(SCOPE) as subscription:
            feed.publish("users/u2/collections/c1/cards", ["other"])

            assert subscription.pending() == 0

    async def test_publish_without_subscribers(self) -> None:
        assert ChangeFeed().publish(SCOPE, []) == 0

    async def test_unsubscribes_on_exit(self) -> None:
        feed = ChangeFeed()

        async with feed.subscribe(SCOPE):
            assert feed.subscriber_count(SCOPE) == 1

        assert feed.subscriber_count(SCOPE) == 0

    async def test_slow_subscriber_keeps_newest(self) -> None:
        """A full queue drops its oldest snapshot, never the newest."""
        feed = ChangeFeed(queue_size=2)

        async with feed.subscribe(SCOPE) as subscription:
            for version in range(5):
                feed.publish(SCOPE, version)

            assert subscription.pending() == 2
            assert await subscription.get() == 3
            assert await subscription.get() == 4

    async def test_iteration(self) -> None:
        feed = ChangeFeed()
        received = []

        async with feed.subscribe(SCOPE) as subscription:
            feed.publish(SCOPE, "a")
            feed.publish(SCOPE, "b")
            async for snapshot in subscription:
                received.append(snapshot)
                if len(received) == 2:
                    break

        assert received == ["a", "b"]

    def test_default_feed_is_shared(self) -> None:
        assert get_change_feed() is get_change_feed()
