"""Unit tests for running consumers and aggregating their items."""

import time
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

import requests

from hawthrss.consumers.base import SourceConsumer
from hawthrss.consumers.feeds import GENERIC
from hawthrss.errors import FetchError
from hawthrss.models import FetchState
from hawthrss.pipeline import aggregate, build_feed, run_consumers

from feed_fixtures import atom_entry, atom_feed, response

FEEDS = {
    "https://one.example/feed": atom_feed(
        "One",
        atom_entry("one:3", "One at T3", published="2024-01-03T00:00:00Z", content="a"),
        atom_entry("one:1", "One at T1", published="2024-01-01T00:00:00Z", content="b"),
    ),
    "https://two.example/feed": atom_feed(
        "Two",
        atom_entry("two:2", "Two at T2", published="2024-01-02T00:00:00Z", content="c"),
    ),
}


def fake_get(url, **kwargs):
    if url not in FEEDS:
        raise requests.ConnectionError(f"no route to {url}")
    return response(FEEDS[url])


def generic(url):
    return SourceConsumer(GENERIC, {"url": url})


def stamped(consumer, *stamps):
    """Marks a consumer as fetched with items at the given days of January."""
    consumer.items = [
        {
            "id": f"{consumer.url}#{i}",
            "title": f"item {i}",
            "url": f"{consumer.url}/{i}",
            "updated_at": datetime(2024, 1, day, tzinfo=timezone.utc),
            "content": "",
            "media_url": None,
            "thumbnail_url": None,
            "consumer": consumer,
        }
        for i, day in enumerate(stamps)
    ]
    consumer.state = FetchState.FETCHED
    return consumer


class TestRunConsumers(unittest.TestCase):
    @patch("requests.get", side_effect=fake_get)
    def test_fetches_every_consumer(self, mock_get):
        consumers = [generic(url) for url in FEEDS]
        run_consumers(consumers)
        self.assertTrue(all(c.fetched for c in consumers))
        self.assertEqual(mock_get.call_count, 2)

    @patch("requests.get", side_effect=fake_get)
    def test_sequential_baseline(self, mock_get):
        consumers = [generic(url) for url in FEEDS]
        run_consumers(consumers, max_workers=1)
        self.assertEqual([c.title for c in consumers], ["One", "Two"])

    @patch("requests.get", side_effect=fake_get)
    def test_skips_fetched_consumers(self, mock_get):
        done = stamped(generic("https://one.example/feed"), 1)
        todo = generic("https://two.example/feed")
        run_consumers([done, todo])
        mock_get.assert_called_once()
        self.assertEqual(mock_get.call_args[0][0], "https://two.example/feed")

    @patch("requests.get", side_effect=fake_get)
    def test_one_failure_fails_the_run(self, mock_get):
        consumers = [generic(url) for url in FEEDS]
        consumers.append(generic("https://down.example/feed"))
        with self.assertRaises(FetchError):
            build_feed(consumers)

    @patch("requests.get")
    def test_repeated_consumer_fetched_once(self, mock_get):
        def slow_get(url, **kwargs):
            time.sleep(0.05)
            return fake_get(url)

        mock_get.side_effect = slow_get
        consumer = generic("https://two.example/feed")
        items = build_feed([consumer, consumer])

        mock_get.assert_called_once()
        self.assertEqual([item["title"] for item in items], ["Two at T2"])


class TestAggregate(unittest.TestCase):
    def test_newest_first_across_consumers(self):
        first = stamped(generic("https://one.example/feed"), 3, 1)
        second = stamped(generic("https://two.example/feed"), 2)
        days = [item["updated_at"].day for item in aggregate([first, second])]
        self.assertEqual(days, [3, 2, 1])

    def test_ties_keep_consumer_order(self):
        first = stamped(generic("https://one.example/feed"), 2, 2)
        second = stamped(generic("https://two.example/feed"), 2, 5)
        items = aggregate([first, second])
        self.assertEqual(
            [(item["consumer"], item["title"]) for item in items],
            [
                (second, "item 1"),
                (first, "item 0"),
                (first, "item 1"),
                (second, "item 0"),
            ],
        )

    def test_result_is_read_only(self):
        items = aggregate([stamped(generic("https://one.example/feed"), 1)])
        self.assertIsInstance(items, tuple)

    def test_unfetched_consumer(self):
        with self.assertRaises(RuntimeError):
            aggregate([generic("https://one.example/feed")])

    @patch("requests.get", side_effect=fake_get)
    def test_build_feed_end_to_end(self, mock_get):
        items = build_feed([generic(url) for url in FEEDS])
        self.assertEqual(
            [item["title"] for item in items], ["One at T3", "Two at T2", "One at T1"]
        )


if __name__ == "__main__":
    unittest.main()
