import datetime
import threading
import unittest

from survey_analytics.analytics_cache import AnalyticsCache, CacheKey


class _FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestAnalyticsCache(unittest.TestCase):
    def setUp(self):
        self.clock = _FakeClock()
        self.cache = AnalyticsCache(default_ttl_seconds=300, clock=self.clock)
        self.key = CacheKey("t1")

    def test_get_after_put_returns_entry(self):
        result = {"overview": {"total_responses": 3}}
        self.cache.put(self.key, result)

        entry = self.cache.get("t1")
        self.assertIsNotNone(entry)
        self.assertIs(entry.result, result)
        self.assertEqual(entry.ttl_seconds, 300)
        self.assertEqual(entry.key, self.key)
        self.assertEqual(entry.computed_at.tzinfo, datetime.timezone.utc)

    def test_miss_for_unknown_key(self):
        self.assertIsNone(self.cache.get("nope"))

    def test_date_range_is_part_of_the_key(self):
        march = datetime.date(2024, 3, 1)
        self.cache.put(CacheKey("t1", march, None), "march")
        self.assertIsNone(self.cache.get("t1"))
        self.assertEqual(self.cache.get("t1", march).result, "march")
        self.assertIsNone(self.cache.get("t1", march, march))

    def test_entry_expires_after_ttl(self):
        self.cache.put(self.key, "value", ttl_seconds=10)
        self.clock.advance(9)
        self.assertIsNotNone(self.cache.get("t1"))
        self.clock.advance(1)
        self.assertIsNone(self.cache.get("t1"))
        # Expired entries are evicted on read
        self.assertEqual(len(self.cache), 0)

    def test_default_ttl_is_five_minutes(self):
        cache = AnalyticsCache(clock=self.clock)
        self.assertEqual(cache.default_ttl_seconds, 300)
        cache.put(self.key, "value")
        self.clock.advance(299)
        self.assertIsNotNone(cache.get("t1"))
        self.clock.advance(1)
        self.assertIsNone(cache.get("t1"))

    def test_put_replaces_whole_entry(self):
        self.cache.put(self.key, "first")
        self.cache.put(self.key, "second")
        self.assertEqual(self.cache.get("t1").result, "second")
        self.assertEqual(len(self.cache), 1)

    def test_invalidate_drops_all_ranges_of_template(self):
        day = datetime.date(2024, 1, 1)
        self.cache.put(CacheKey("t1"), "all")
        self.cache.put(CacheKey("t1", day, day), "one day")
        self.cache.put(CacheKey("t2"), "other")

        removed = self.cache.invalidate("t1")

        self.assertEqual(removed, 2)
        self.assertIsNone(self.cache.get("t1"))
        self.assertIsNone(self.cache.get("t1", day, day))
        self.assertEqual(self.cache.get("t2").result, "other")

    def test_invalidate_unknown_template_is_noop(self):
        self.assertEqual(self.cache.invalidate("missing"), 0)

    def test_non_positive_ttl_rejected(self):
        with self.assertRaises(ValueError):
            self.cache.put(self.key, "value", ttl_seconds=0)
        with self.assertRaises(ValueError):
            AnalyticsCache(default_ttl_seconds=-1)

    def test_clear(self):
        self.cache.put(CacheKey("t1"), 1)
        self.cache.put(CacheKey("t2"), 2)
        self.cache.clear()
        self.assertEqual(len(self.cache), 0)

    def test_thread_safety_concurrent_puts_and_invalidations(self):
        num_threads = 10
        keys_per_thread = 50
        threads = []

        def worker(thread_id):
            for i in range(keys_per_thread):
                self.cache.put(CacheKey(f"t{thread_id}", datetime.date(2024, 1, 1) + datetime.timedelta(days=i)), i)
                self.cache.get(f"t{thread_id}")
            self.cache.invalidate(f"t{thread_id}" if thread_id % 2 else "unrelated")

        for i in range(num_threads):
            thread = threading.Thread(target=worker, args=(i,))
            threads.append(thread)
            thread.start()

        for thread in threads:
            thread.join()

        # Even-numbered threads did not invalidate their own entries
        self.assertEqual(len(self.cache), (num_threads // 2) * keys_per_thread)


if __name__ == "__main__":
    unittest.main()
