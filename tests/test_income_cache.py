"""
Tests for the income read-path cache.

Tests cover:
- Hit, miss and overwrite
- TTL expiry measured from write time
- Per-key invalidation and full clear
- All-time slot lifecycle
"""

import threading

from moneyview.income.cache import CacheKey, CacheSlot, IncomeCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


KEY = CacheKey(user_id="user-1", year=2025)
OTHER_YEAR = CacheKey(user_id="user-1", year=2024)
OTHER_USER = CacheKey(user_id="user-2", year=2025)


class TestCacheBasics:
    def test_miss_when_empty(self):
        assert IncomeCache().get(KEY, CacheSlot.ENTRIES) is None

    def test_set_then_get(self):
        cache = IncomeCache()
        cache.set(KEY, CacheSlot.ENTRIES, ["a"])
        assert cache.get(KEY, CacheSlot.ENTRIES) == ["a"]

    def test_slots_are_independent(self):
        cache = IncomeCache()
        cache.set(KEY, CacheSlot.MONTHLY_STATS, "monthly")
        assert cache.get(KEY, CacheSlot.YEARLY_STATS) is None
        assert cache.get(KEY, CacheSlot.ENTRIES) is None

    def test_overwrite_is_last_write_wins(self):
        cache = IncomeCache()
        cache.set(KEY, CacheSlot.ENTRIES, "old")
        cache.set(KEY, CacheSlot.ENTRIES, "new")
        assert cache.get(KEY, CacheSlot.ENTRIES) == "new"

    def test_keys_are_scoped_by_user_and_year(self):
        cache = IncomeCache()
        cache.set(KEY, CacheSlot.ENTRIES, "mine")
        assert cache.get(OTHER_YEAR, CacheSlot.ENTRIES) is None
        assert cache.get(OTHER_USER, CacheSlot.ENTRIES) is None


class TestCacheTTL:
    def test_fresh_just_before_ttl(self):
        clock = FakeClock()
        cache = IncomeCache(ttl_seconds=300, clock=clock)
        cache.set(KEY, CacheSlot.ENTRIES, "v")

        clock.advance(299.9)

        assert cache.get(KEY, CacheSlot.ENTRIES) == "v"

    def test_expired_at_ttl(self):
        clock = FakeClock()
        cache = IncomeCache(ttl_seconds=300, clock=clock)
        cache.set(KEY, CacheSlot.ENTRIES, "v")

        clock.advance(300)

        assert cache.get(KEY, CacheSlot.ENTRIES) is None

    def test_overwrite_resets_ttl(self):
        clock = FakeClock()
        cache = IncomeCache(ttl_seconds=300, clock=clock)
        cache.set(KEY, CacheSlot.ENTRIES, "v1")
        clock.advance(200)
        cache.set(KEY, CacheSlot.ENTRIES, "v2")
        clock.advance(200)

        assert cache.get(KEY, CacheSlot.ENTRIES) == "v2"

    def test_all_time_slot_expires(self):
        clock = FakeClock()
        cache = IncomeCache(ttl_seconds=60, clock=clock)
        cache.set_all_time("user-1", "totals")
        assert cache.get_all_time("user-1") == "totals"

        clock.advance(61)

        assert cache.get_all_time("user-1") is None


class TestCacheInvalidation:
    def test_invalidate_drops_every_slot_for_key(self):
        cache = IncomeCache()
        for slot in CacheSlot:
            cache.set(KEY, slot, slot.value)

        cache.invalidate(KEY)

        assert all(cache.get(KEY, slot) is None for slot in CacheSlot)

    def test_invalidate_keeps_other_keys(self):
        cache = IncomeCache()
        cache.set(OTHER_YEAR, CacheSlot.ENTRIES, "2024")
        cache.set(OTHER_USER, CacheSlot.ENTRIES, "theirs")

        cache.invalidate(KEY)

        assert cache.get(OTHER_YEAR, CacheSlot.ENTRIES) == "2024"
        assert cache.get(OTHER_USER, CacheSlot.ENTRIES) == "theirs"

    def test_invalidate_drops_users_all_time_stats(self):
        cache = IncomeCache()
        cache.set_all_time("user-1", "mine")
        cache.set_all_time("user-2", "theirs")

        cache.invalidate(KEY)

        assert cache.get_all_time("user-1") is None
        assert cache.get_all_time("user-2") == "theirs"

    def test_clear_drops_everything(self):
        cache = IncomeCache()
        cache.set(KEY, CacheSlot.ENTRIES, "a")
        cache.set(OTHER_USER, CacheSlot.YEARLY_STATS, "b")
        cache.set_all_time("user-1", "c")

        cache.clear()

        assert cache.get(KEY, CacheSlot.ENTRIES) is None
        assert cache.get(OTHER_USER, CacheSlot.YEARLY_STATS) is None
        assert cache.get_all_time("user-1") is None


class TestCacheThreadSafety:
    def test_concurrent_writers(self):
        cache = IncomeCache()
        keys = [CacheKey(user_id=f"u{i}", year=2025) for i in range(20)]

        def writer(key):
            for n in range(100):
                cache.set(key, CacheSlot.ENTRIES, n)
                cache.get(key, CacheSlot.ENTRIES)

        threads = [threading.Thread(target=writer, args=(k,)) for k in keys]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(cache.get(k, CacheSlot.ENTRIES) == 99 for k in keys)
