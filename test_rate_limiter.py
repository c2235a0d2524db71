#!/usr/bin/env python3
"""
test_rate_limiter.py - Test the action rate limiter and its store
"""

import sys
import hashlib

from config import configure, reset_configuration
from rate_limiter import MemoryStore, RateLimiter, RateLimitExceeded


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class BrokenStore:
    """Store whose every operation fails."""

    def read(self, key):
        raise ConnectionError("store offline")

    def increment(self, key, amount=1, expires_in=None):
        raise ConnectionError("store offline")


def test_memory_store_expiry():
    """Test counters expire with the window set on first increment."""
    clock = FakeClock()
    store = MemoryStore(clock=clock)

    assert store.increment('k', expires_in=60) == 1
    clock.now += 30
    assert store.increment('k', expires_in=60) == 2
    assert store.ttl('k') == 30

    clock.now += 31
    assert store.read('k') is None
    assert store.ttl('k') is None
    assert store.increment('k', expires_in=60) == 1

    store.write('other', 'x')
    assert store.read('other') == 'x'
    assert store.ttl('other') is None
    store.delete('other')
    assert store.read('other') is None
    print("✅ MemoryStore expiry")


def test_memory_store_sweeps_abandoned_keys():
    """Test that keys which are never read again are dropped by the periodic sweep."""
    clock = FakeClock()
    store = MemoryStore(clock=clock, sweep_every=10)

    store.write('pinned', 'x')
    for n in range(9):
        store.increment(f"old-{n}", expires_in=60)
    assert len(store) == 10

    clock.now += 61
    for n in range(5):
        store.increment(f"new-{n}", expires_in=60)
    assert len(store) == 15

    for n in range(5, 10):
        store.increment(f"new-{n}", expires_in=60)
    assert len(store) == 11
    assert store.read('pinned') == 'x'
    assert store.read('old-0') is None
    print("✅ MemoryStore sweeps expired keys")


def test_cache_key_format():
    limiter = RateLimiter()
    digest = hashlib.sha256(b'10.0.0.1').hexdigest()[:17]

    assert limiter.cache_key('10.0.0.1') == f"swift_ui:rate_limit:{digest}"
    assert limiter.cache_key('10.0.0.1', 'preview') == f"swift_ui:rate_limit:{digest}:preview"
    assert '10.0.0.1' not in limiter.cache_key('10.0.0.1')
    print("✅ Cache key format")


def test_allow_and_record():
    """Test the limiter allows up to the threshold then blocks."""
    reset_configuration()
    limiter = RateLimiter(threshold=3, window=60)

    for _ in range(3):
        assert limiter.allow('client')
        assert limiter.record('client')

    assert not limiter.allow('client')
    assert limiter.current_count('client') == 3
    assert limiter.remaining('client') == 0

    try:
        limiter.record('client')
        assert False, "Recording past the threshold should raise"
    except RateLimitExceeded as e:
        assert "4 actions in 60 seconds" in str(e)

    assert limiter.remaining('client') == 0, "remaining never goes negative"
    assert limiter.allow('other-client')
    print("✅ allow() and record()")


def test_actions_counted_separately():
    limiter = RateLimiter(threshold=1, window=60)

    limiter.record('client', 'preview')
    assert not limiter.allow('client', 'preview')
    assert limiter.allow('client', 'validate')
    assert limiter.allow('client')
    print("✅ Actions counted separately")


def test_reset_and_reset_in():
    clock = FakeClock()
    limiter = RateLimiter(store=MemoryStore(clock=clock), threshold=2, window=60)

    assert limiter.reset_in('client') == 60
    limiter.record('client')
    clock.now += 15
    assert limiter.reset_in('client') == 45

    limiter.reset('client')
    assert limiter.current_count('client') == 0
    assert limiter.remaining('client') == 2
    print("✅ reset() and reset_in()")


def test_defaults_follow_configuration():
    reset_configuration()
    try:
        configure(rate_limit_threshold=4, rate_limit_window=15)
        limiter = RateLimiter()
        assert limiter.threshold == 4
        assert limiter.window == 15

        configure(rate_limit_actions=False)
        for _ in range(10):
            assert limiter.allow('client')
            assert limiter.record('client')
        assert limiter.current_count('client') == 0, "Disabled limiter records nothing"
    finally:
        reset_configuration()
    print("✅ Defaults follow configuration")


def test_store_errors_fail_open():
    reset_configuration()
    limiter = RateLimiter(store=BrokenStore(), threshold=1)

    assert limiter.allow('client')
    assert limiter.record('client') is True
    print("✅ Store errors fail open")


def run_all_tests():
    """Run all rate limiter tests."""
    print("\n" + "="*60)
    print("🧪 Testing Rate Limiter")
    print("="*60 + "\n")

    tests = [
        test_memory_store_expiry,
        test_memory_store_sweeps_abandoned_keys,
        test_cache_key_format,
        test_allow_and_record,
        test_actions_counted_separately,
        test_reset_and_reset_in,
        test_defaults_follow_configuration,
        test_store_errors_fail_open,
    ]

    passed = 0
    failed = 0

    for test in tests:
        try:
            test()
            passed += 1
        except AssertionError as e:
            print(f"❌ {test.__name__} FAILED: {e}")
            failed += 1
        except Exception as e:
            print(f"❌ {test.__name__} ERROR: {e}")
            failed += 1

    print("\n" + "="*60)
    print(f"📊 Results: {passed} passed, {failed} failed")
    print("="*60 + "\n")

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
