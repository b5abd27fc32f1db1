"""Fixed-window rate limiter.

Invariants:
    - At most ``requests`` hits are allowed per (bucket, key) per window
    - Windows reset once ``window_seconds`` have passed
    - Concurrent hits never over-admit
"""

import threading

from tixit.core.rate_limit import Limit, RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _limiter(clock, requests=5, window=600):
    return RateLimiter({"ticket_create": Limit(requests, window), "other": Limit(1, 60)}, clock=clock)


def test_sixth_hit_in_window_is_rejected():
    clock = FakeClock()
    limiter = _limiter(clock)
    decisions = [limiter.hit("ticket_create", "1.2.3.4") for _ in range(6)]
    assert [d.allowed for d in decisions] == [True] * 5 + [False]
    assert decisions[4].remaining == 0
    assert decisions[5].retry_after == 600


def test_retry_after_counts_down():
    clock = FakeClock()
    limiter = _limiter(clock, requests=1)
    limiter.hit("ticket_create", "a")
    clock.now += 450
    assert limiter.hit("ticket_create", "a").retry_after == 150


def test_window_resets():
    clock = FakeClock()
    limiter = _limiter(clock, requests=1)
    assert limiter.hit("ticket_create", "a").allowed
    assert not limiter.hit("ticket_create", "a").allowed
    clock.now += 600
    assert limiter.hit("ticket_create", "a").allowed


def test_keys_and_buckets_are_independent():
    clock = FakeClock()
    limiter = _limiter(clock, requests=1)
    assert limiter.hit("ticket_create", "a").allowed
    assert limiter.hit("ticket_create", "b").allowed
    assert limiter.hit("other", "a").allowed
    assert not limiter.hit("ticket_create", "a").allowed


def test_expired_windows_are_evicted():
    clock = FakeClock()
    limiter = _limiter(clock)
    for i in range(10):
        limiter.hit("ticket_create", f"client-{i}")
    clock.now += 601
    limiter.hit("ticket_create", "late")
    assert list(limiter._windows) == [("ticket_create", "late")]


def test_sweep_runs_at_most_once_per_shortest_window(monkeypatch):
    clock = FakeClock()
    limiter = _limiter(clock)
    sweeps = []
    real_evict = limiter._evict_expired
    monkeypatch.setattr(limiter, "_evict_expired", lambda now: sweeps.append(now) or real_evict(now))

    for i in range(100):
        limiter.hit("ticket_create", f"client-{i}")
    assert sweeps == [1000.0]

    clock.now += 59
    limiter.hit("ticket_create", "client-0")
    assert len(sweeps) == 1
    clock.now += 1
    limiter.hit("ticket_create", "client-0")
    assert sweeps == [1000.0, 1060.0]


def test_reset_clears_counters():
    limiter = _limiter(FakeClock(), requests=1)
    limiter.hit("ticket_create", "a")
    limiter.reset()
    assert limiter.hit("ticket_create", "a").allowed


def test_concurrent_hits_do_not_over_admit():
    limiter = RateLimiter({"auth": Limit(20, 900)})
    allowed = []
    lock = threading.Lock()
    barrier = threading.Barrier(50)

    def worker():
        barrier.wait()
        ok = limiter.hit("auth", "1.2.3.4").allowed
        with lock:
            allowed.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert allowed.count(True) == 20
    assert allowed.count(False) == 30
