from __future__ import annotations

import threading
import unittest

from gatekeeper.auth import RateLimiter, client_identifier


class RateLimiterTests(unittest.TestCase):
    def setUp(self) -> None:
        self.limiter = RateLimiter()

    def test_request_after_max_is_rejected(self) -> None:
        results = [self.limiter.check_and_record("1.2.3.4", "login", 5, 60, now=100.0 + i) for i in range(6)]
        self.assertEqual(results, [False] * 5 + [True])

    def test_window_elapsing_resets_count(self) -> None:
        for i in range(6):
            self.limiter.check_and_record("1.2.3.4", "login", 5, 60, now=100.0 + i)
        self.assertTrue(self.limiter.check_and_record("1.2.3.4", "login", 5, 60, now=160.0))
        self.assertFalse(self.limiter.check_and_record("1.2.3.4", "login", 5, 60, now=160.5))
        self.assertFalse(self.limiter.check_and_record("1.2.3.4", "login", 5, 60, now=161.0))

    def test_window_start_does_not_move_on_increment(self) -> None:
        self.limiter.check_and_record("ip", "login", 2, 10, now=0.0)
        self.limiter.check_and_record("ip", "login", 2, 10, now=9.0)
        self.assertTrue(self.limiter.check_and_record("ip", "login", 2, 10, now=10.0))
        self.assertFalse(self.limiter.check_and_record("ip", "login", 2, 10, now=10.5))

    def test_burst_across_boundary_is_allowed(self) -> None:
        early = [self.limiter.check_and_record("ip", "register", 3, 60, now=0.0) for _ in range(3)]
        late = [self.limiter.check_and_record("ip", "register", 3, 60, now=61.0) for _ in range(3)]
        self.assertEqual(early + late, [False] * 6)

    def test_keys_are_independent(self) -> None:
        for _ in range(3):
            self.limiter.check_and_record("a", "login", 2, 60, now=0.0)
        self.assertFalse(self.limiter.check_and_record("b", "login", 2, 60, now=0.0))
        self.assertFalse(self.limiter.check_and_record("a", "register", 2, 60, now=0.0))
        self.assertTrue(self.limiter.check_and_record("a", "login", 2, 60, now=0.0))

    def test_reset_clears_matching_counters(self) -> None:
        for _ in range(3):
            self.limiter.check_and_record("a", "login", 2, 60, now=0.0)
            self.limiter.check_and_record("b", "login", 2, 60, now=0.0)
        self.limiter.reset(client_id="a")
        self.assertEqual(len(self.limiter), 1)
        self.assertFalse(self.limiter.check_and_record("a", "login", 2, 60, now=1.0))
        self.limiter.reset()
        self.assertEqual(len(self.limiter), 0)

    def test_concurrent_increments_are_not_lost(self) -> None:
        results: list[bool] = []
        lock = threading.Lock()

        def hit() -> None:
            for _ in range(50):
                exceeded = self.limiter.check_and_record("ip", "login", 100, 3600, now=1.0)
                with lock:
                    results.append(exceeded)

        threads = [threading.Thread(target=hit) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        self.assertEqual(results.count(False), 100)
        self.assertEqual(results.count(True), 300)


class ClientIdentifierTests(unittest.TestCase):
    def test_prefers_forwarded_for(self) -> None:
        headers = {"x-forwarded-for": "10.0.0.1", "x-real-ip": "10.0.0.2"}
        self.assertEqual(client_identifier(headers), "10.0.0.1")

    def test_falls_back_to_real_ip(self) -> None:
        self.assertEqual(client_identifier({"x-real-ip": "10.0.0.2"}), "10.0.0.2")

    def test_falls_back_to_shared_unknown_bucket(self) -> None:
        self.assertEqual(client_identifier({}), "unknown")
        self.assertEqual(client_identifier({"x-forwarded-for": ""}), "unknown")


if __name__ == "__main__":
    unittest.main()
