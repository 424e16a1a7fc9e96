import os
import tempfile
import threading
import time
import unittest
from pathlib import Path

from inventory_ledger.core.errors import LockAcquisitionError
from inventory_ledger.core.locks import FileMutex, LockManager


class FileMutexTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.lock_dir = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def _mutex(self, **options):
        options.setdefault("retry_delay_ms", 5)
        options.setdefault("max_retries", 400)
        return FileMutex("stock_transaction", self.lock_dir, **options)

    def test_run_exclusive_returns_result_and_releases(self):
        mutex = self._mutex()
        self.assertEqual(mutex.run_exclusive(lambda: 42), 42)
        self.assertFalse(mutex.lock_path.exists())
        self.assertFalse(mutex.held)

    def test_releases_when_task_raises(self):
        mutex = self._mutex()

        def boom():
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            mutex.run_exclusive(boom)
        self.assertFalse(mutex.lock_path.exists())

    def test_threads_never_overlap(self):
        # Separate instances share only the lock directory, like processes do.
        state = {"active": 0, "max_active": 0, "runs": 0}
        guard = threading.Lock()

        def task():
            with guard:
                state["active"] += 1
                state["max_active"] = max(state["max_active"], state["active"])
            time.sleep(0.005)
            with guard:
                state["active"] -= 1
                state["runs"] += 1

        def worker():
            mutex = self._mutex()
            for _ in range(3):
                mutex.run_exclusive(task)

        threads = [threading.Thread(target=worker) for _ in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(state["runs"], 18)
        self.assertEqual(state["max_active"], 1)

    def test_nested_calls_reuse_the_held_lock(self):
        mutex = self._mutex(max_retries=1)

        def inner():
            self.assertTrue(mutex.held)
            return "inner"

        result = mutex.run_exclusive(lambda: mutex.run_exclusive(inner))
        self.assertEqual(result, "inner")
        self.assertFalse(mutex.lock_path.exists())

    def test_gives_up_after_max_retries(self):
        mutex = self._mutex(max_retries=3, retry_delay_ms=1, stale_timeout_ms=60000)
        os.mkdir(mutex.lock_path)

        with self.assertRaises(LockAcquisitionError) as ctx:
            mutex.run_exclusive(lambda: None)
        self.assertTrue(ctx.exception.retryable)
        self.assertEqual(ctx.exception.status_code, 503)
        self.assertTrue(mutex.lock_path.exists())

    def test_reclaims_stale_lock(self):
        mutex = self._mutex(max_retries=3, stale_timeout_ms=1000)
        os.mkdir(mutex.lock_path)
        old = time.time() - 10
        os.utime(mutex.lock_path, (old, old))

        with self.assertLogs("inventory_ledger.core.locks", level="WARNING"):
            self.assertEqual(mutex.run_exclusive(lambda: "ran"), "ran")
        self.assertFalse(mutex.lock_path.exists())

    def test_stale_takeover_keeps_a_lock_renewed_by_another_waiter(self):
        first = self._mutex(stale_timeout_ms=1000)
        second = self._mutex(stale_timeout_ms=1000)
        os.mkdir(first.lock_path)
        old = time.time() - 10
        os.utime(first.lock_path, (old, old))

        # Both waiters judge the same directory stale before either acts.
        seen_by_first = first._stale_snapshot()
        seen_by_second = second._stale_snapshot()
        self.assertIsNotNone(seen_by_first)
        self.assertIsNotNone(seen_by_second)

        self.assertTrue(first._reclaim_stale(seen_by_first))
        os.mkdir(first.lock_path)

        with self.assertLogs("inventory_ledger.core.locks", level="INFO"):
            self.assertFalse(second._reclaim_stale(seen_by_second))
        self.assertTrue(first.lock_path.exists())
        self.assertFalse(first.is_stale())
        self.assertEqual(sorted(os.listdir(self.lock_dir)), [first.lock_path.name])

    def test_lock_status_reflects_holder(self):
        mutex = self._mutex(stale_timeout_ms=1000)
        self.assertFalse(mutex.locked)
        self.assertTrue(mutex.run_exclusive(lambda: mutex.locked))
        os.mkdir(mutex.lock_path)
        old = time.time() - 10
        os.utime(mutex.lock_path, (old, old))
        self.assertTrue(mutex.locked)
        self.assertTrue(mutex.is_stale())


class LockManagerTest(unittest.TestCase):
    def test_returns_one_mutex_per_name(self):
        with tempfile.TemporaryDirectory() as tmp:
            manager = LockManager(tmp, max_retries=2)
            self.assertIs(manager.get("stock"), manager.get("stock"))
            self.assertIsNot(manager.get("stock"), manager.get("catalog"))
            self.assertEqual(manager.run_exclusive("stock", lambda: "ok"), "ok")
            self.assertEqual(manager.names(), ["catalog", "stock"])


if __name__ == "__main__":
    unittest.main()
