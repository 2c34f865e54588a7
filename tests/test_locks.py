"""Tests for the read-write lock."""

import threading
import time

from matchcore.infra.locks import ReadWriteLock


class TestReadWriteLock:
    def test_readers_share(self):
        lock = ReadWriteLock()
        inside = threading.Barrier(3, timeout=2)

        def reader():
            with lock.read_locked():
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=5)

        assert not any(t.is_alive() for t in threads)

    def test_writer_excludes_readers(self):
        lock = ReadWriteLock()
        order: list[str] = []
        lock.acquire_write()

        def reader():
            with lock.read_locked():
                order.append("read")

        t = threading.Thread(target=reader)
        t.start()
        time.sleep(0.05)
        order.append("write done")
        lock.release_write()
        t.join(timeout=2)

        assert order == ["write done", "read"]

    def test_released_on_exception(self):
        lock = ReadWriteLock()
        try:
            with lock.write_locked():
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        acquired = threading.Event()

        def writer():
            with lock.write_locked():
                acquired.set()

        t = threading.Thread(target=writer)
        t.start()
        t.join(timeout=2)
        assert acquired.is_set()
