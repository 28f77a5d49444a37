"""Tests for the per-key debouncer."""

from __future__ import annotations

import threading
import time

from batonsql.service.debounce import Debouncer


class TestDebouncer:
    def test_burst_runs_once_with_last_arguments(self) -> None:
        calls: list[str] = []
        done = threading.Event()

        def record(value: str) -> None:
            calls.append(value)
            done.set()

        debouncer = Debouncer(delay_ms=20)
        for value in ("a", "b", "c"):
            debouncer.schedule("doc", record, value)
        assert done.wait(timeout=5)
        time.sleep(0.1)
        assert calls == ["c"]
        assert debouncer.pending == 0

    def test_keys_are_independent(self) -> None:
        calls: list[str] = []
        lock = threading.Lock()

        def record(value: str) -> None:
            with lock:
                calls.append(value)

        debouncer = Debouncer(delay_ms=20)
        debouncer.schedule("one", record, "one")
        debouncer.schedule("two", record, "two")
        time.sleep(0.3)
        assert sorted(calls) == ["one", "two"]

    def test_cancel(self) -> None:
        calls: list[str] = []
        debouncer = Debouncer(delay_ms=50)
        debouncer.schedule("doc", calls.append, "x")
        assert debouncer.pending == 1
        assert debouncer.cancel("doc")
        assert not debouncer.cancel("doc")
        time.sleep(0.15)
        assert calls == []

    def test_cancel_all(self) -> None:
        calls: list[str] = []
        debouncer = Debouncer(delay_ms=50)
        debouncer.schedule("a", calls.append, "a")
        debouncer.schedule("b", calls.append, "b")
        debouncer.cancel_all()
        assert debouncer.pending == 0
        time.sleep(0.15)
        assert calls == []

    def test_failing_callable_is_logged(self, caplog) -> None:
        done = threading.Event()

        def explode() -> None:
            done.set()
            raise RuntimeError("boom")

        debouncer = Debouncer(delay_ms=0)
        debouncer.schedule("doc", explode)
        assert done.wait(timeout=5)
        time.sleep(0.05)
        assert "Debounced call for doc failed" in caplog.text
