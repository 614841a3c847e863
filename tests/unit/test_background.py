"""
Unit tests for the fire-and-forget writer.

Run: pytest tests/unit/test_background.py -v
"""

import threading

from kisokyu.delivery.background import BackgroundWriter


def _boom():
    raise RuntimeError("write failed")


class TestBackgroundWriter:
    """Dispatch, failure accounting and shutdown."""

    def test_inline_runs_immediately(self):
        calls = []
        w = BackgroundWriter(inline=True)

        w.submit("append", calls.append, 1)

        assert calls == [1]
        assert w.status.succeeded == 1

    def test_failure_is_counted_not_raised(self):
        w = BackgroundWriter(inline=True)

        assert w.submit("boom", _boom) is True
        assert w.status.failed == 1
        assert w.status.last_error == "write failed"

    def test_threaded_writes_run_off_caller_thread(self):
        seen = []
        w = BackgroundWriter()

        w.submit("record", lambda: seen.append(threading.current_thread().name))
        w.flush(timeout=5)
        w.close()

        assert len(seen) == 1
        assert seen[0] != threading.current_thread().name

    def test_writes_keep_submission_order(self):
        order = []
        w = BackgroundWriter()
        for i in range(20):
            w.submit("append", order.append, i)
        w.close()

        assert order == list(range(20))

    def test_submit_after_close_is_dropped(self):
        calls = []
        w = BackgroundWriter(inline=True)
        w.close()

        assert w.submit("append", calls.append, 1) is False
        assert calls == []
