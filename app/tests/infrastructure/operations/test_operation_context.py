import threading
import time

import pytest

from infrastructure.operations import OperationCancelledError, OperationContext


@pytest.mark.unit
class TestOperationContext:
    def test_background_has_no_deadline(self):
        ctx = OperationContext.background()

        assert ctx.deadline is None
        assert ctx.remaining() is None
        assert ctx.done is False
        ctx.check()

    def test_with_timeout_sets_deadline(self):
        ctx = OperationContext.with_timeout(10)

        assert 0 < ctx.remaining() <= 10
        assert ctx.expired is False

    def test_cancel_marks_done(self):
        ctx = OperationContext.background()
        ctx.cancel()

        assert ctx.cancelled is True
        assert ctx.done is True
        with pytest.raises(OperationCancelledError) as exc:
            ctx.check()
        assert exc.value.error_code == "CANCELLED"

    def test_expired_deadline(self):
        ctx = OperationContext.with_timeout(0)

        assert ctx.expired is True
        assert ctx.remaining() == 0.0
        with pytest.raises(OperationCancelledError) as exc:
            ctx.check()
        assert exc.value.error_code == "DEADLINE_EXCEEDED"

    def test_wait_full_delay(self):
        ctx = OperationContext.background()

        assert ctx.wait(0) is True

    def test_wait_stops_at_deadline(self):
        ctx = OperationContext.with_timeout(0.01)

        started = time.monotonic()
        assert ctx.wait(5) is False
        assert time.monotonic() - started < 1

    def test_wait_wakes_on_cancel(self):
        ctx = OperationContext.background()
        timer = threading.Timer(0.01, ctx.cancel)
        timer.start()

        started = time.monotonic()
        try:
            assert ctx.wait(5) is False
        finally:
            timer.cancel()
        assert time.monotonic() - started < 1
