"""
Tests for the bounded session pool.
"""

import threading
import time
from contextlib import ExitStack
from pathlib import Path

import pytest
from conftest import make_mbtiles, png_tile
from sqlalchemy import text

from mbtileset.database import SQLiteEngine
from mbtileset.exceptions import CancelledError, ClosedHandleError
from mbtileset.pool import Cancellation, SessionPool

SLOW_QUERY = text(
    "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c WHERE x < 500000000) "
    "SELECT count(*) FROM c"
)


@pytest.fixture
def pool(tmp_path: Path):
    path = make_mbtiles(tmp_path / "pool.mbtiles", tiles={(0, 0, 0): png_tile()})
    engine = SQLiteEngine()
    pool = engine.create_pool(engine.file_uri(path), capacity=2)
    yield pool
    pool.close()


def wait_for(condition, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


class TestSessionPool:
    def test_query(self, pool: SessionPool) -> None:
        assert pool.query(text("SELECT count(*) FROM tiles")) == [(1,)]

    def test_capacity_must_be_positive(self, pool: SessionPool) -> None:
        with pytest.raises(ValueError):
            SessionPool(engine=pool.engine, capacity=0)

    def test_read_only(self, pool: SessionPool) -> None:
        from sqlalchemy.exc import OperationalError

        with pytest.raises(OperationalError):
            pool.query(text("DELETE FROM tiles"))

        assert pool.query(text("SELECT count(*) FROM tiles")) == [(1,)]

    def test_excess_callers_wait(self, pool: SessionPool) -> None:
        results = []

        with ExitStack() as stack:
            for _ in range(pool.capacity):
                stack.enter_context(pool.session())

            worker = threading.Thread(
                target=lambda: results.append(pool.query(text("SELECT 1")))
            )
            worker.start()

            assert wait_for(lambda: pool.waiting == 1)
            assert results == []

        worker.join(timeout=5)

        assert results == [[(1,)]]
        assert pool.total_waits == 1
        assert pool.waiting == 0

    def test_sessions_released_after_errors(self, pool: SessionPool) -> None:
        for _ in range(pool.capacity + 1):
            with pytest.raises(Exception):
                pool.query(text("SELECT * FROM missing_table"))

        # All sessions came back, so this does not wait.
        assert pool.query(text("SELECT 1")) == [(1,)]
        assert pool.total_waits == 0

    def test_cancel_while_waiting(self, pool: SessionPool) -> None:
        cancel = Cancellation()
        errors = []

        def worker():
            try:
                pool.query(text("SELECT 1"), cancel=cancel)
            except CancelledError as e:
                errors.append(e)

        with ExitStack() as stack:
            for _ in range(pool.capacity):
                stack.enter_context(pool.session())

            thread = threading.Thread(target=worker)
            thread.start()

            assert wait_for(lambda: pool.waiting == 1)
            cancel.cancel()
            thread.join(timeout=5)

        assert len(errors) == 1

    def test_deadline_while_waiting(self, pool: SessionPool) -> None:
        with ExitStack() as stack:
            for _ in range(pool.capacity):
                stack.enter_context(pool.session())

            with pytest.raises(CancelledError):
                pool.query(text("SELECT 1"), cancel=Cancellation(timeout=0.1))

    def test_deadline_interrupts_query(self, pool: SessionPool) -> None:
        start = time.monotonic()

        with pytest.raises(CancelledError):
            pool.query(SLOW_QUERY, cancel=Cancellation(timeout=0.2))

        assert time.monotonic() - start < 5

        # The session is usable again afterwards.
        assert pool.query(text("SELECT 1"), cancel=Cancellation()) == [(1,)]

    def test_already_cancelled(self, pool: SessionPool) -> None:
        cancel = Cancellation()
        cancel.cancel()

        with pytest.raises(CancelledError):
            pool.query(text("SELECT 1"), cancel=cancel)

    def test_closed(self, pool: SessionPool) -> None:
        pool.close()

        assert pool.closed

        with pytest.raises(ClosedHandleError):
            pool.query(text("SELECT 1"))

        # Closing twice is fine.
        pool.close()


class TestCancellation:
    def test_no_deadline(self) -> None:
        cancel = Cancellation()

        assert not cancel.cancelled
        assert cancel.remaining() is None

        cancel.cancel()

        assert cancel.cancelled

    def test_deadline(self) -> None:
        cancel = Cancellation(timeout=0.05)

        assert cancel.remaining() > 0

        time.sleep(0.1)

        assert cancel.cancelled
        assert cancel.remaining() == 0.0
        with pytest.raises(CancelledError):
            cancel.check()
