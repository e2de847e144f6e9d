"""Tests for cccl_composer.io.progress — per-cell indicators."""
import logging

from cccl_composer.core.cells import BuildCell
from cccl_composer.io.progress import ProgressReporter


def _cell(compiler):
    return BuildCell("debug", "12.2", compiler, "17", "/usr/bin/c++", "/usr/local/cuda")


class TestPlainMode:

    def test_quarter_steps_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="cccl_composer.io.progress"):
            with ProgressReporter(plain=True) as reporter:
                progress = reporter.add(_cell("gcc-12"))
                progress.update(100, 10)
                progress.update(100, 30)
                progress.update(100, 100)
                progress.finish()

        messages = [r.getMessage() for r in caplog.records]
        assert messages == [
            "debug/12.2/gcc-12/cpp.17: 25% (30/100)",
            "debug/12.2/gcc-12/cpp.17: 75% (100/100)",
            "debug/12.2/gcc-12/cpp.17: done",
        ]
        assert progress.bar is None
        assert (progress.total, progress.current) == (100, 100)

    def test_jump_logs_highest_step_once(self, caplog):
        with caplog.at_level(logging.INFO, logger="cccl_composer.io.progress"):
            with ProgressReporter(plain=True) as reporter:
                progress = reporter.add(_cell("gcc-12"))
                progress.update(8, 5)
                progress.update(8, 5)
                progress.update(8, 8)

        messages = [r.getMessage() for r in caplog.records]
        assert messages == [
            "debug/12.2/gcc-12/cpp.17: 50% (5/8)",
            "debug/12.2/gcc-12/cpp.17: 75% (8/8)",
        ]

    def test_zero_total_is_inert(self):
        with ProgressReporter(plain=True) as reporter:
            progress = reporter.add(_cell("gcc-12"))
            progress.update(0, 0)
        assert progress.finished is False


class TestInteractiveMode:

    def test_one_bar_per_cell(self):
        reporter = ProgressReporter(plain=False)
        with reporter:
            a = reporter.add(_cell("gcc-12"))
            b = reporter.add(_cell("clang-16"))
            a.update(10, 4)
            b.update(20, 20)
            b.finish()

            assert a.bar is not None and b.bar is not None
            assert (a.bar.total, a.bar.n) == (10, 4)
            assert b.bar.n == 20

        # cleared on exit
        assert a.bar is None and b.bar is None
        assert len(reporter.cells) == 2
