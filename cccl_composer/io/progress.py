"""
Progress reporter — one indicator per in-flight cell.

Interactive mode stacks one tqdm bar per cell (fixed ``position``); each
bar has exactly one writer, the Cell Runner of its cell, and tqdm
serialises terminal writes internally.  Plain mode (no TTY, or forced)
draws nothing and logs a status line per quarter of progress instead.
"""
import logging
import sys
import threading
from contextlib import ExitStack
from typing import List, Optional

from tqdm import tqdm
from tqdm.contrib.logging import logging_redirect_tqdm

from cccl_composer.core.cells import BuildCell

logger = logging.getLogger(__name__)

BAR_FORMAT = "[{elapsed}] {bar:40} {n_fmt:>7}/{total_fmt:7} {desc}"

# Plain mode logs when progress crosses each of these fractions
PLAIN_STEPS = (0.25, 0.5, 0.75)


class CellProgress:
    """Progress sink for a single cell."""

    def __init__(self, label: str, bar: Optional[tqdm] = None):
        self.label = label
        self.bar = bar
        self.total = 0
        self.current = 0
        self.finished = False
        self._next_step = 0

    def update(self, total: int, current: int) -> None:
        self.total = total
        self.current = current

        if self.bar is not None:
            if self.bar.total != total:
                self.bar.total = total
            self.bar.n = current
            self.bar.refresh()
            return

        if total <= 0:
            return
        crossed = self._next_step
        while (
            crossed < len(PLAIN_STEPS)
            and current / total >= PLAIN_STEPS[crossed]
        ):
            crossed += 1
        if crossed == self._next_step:
            return

        # One line per update, for the highest step reached
        self._next_step = crossed
        logger.info(
            "%s: %d%% (%d/%d)",
            self.label,
            int(PLAIN_STEPS[crossed - 1] * 100),
            current,
            total,
        )

    def finish(self) -> None:
        self.finished = True
        if self.bar is not None:
            if self.bar.total:
                self.bar.n = self.bar.total
            self.bar.refresh()
        else:
            logger.info("%s: done", self.label)


class ProgressReporter:
    """
    Owns the indicators of one sweep.

    Use as a context manager; leaving it clears every bar from the screen.
    """

    def __init__(self, plain: Optional[bool] = None):
        if plain is None:
            plain = not sys.stderr.isatty()
        self.plain = plain
        self.cells: List[CellProgress] = []
        self._lock = threading.Lock()
        self._stack = ExitStack()

    def __enter__(self) -> "ProgressReporter":
        if not self.plain:
            self._stack.enter_context(logging_redirect_tqdm())
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def add(self, cell: BuildCell) -> CellProgress:
        """Create the indicator for *cell*; call before the cell starts."""
        with self._lock:
            bar = None
            if not self.plain:
                bar = tqdm(
                    total=0,
                    desc=cell.label,
                    position=len(self.cells),
                    leave=False,
                    bar_format=BAR_FORMAT,
                    ascii="-#",
                    dynamic_ncols=True,
                )
            progress = CellProgress(cell.label, bar)
            self.cells.append(progress)
            return progress

    def close(self) -> None:
        with self._lock:
            for progress in self.cells:
                if progress.bar is not None:
                    progress.bar.close()
                    progress.bar = None
        self._stack.close()
