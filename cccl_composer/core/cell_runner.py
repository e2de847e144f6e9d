"""
Cell runner — configure and build one cell, streaming build progress.

Per cell:
  1. Create the build directory (reused if present).
  2. Configure synchronously; non-zero exit → ConfigureFailed.
  3. Spawn the build with stdout piped and read it line by line; every
     ``[current/total]`` marker is forwarded to the cell's progress sink.
  4. Between reads, poll the child's exit status without blocking; once
     output is drained, sleep ``poll_interval`` between polls.
  5. Report success iff the build exited 0.

The runner returns a bool and never touches the result matrix; the caller
records the outcome.
"""
import collections
import logging
import subprocess
import time
from pathlib import Path
from typing import Deque, List

from cccl_composer.config import AppConfig
from cccl_composer.core.cells import BuildCell
from cccl_composer.core.errors import (
    BuildFailed,
    CellError,
    ConfigureFailed,
    StreamReadError,
)
from cccl_composer.core.progress import ProgressSink, parse_progress
from cccl_composer.policy.profile import Profile, build_command, configure_command

logger = logging.getLogger(__name__)

# Non-progress build lines kept for the failure report
DIAGNOSTIC_TAIL_LINES = 40


class CellRunner:
    """Runs cells against one configuration and tool profile."""

    def __init__(
        self,
        config: AppConfig,
        profile: Profile,
        build_root: Path,
        poll_interval: float = 0.05,
    ):
        self.config = config
        self.profile = profile
        # Fail before any cell is scheduled if a source tree is missing
        self.source_roots = {name: config.source_root(name) for name in profile.sources}
        self.build_root = Path(build_root)
        self.poll_interval = poll_interval

    # -----------------------------------------------------------------
    # Entry point
    # -----------------------------------------------------------------

    def run(self, cell: BuildCell, sink: ProgressSink) -> bool:
        """Configure + build *cell*; True on success. Cell errors do not escape."""
        build_dir = cell.build_dir(self.build_root)
        try:
            build_dir.mkdir(parents=True, exist_ok=True)
            self.configure(cell, build_dir)
            self.build(cell, build_dir, sink)
        except CellError as e:
            logger.error(
                "%s: %s failed: %s%s",
                cell.label,
                e.phase.value.lower(),
                e,
                f"\n{e.diagnostics.rstrip()}" if e.diagnostics else "",
            )
            return False
        except OSError as e:
            logger.error("%s: cannot prepare %s: %s", cell.label, build_dir, e)
            return False

        sink.finish()
        logger.debug("%s: build succeeded", cell.label)
        return True

    # -----------------------------------------------------------------
    # Phases
    # -----------------------------------------------------------------

    def configure(self, cell: BuildCell, build_dir: Path) -> None:
        cmd = configure_command(cell, build_dir, self.config, self.profile)
        logger.debug("%s: %s", cell.label, " ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
            )
        except OSError as e:
            raise ConfigureFailed(f"cannot execute {cmd[0]}: {e}") from e

        if result.returncode != 0:
            raise ConfigureFailed(
                f"{cmd[0]} exited with {result.returncode}",
                diagnostics=result.stderr or result.stdout,
            )

    def build(self, cell: BuildCell, build_dir: Path, sink: ProgressSink) -> None:
        cmd = build_command(cell, build_dir, self.profile)
        logger.debug("%s: %s", cell.label, " ".join(cmd))

        try:
            child = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise BuildFailed(f"cannot execute {cmd[0]}: {e}") from e

        tail: Deque[str] = collections.deque(maxlen=DIAGNOSTIC_TAIL_LINES)
        try:
            returncode = self._drain(child, sink, tail)
        finally:
            if child.stdout is not None:
                child.stdout.close()

        if returncode != 0:
            raise BuildFailed(
                f"{cmd[0]} exited with {returncode}",
                diagnostics="".join(tail),
            )

    def _drain(
        self,
        child: "subprocess.Popen[str]",
        sink: ProgressSink,
        tail: Deque[str],
    ) -> int:
        """Read output until the child has exited; return its exit status."""
        assert child.stdout is not None
        while True:
            try:
                line = child.stdout.readline()
            except (OSError, ValueError) as e:
                child.kill()
                child.wait()
                raise StreamReadError(f"reading build output: {e}") from e

            if line:
                progress = parse_progress(line)
                if progress is not None:
                    sink.update(progress.total, progress.current)
                else:
                    tail.append(line)

            returncode = child.poll()
            if returncode is not None:
                # Pick up whatever was written between the last read and exit
                for rest in _remaining_lines(child):
                    progress = parse_progress(rest)
                    if progress is not None:
                        sink.update(progress.total, progress.current)
                    else:
                        tail.append(rest)
                return returncode

            if not line:
                time.sleep(self.poll_interval)


def _remaining_lines(child: "subprocess.Popen[str]") -> List[str]:
    assert child.stdout is not None
    try:
        return child.stdout.readlines()
    except (OSError, ValueError) as e:
        raise StreamReadError(f"reading build output: {e}") from e
