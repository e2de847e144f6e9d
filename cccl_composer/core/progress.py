"""Ninja progress markers: ``[<current>/<total>] <description>``."""
import re
from dataclasses import dataclass
from typing import Optional, Protocol

PROGRESS_RE = re.compile(r"^\[(?P<current>\d+)/(?P<total>\d+)\]")


@dataclass(frozen=True)
class BuildProgress:
    current: int
    total: int


class ProgressSink(Protocol):
    """Receives progress for exactly one cell."""

    def update(self, total: int, current: int) -> None: ...

    def finish(self) -> None: ...


def parse_progress(line: str) -> Optional[BuildProgress]:
    """Progress carried by *line*, or None for ordinary compiler chatter."""
    m = PROGRESS_RE.match(line)
    if m is None:
        return None
    return BuildProgress(current=int(m.group("current")), total=int(m.group("total")))
