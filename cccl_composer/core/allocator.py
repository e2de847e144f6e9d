"""
Allocator — split a fixed CPU budget between concurrent cells and the
compiler jobs each cell's build gets.

    concurrency      = min(parallelism, num_cells)
    threads_per_cell = parallelism // concurrency

The floor division leaves ``parallelism % concurrency`` CPUs idle when the
split is uneven.
"""
import os
from dataclasses import dataclass
from typing import Iterable

from cccl_composer.core.cells import BuildCell
from cccl_composer.core.errors import EmptyAxis


@dataclass(frozen=True)
class Allocation:
    concurrency: int
    threads_per_cell: int


def available_parallelism() -> int:
    """CPUs this process may run on."""
    try:
        return len(os.sched_getaffinity(0)) or 1
    except (AttributeError, OSError):
        return os.cpu_count() or 1


def allocate(num_cells: int, parallelism: int) -> Allocation:
    if num_cells < 1:
        raise EmptyAxis("no cells to allocate")
    if parallelism < 1:
        raise ValueError(f"parallelism must be >= 1, got {parallelism}")

    concurrency = min(parallelism, num_cells)
    return Allocation(
        concurrency=concurrency,
        threads_per_cell=parallelism // concurrency,
    )


def assign_threads(cells: Iterable[BuildCell], allocation: Allocation) -> None:
    for cell in cells:
        cell.threads = allocation.threads_per_cell
