"""
Sweep runner — top-level orchestration: axes → cells → pool → matrix → table.

This module ties the axis resolver, cell enumeration, resource allocation,
the Cell Runner, the progress reporter and the summary renderer together
into a single ``run_sweep`` function that the CLI (or a test) calls.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from rich.console import Console

from cccl_composer.config import AppConfig, Settings
from cccl_composer.core.allocator import (
    Allocation,
    allocate,
    assign_threads,
    available_parallelism,
)
from cccl_composer.core.axes import (
    resolve_build_types,
    resolve_compilers,
    resolve_ctks,
    resolve_dialects,
    resolve_targets,
)
from cccl_composer.core.cell_runner import CellRunner
from cccl_composer.core.cells import BuildCell, enumerate_cells
from cccl_composer.core.matrix import ResultMatrix
from cccl_composer.io.progress import CellProgress, ProgressReporter
from cccl_composer.io.schema import AllocationEntry, CellEntry, SweepAxes, SweepReport
from cccl_composer.io.summary import render_summary
from cccl_composer.policy.profile import Profile

logger = logging.getLogger(__name__)


@dataclass
class SweepRequest:
    """Axis overrides handed over by the CLI; None means "everything"."""
    compilers: Optional[Sequence[str]] = None
    ctks: Optional[Sequence[str]] = None
    dialects: Optional[Sequence[str]] = None
    types: Optional[Sequence[str]] = None
    target: Optional[str] = None


@dataclass
class SweepPlan:
    """Resolved axes and the cells they expand to."""
    types: Sequence[str]
    ctks: Sequence[str]
    compilers: Sequence[str]
    dialects: Sequence[str]
    targets: Dict[str, str]
    cells: List[BuildCell] = field(default_factory=list)


@dataclass
class SweepResult:
    matrix: ResultMatrix
    allocation: Allocation
    parallelism: int
    cells: List[BuildCell]
    outcomes: Dict[tuple, bool]
    started_at: str

    @property
    def all_passed(self) -> bool:
        return self.matrix.all_passed

    def to_report(self, build_root: Path) -> SweepReport:
        passed, total = self.matrix.counts()
        return SweepReport(
            started_at=self.started_at,
            axes=SweepAxes(
                types=list(self.matrix.types),
                ctks=list(self.matrix.ctks),
                dialects=list(self.matrix.dialects),
                compilers=list(self.matrix.compilers),
                targets={c.dialect: c.target for c in self.cells},
            ),
            allocation=AllocationEntry(
                parallelism=self.parallelism,
                concurrency=self.allocation.concurrency,
                threads_per_cell=self.allocation.threads_per_cell,
            ),
            cells=[
                CellEntry(
                    build_type=c.build_type,
                    ctk=c.ctk,
                    dialect=c.dialect,
                    compiler=c.compiler,
                    build_dir=str(c.build_dir(build_root)),
                    passed=self.matrix.status(*c.key),
                )
                for c in self.cells
            ],
            passed=passed,
            total=total,
        )


def plan_sweep(config: AppConfig, request: SweepRequest) -> SweepPlan:
    """Resolve every axis and enumerate the cells. Raises EmptyAxis on zero cells."""
    types = resolve_build_types(request.types)
    ctks = resolve_ctks(config, request.ctks)
    compilers = resolve_compilers(config, request.compilers)
    dialects = resolve_dialects(request.dialects)
    targets = resolve_targets(dialects, request.target)

    cells = enumerate_cells(types, ctks, compilers, dialects, targets, config)
    return SweepPlan(
        types=types,
        ctks=ctks,
        compilers=compilers,
        dialects=dialects,
        targets=targets,
        cells=cells,
    )


def run_sweep(
    config: AppConfig,
    request: SweepRequest,
    settings: Optional[Settings] = None,
    *,
    profile: Optional[Profile] = None,
    parallelism: Optional[int] = None,
    plain: Optional[bool] = None,
    console: Optional[Console] = None,
) -> SweepResult:
    """
    Build every cell of the sweep and print the summary table.

    Parameters
    ----------
    config : AppConfig
        Toolchain inventory.
    request : SweepRequest
        Axis overrides from the CLI.
    settings : Settings, optional
        Build root, tool names and poll interval.  Defaults to ``Settings()``.
    profile : Profile, optional
        Tool invocation profile.  Defaults to ``Profile.from_settings``.
    parallelism : int, optional
        CPU budget to split.  Defaults to the CPUs available to the process.
    plain : bool, optional
        Force (True) or forbid (False) the non-interactive progress mode.
    console : rich Console, optional
        Where the summary table goes.

    Returns
    -------
    SweepResult
    """
    settings = settings or Settings()
    profile = profile or Profile.from_settings(settings)
    if parallelism is None:
        parallelism = available_parallelism()
    if plain is None and settings.PLAIN_PROGRESS:
        plain = True

    started_at = datetime.now(timezone.utc).isoformat()

    # ── Step 1: axes and cells ───────────────────────────────────────
    plan = plan_sweep(config, request)
    runner = CellRunner(
        config,
        profile,
        build_root=settings.BUILD_ROOT,
        poll_interval=settings.POLL_INTERVAL,
    )

    # ── Step 2: split the CPU budget ─────────────────────────────────
    allocation = allocate(len(plan.cells), parallelism)
    assign_threads(plan.cells, allocation)
    logger.info(
        "Build with %d threads per build and %d concurrent builds (%d cells)",
        allocation.threads_per_cell,
        allocation.concurrency,
        len(plan.cells),
    )

    matrix = ResultMatrix(plan.types, plan.ctks, plan.dialects, plan.compilers)
    outcomes: Dict[tuple, bool] = {}

    def _run_one(cell: BuildCell, sink: CellProgress) -> bool:
        ok = runner.run(cell, sink)
        if ok:
            matrix.mark_success(*cell.key)
        return ok

    # ── Step 3: run all cells, bounded by the allocation ─────────────
    with ProgressReporter(plain=plain) as reporter:
        sinks = [reporter.add(cell) for cell in plan.cells]
        with ThreadPoolExecutor(
            max_workers=allocation.concurrency,
            thread_name_prefix="cell",
        ) as pool:
            futures = {
                pool.submit(_run_one, cell, sink): cell
                for cell, sink in zip(plan.cells, sinks)
            }
            for future in as_completed(futures):
                cell = futures[future]
                try:
                    outcomes[cell.key] = future.result()
                except Exception as e:
                    logger.error("%s: unexpected error: %s", cell.label, e, exc_info=True)
                    outcomes[cell.key] = False

    # ── Step 4: summary ──────────────────────────────────────────────
    render_summary(matrix, console)

    passed, total = matrix.counts()
    logger.info("Sweep finished: %d/%d cells passed", passed, total)

    return SweepResult(
        matrix=matrix,
        allocation=allocation,
        parallelism=parallelism,
        cells=plan.cells,
        outcomes=outcomes,
        started_at=started_at,
    )
