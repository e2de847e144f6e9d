"""
Schema — Pydantic model for the optional JSON sweep report.

Runtime contract fields (present in every report):
  package_name, package_version, schema_version.
"""
from datetime import datetime, timezone
from typing import Dict, List

from pydantic import BaseModel, Field

from cccl_composer import PACKAGE_NAME, SCHEMA_VERSION, __version__


class SweepAxes(BaseModel):
    types: List[str]
    ctks: List[str]
    dialects: List[str]
    compilers: List[str]
    targets: Dict[str, str] = Field(default_factory=dict)


class AllocationEntry(BaseModel):
    parallelism: int
    concurrency: int
    threads_per_cell: int


class CellEntry(BaseModel):
    """Outcome of one cell."""
    build_type: str
    ctk: str
    dialect: str
    compiler: str
    build_dir: str
    passed: bool


class SweepReport(BaseModel):
    package_name: str = PACKAGE_NAME
    package_version: str = __version__
    schema_version: str = SCHEMA_VERSION

    started_at: str
    finished_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    axes: SweepAxes
    allocation: AllocationEntry
    cells: List[CellEntry] = Field(default_factory=list)

    passed: int = 0
    total: int = 0
