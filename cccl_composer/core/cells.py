"""
Cells — the Cartesian product of the resolved axes.

One ``BuildCell`` per (build type, ctk, compiler, dialect).  A cell is
created once, consumed once by a Cell Runner, and only its ``threads``
budget is ever written after enumeration.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from cccl_composer.config import AppConfig
from cccl_composer.core.errors import ConfigurationMissing, EmptyAxis

CellKey = Tuple[str, str, str, str]


@dataclass
class BuildCell:
    """One concrete combination to configure and build."""

    build_type: str
    ctk: str
    compiler: str
    dialect: str

    # Derived from configuration
    compiler_path: str
    ctk_path: str
    target: str = ""        # empty → default target

    # Set by the allocator
    threads: int = 1

    @property
    def key(self) -> CellKey:
        """Matrix coordinates: (type, ctk, dialect, compiler)."""
        return (self.build_type, self.ctk, self.dialect, self.compiler)

    @property
    def label(self) -> str:
        compiler_label = self.compiler.replace("/", ".")
        return f"{self.build_type}/{self.ctk}/{compiler_label}/cpp.{self.dialect}"

    def build_dir(self, root: Path) -> Path:
        """``root/<ctk>/<type>/<compiler>/<dialect>`` — unique per cell."""
        return Path(root) / self.ctk / self.build_type / self.compiler / self.dialect


def enumerate_cells(
    types: Sequence[str],
    ctks: Sequence[str],
    compilers: Sequence[str],
    dialects: Sequence[str],
    targets: Dict[str, str],
    config: AppConfig,
) -> List[BuildCell]:
    """
    Expand the axes into cells: type → ctk → compiler → dialect.

    Raises EmptyAxis when any axis is empty and ConfigurationMissing when a
    selected label has no path in *config*.
    """
    for axis, labels in (
        ("types", types),
        ("ctks", ctks),
        ("compilers", compilers),
        ("dialects", dialects),
    ):
        if not labels:
            raise EmptyAxis(f"axis {axis!r} resolved to no labels")

    cells: List[BuildCell] = []
    for build_type in types:
        for ctk in ctks:
            ctk_path = _lookup(config.ctks, "ctk", ctk)
            for compiler in compilers:
                compiler_path = _lookup(config.compilers, "compiler", compiler)
                for dialect in dialects:
                    cells.append(BuildCell(
                        build_type=build_type,
                        ctk=ctk,
                        compiler=compiler,
                        dialect=dialect,
                        compiler_path=compiler_path,
                        ctk_path=ctk_path,
                        target=targets.get(dialect, ""),
                    ))
    return cells


def _lookup(paths: Dict[str, str], kind: str, label: str) -> str:
    try:
        return paths[label]
    except KeyError:
        raise ConfigurationMissing(f"no path configured for {kind} {label!r}") from None
