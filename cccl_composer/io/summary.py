"""
Summary — nested pass/fail table for a finished sweep.

    type columns
      └─ ctk columns
           └─ dialect columns
                └─ one row per compiler: label, ✓ / ✗

Read-only; call only after every cell has joined.
"""
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cccl_composer.core.matrix import ResultMatrix

PASS_GLYPH = "✓"
FAIL_GLYPH = "✗"


def _glyph(ok: bool) -> str:
    return f"[green]{PASS_GLYPH}[/green]" if ok else f"[red]{FAIL_GLYPH}[/red]"


def _axis_table() -> Table:
    return Table(box=box.SQUARE, header_style="bold yellow", pad_edge=False)


def build_summary_table(matrix: ResultMatrix) -> Table:
    summary = _axis_table()
    type_cells = []

    for build_type in matrix.types:
        summary.add_column(escape(build_type), justify="center")
        ctk_table = _axis_table()
        ctk_cells = []

        for ctk in matrix.ctks:
            ctk_table.add_column(escape(ctk), justify="center")
            dialect_table = _axis_table()
            dialect_cells = []

            for dialect in matrix.dialects:
                dialect_table.add_column(escape(dialect), justify="center")
                compiler_table = Table(box=box.SIMPLE, show_header=False, pad_edge=False)
                compiler_table.add_column("compiler")
                compiler_table.add_column("status", justify="center")
                for compiler in matrix.compilers:
                    compiler_table.add_row(
                        escape(compiler),
                        _glyph(matrix.status(build_type, ctk, dialect, compiler)),
                    )
                dialect_cells.append(compiler_table)

            dialect_table.add_row(*dialect_cells)
            ctk_cells.append(dialect_table)

        ctk_table.add_row(*ctk_cells)
        type_cells.append(ctk_table)

    summary.add_row(*type_cells)
    return summary


def render_summary(matrix: ResultMatrix, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(build_summary_table(matrix))
    passed, total = matrix.counts()
    style = "green" if passed == total else "red"
    console.print(f"[{style}]{passed}/{total} cells passed[/{style}]")
