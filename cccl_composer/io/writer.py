"""
Writer — serialize a sweep report to JSON.
"""
import json
from pathlib import Path

from cccl_composer.io.schema import SweepReport


def write_report(report: SweepReport, path: Path) -> Path:
    """
    Write *report* to *path* as indented JSON.

    Creates the parent directory if it does not exist.
    Returns the written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(
            report.model_dump(mode="json"),
            indent=2,
            sort_keys=True,
        )
        + "\n"
    )
    return path
