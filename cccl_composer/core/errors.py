"""
Errors — the failure taxonomy of a sweep.

Two families:
  1. Fatal, pre-execution  (ConfigurationMissing, EmptyAxis) — abort the run
     before any cell is scheduled.
  2. Per-cell              (ConfigureFailed, BuildFailed, StreamReadError) —
     caught at the Cell Runner boundary and reduced to a failed leaf.
"""
from enum import Enum, unique
from typing import Optional


@unique
class FailurePhase(str, Enum):
    """Where a cell stopped."""
    CONFIGURE = "CONFIGURE"
    BUILD = "BUILD"
    STREAM = "STREAM"


class ComposerError(Exception):
    """Base class for every error raised by cccl_composer."""


# ── Fatal ─────────────────────────────────────────────────────────────────────

class ConfigurationMissing(ComposerError):
    """The configuration file could not be loaded, or lacks a required entry."""


class EmptyAxis(ComposerError):
    """An axis resolved to no labels, so there is nothing to build."""


# ── Per-cell ──────────────────────────────────────────────────────────────────

class CellError(ComposerError):
    """A single cell failed; carries the tool's diagnostic text if any."""

    phase: FailurePhase = FailurePhase.BUILD

    def __init__(self, message: str, diagnostics: Optional[str] = None):
        super().__init__(message)
        self.diagnostics = diagnostics or ""


class ConfigureFailed(CellError):
    phase = FailurePhase.CONFIGURE


class BuildFailed(CellError):
    phase = FailurePhase.BUILD


class StreamReadError(CellError):
    phase = FailurePhase.STREAM
