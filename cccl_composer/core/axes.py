"""
Axes — resolve each sweep dimension to an explicit, ordered tuple of labels.

An explicit selection (already validated by the CLI) is used verbatim;
otherwise the configured universe, or a hard-coded default for axes that
have no configuration of their own.
"""
import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple

from cccl_composer.config import AppConfig
from cccl_composer.core.errors import ConfigurationMissing

logger = logging.getLogger(__name__)

DEFAULT_DIALECTS: Tuple[str, ...] = ("11", "14", "17")
DEFAULT_BUILD_TYPES: Tuple[str, ...] = ("debug", "release")


def _dedupe(labels: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for label in labels:
        if label not in seen:
            seen.append(label)
    return tuple(seen)


def resolve_axis(
    axis: str,
    override: Optional[Sequence[str]],
    universe: Sequence[str],
) -> Tuple[str, ...]:
    """Explicit selection if given, else the full universe of *axis*."""
    labels = _dedupe(override) if override else _dedupe(universe)
    logger.debug("axis %s: %s%s", axis, ", ".join(labels), "" if override else " (default)")
    return labels


def resolve_compilers(
    config: Optional[AppConfig],
    override: Optional[Sequence[str]] = None,
) -> Tuple[str, ...]:
    if config is None:
        raise ConfigurationMissing("compilers axis needs a loaded configuration")
    return resolve_axis("compilers", override, config.compiler_labels())


def resolve_ctks(
    config: Optional[AppConfig],
    override: Optional[Sequence[str]] = None,
) -> Tuple[str, ...]:
    if config is None:
        raise ConfigurationMissing("ctks axis needs a loaded configuration")
    return resolve_axis("ctks", override, config.ctk_labels())


def resolve_dialects(override: Optional[Sequence[str]] = None) -> Tuple[str, ...]:
    return resolve_axis("dialects", override, DEFAULT_DIALECTS)


def resolve_build_types(override: Optional[Sequence[str]] = None) -> Tuple[str, ...]:
    return resolve_axis("types", override, DEFAULT_BUILD_TYPES)


def resolve_targets(
    dialects: Sequence[str],
    target: Optional[str] = None,
) -> Dict[str, str]:
    """
    Map each dialect to its Ninja target.

    An empty string means "build the default target".  A named test target
    expands per dialect to ``cub.cpp<dialect>.<target>``.
    """
    if not target:
        return {d: "" for d in dialects}
    return {d: f"cub.cpp{d}.{target}" for d in dialects}


def validate_selection(
    axis: str,
    selected: Optional[Sequence[str]],
    universe: Sequence[str],
) -> None:
    """Reject labels that are not part of *universe* (CLI-side check)."""
    if not selected:
        return
    unknown = [s for s in selected if s not in universe]
    if unknown:
        raise ValueError(
            f"unknown {axis}: {', '.join(unknown)} "
            f"(choose from: {', '.join(universe) or '<none configured>'})"
        )
