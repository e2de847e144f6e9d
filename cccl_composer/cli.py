"""
cccl-composer CLI
=================

Usage::

    cccl-composer build -c gcc-12 clang-16 --ctks 12.2 -d 17 -t release
    cccl-composer build --target test.device_reduce --report sweep.json
    cccl-composer list

Exit status: 0 when every cell passed, 1 when any cell failed,
2 when the sweep could not start (configuration, empty axis, bad selection).
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cccl_composer import PACKAGE_NAME, __version__
from cccl_composer.config import AppConfig, Settings, load_app_config
from cccl_composer.core.axes import (
    DEFAULT_BUILD_TYPES,
    DEFAULT_DIALECTS,
    validate_selection,
)
from cccl_composer.core.errors import ComposerError
from cccl_composer.io.writer import write_report
from cccl_composer.runner import SweepRequest, plan_sweep, run_sweep

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CELLS_FAILED = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PACKAGE_NAME,
        description="Configure and build every compiler × CTK × dialect × type cell",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, default=None,
                        help="Inventory file (default: $XDG_CONFIG_HOME/cccl-composer/config.json)")
    parser.add_argument("--verbose", "-v", action="store_true")

    sub = parser.add_subparsers(dest="command", required=True)

    def add_axes(p: argparse.ArgumentParser) -> None:
        p.add_argument("-c", "--compilers", nargs="+", help="Compiler labels")
        p.add_argument("--ctks", nargs="+", help="CTK version labels")
        p.add_argument("-d", "--dialects", nargs="+", choices=DEFAULT_DIALECTS,
                       help="C++ dialects")
        p.add_argument("-t", "--types", nargs="+", choices=DEFAULT_BUILD_TYPES,
                       help="Build types")
        p.add_argument("--target", default=None,
                       help="Test target; expands to cub.cpp<dialect>.<target>")

    build = sub.add_parser("build", help="Build every cell")
    add_axes(build)
    build.add_argument("-j", "--jobs", type=int, default=None,
                       help="CPU budget to split across cells (default: all CPUs)")
    build.add_argument("--build-root", type=Path, default=None,
                       help="Root of the per-cell build directories")
    build.add_argument("--plain", action="store_true",
                       help="No progress bars; log status lines instead")
    build.add_argument("--report", type=Path, default=None,
                       help="Write a JSON sweep report to this path")

    listing = sub.add_parser("list", help="Print the cells without building")
    add_axes(listing)

    return parser


def _request(args: argparse.Namespace, config: AppConfig) -> SweepRequest:
    validate_selection("compilers", args.compilers, config.compiler_labels())
    validate_selection("ctks", args.ctks, config.ctk_labels())
    return SweepRequest(
        compilers=args.compilers,
        ctks=args.ctks,
        dialects=args.dialects,
        types=args.types,
        target=args.target,
    )


def _cmd_list(args: argparse.Namespace, config: AppConfig, settings: Settings) -> int:
    plan = plan_sweep(config, _request(args, config))
    print(f"{len(plan.cells)} cells")
    for cell in plan.cells:
        target = f"  target={cell.target}" if cell.target else ""
        print(f"{cell.label}  {cell.build_dir(settings.BUILD_ROOT)}{target}")
    return EXIT_OK


def _cmd_build(args: argparse.Namespace, config: AppConfig, settings: Settings) -> int:
    if args.build_root is not None:
        settings.BUILD_ROOT = args.build_root
    if args.jobs is not None and args.jobs < 1:
        raise ValueError(f"--jobs must be >= 1, got {args.jobs}")

    result = run_sweep(
        config,
        _request(args, config),
        settings,
        parallelism=args.jobs,
        plain=True if args.plain else None,
    )

    if args.report is not None:
        path = write_report(result.to_report(settings.BUILD_ROOT), args.report)
        log.info("Wrote report to %s", path)

    return EXIT_OK if result.all_passed else EXIT_CELLS_FAILED


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    try:
        settings = Settings()
        config = load_app_config(args.config or settings.CONFIG_PATH)
        if args.command == "list":
            return _cmd_list(args, config, settings)
        return _cmd_build(args, config, settings)
    except (ComposerError, ValueError) as e:
        log.error("%s", e)
        return EXIT_FATAL


if __name__ == "__main__":
    sys.exit(main())
