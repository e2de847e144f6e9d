"""
test_cells — Cartesian expansion of the axes into build cells.

Invariants:
  - |types| × |ctks| × |compilers| × |dialects| cells, every key unique.
  - Every build directory is distinct.
  - An empty axis is fatal (EmptyAxis).
"""
from itertools import product
from pathlib import Path

import pytest

from cccl_composer.core.axes import resolve_targets
from cccl_composer.core.cells import BuildCell, enumerate_cells
from cccl_composer.core.errors import ConfigurationMissing, EmptyAxis


@pytest.mark.parametrize(
    "types, ctks, compilers, dialects",
    [
        (["debug"], ["12.2"], ["gcc-12"], ["17"]),
        (["debug", "release"], ["12.2"], ["gcc-12", "linkfail"], ["17"]),
        (["debug", "release"], ["12.2", "11.8"], ["gcc-12", "broken", "linkfail"], ["11", "14", "17"]),
    ],
)
def test_cell_count_and_uniqueness(app_config, types, ctks, compilers, dialects):
    cells = enumerate_cells(types, ctks, compilers, dialects, resolve_targets(dialects), app_config)

    assert len(cells) == len(types) * len(ctks) * len(compilers) * len(dialects)
    keys = {c.key for c in cells}
    assert len(keys) == len(cells)
    assert keys == {(t, s, d, c) for t, s, c, d in product(types, ctks, compilers, dialects)}


def test_enumeration_order(app_config):
    cells = enumerate_cells(
        ["debug", "release"], ["12.2"], ["gcc-12", "linkfail"], ["14", "17"],
        resolve_targets(["14", "17"]), app_config,
    )
    assert [c.label for c in cells[:4]] == [
        "debug/12.2/gcc-12/cpp.14",
        "debug/12.2/gcc-12/cpp.17",
        "debug/12.2/linkfail/cpp.14",
        "debug/12.2/linkfail/cpp.17",
    ]


def test_derived_paths_and_targets(app_config):
    targets = resolve_targets(["17"], "test.device_scan")
    (cell,) = enumerate_cells(["release"], ["11.8"], ["gcc-12"], ["17"], targets, app_config)

    assert cell.compiler_path == "/usr/bin/g++-12"
    assert cell.ctk_path == "/usr/local/cuda-11.8"
    assert cell.target == "cub.cpp17.test.device_scan"
    assert cell.threads == 1


def test_missing_dialect_target_is_default(app_config):
    (cell,) = enumerate_cells(["debug"], ["12.2"], ["gcc-12"], ["11"], {}, app_config)
    assert cell.target == ""


@pytest.mark.parametrize("empty", ["types", "ctks", "compilers", "dialects"])
def test_empty_axis_rejected(app_config, empty):
    axes = {
        "types": ["debug"],
        "ctks": ["12.2"],
        "compilers": ["gcc-12"],
        "dialects": ["17"],
    }
    axes[empty] = []
    with pytest.raises(EmptyAxis):
        enumerate_cells(axes["types"], axes["ctks"], axes["compilers"], axes["dialects"], {}, app_config)


def test_unconfigured_label_rejected(app_config):
    with pytest.raises(ConfigurationMissing):
        enumerate_cells(["debug"], ["10.2"], ["gcc-12"], ["17"], {}, app_config)


class TestBuildDir:

    def test_layout(self):
        cell = BuildCell("release", "12.2", "gcc-12", "17", "/usr/bin/g++", "/usr/local/cuda")
        assert cell.build_dir(Path("/b")) == Path("/b/12.2/release/gcc-12/17")

    def test_all_distinct(self, app_config):
        dialects = ["11", "14", "17"]
        cells = enumerate_cells(
            ["debug", "release"], ["12.2", "11.8"], app_config.compiler_labels(), dialects,
            resolve_targets(dialects), app_config,
        )
        dirs = {c.build_dir(Path("/b")) for c in cells}
        assert len(dirs) == len(cells)

    def test_label_replaces_slashes(self):
        cell = BuildCell("debug", "12.2", "gcc/12", "14", "/usr/bin/g++", "/usr/local/cuda")
        assert cell.label == "debug/12.2/gcc.12/cpp.14"
