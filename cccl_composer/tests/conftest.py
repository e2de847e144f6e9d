"""
Shared pytest fixtures for cccl_composer tests.

Provides stand-in ``cmake`` / ``ninja`` shell scripts so that cells can be
configured and built without a CUDA toolchain:

  - fake cmake fails for any compiler installed under ``/opt/broken/``,
    otherwise records its arguments in the build directory.
  - fake ninja prints three ``[n/3]`` progress markers mixed with chatter,
    records its arguments, and exits 1 for cells of the ``linkfail``
    compiler.

Tests are automatically skipped on Windows.
"""
import platform
import textwrap
from pathlib import Path

import pytest

from cccl_composer.config import AppConfig, Settings
from cccl_composer.policy.profile import Profile

FAKE_CMAKE = textwrap.dedent("""\
    #!/bin/sh
    dir=""
    for a in "$@"; do
        case "$a" in -B*) dir="${a#-B}" ;; esac
    done
    case "$*" in
        */opt/broken/*)
            echo "CMake Error: The C++ compiler is not able to compile a simple test program." >&2
            exit 1
            ;;
    esac
    echo "$@" > "$dir/cmake.args"
    echo "-- Build files have been written to: $dir"
    exit 0
""")

FAKE_NINJA = textwrap.dedent("""\
    #!/bin/sh
    dir=""
    for a in "$@"; do
        case "$a" in -C*) dir="${a#-C}" ;; esac
    done
    echo "$@" > "$dir/ninja.args"
    echo "ninja: Entering directory \\`$dir'"
    echo "[1/3] Building CUDA object test/a.cu.o"
    case "$dir" in
        */linkfail/*)
            echo "FAILED: test/cub.test.link"
            echo "ld: undefined reference to \\`cub::DeviceReduce'"
            exit 1
            ;;
    esac
    echo "nvcc warning : The 'compute_35' architecture is deprecated"
    echo "[2/3] Building CUDA object test/b.cu.o"
    echo "[3/3] Linking CUDA executable bin/cub.test"
    exit 0
""")


class RecordingSink:
    """ProgressSink that remembers every call."""

    def __init__(self):
        self.updates = []
        self.finished = False

    def update(self, total, current):
        self.updates.append((total, current))

    def finish(self):
        self.finished = True


def _write_tool(path: Path, body: str) -> Path:
    path.write_text(body)
    path.chmod(0o755)
    return path


@pytest.fixture
def stub_tools(tmp_path: Path):
    """Paths of the fake (cmake, ninja) scripts."""
    if platform.system() == "Windows":
        pytest.skip("stub tools are POSIX shell scripts")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    cmake = _write_tool(bin_dir / "cmake", FAKE_CMAKE)
    ninja = _write_tool(bin_dir / "ninja", FAKE_NINJA)
    return cmake, ninja


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig(
        src={"cub": "/src/cub", "thrust": "/src/thrust"},
        compilers={
            "gcc-12": "/usr/bin/g++-12",
            "broken": "/opt/broken/bin/g++",
            "linkfail": "/usr/bin/clang++-16",
            "nvhpc-23.7": "/opt/nvidia/hpc_sdk/bin/nvc++",
        },
        ctks={
            "12.2": "/usr/local/cuda-12.2",
            "11.8": "/usr/local/cuda-11.8",
        },
    )


@pytest.fixture
def settings(tmp_path: Path, stub_tools) -> Settings:
    cmake, ninja = stub_tools
    return Settings(
        CONFIG_PATH=tmp_path / "config.json",
        BUILD_ROOT=tmp_path / "build",
        CONFIGURE_TOOL=str(cmake),
        BUILD_TOOL=str(ninja),
        POLL_INTERVAL=0.01,
        PLAIN_PROGRESS=True,
    )


@pytest.fixture
def profile(settings: Settings) -> Profile:
    return Profile.from_settings(settings)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()
