"""
Profile — how a cell is turned into configure / build invocations.

The profile holds every tool-specific knob so that the Cell Runner knows
nothing about CMake or Ninja syntax.  Targeting another library tree is a
profile change, not a code change.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from cccl_composer.config import AppConfig, Settings
from cccl_composer.core.cells import BuildCell


@dataclass(frozen=True)
class Profile:
    """Tool invocation profile for one library tree."""

    # Identity
    profile_id: str

    # External tools
    configure_tool: str = "cmake"
    build_tool: str = "ninja"
    generator: str = "Ninja"

    # Every dialect the project knows; exactly one is switched ON per cell
    dialects: Tuple[str, ...] = ("11", "14", "17")

    # Fixed -D definitions, appended after the build type
    defines: Tuple[str, ...] = ()

    # Compiler labels containing this marker drive CUDA directly (nvc++)
    nvhpc_marker: str = "nvhpc"

    # Named source trees every configure needs from AppConfig.src
    sources: Tuple[str, ...] = ("cub", "thrust")

    @classmethod
    def cub(cls, configure_tool: str = "cmake", build_tool: str = "ninja") -> "Profile":
        """CUB test tree, one SM arch, deprecated dialects allowed."""
        return cls(
            profile_id="cub-ninja-sm80",
            configure_tool=configure_tool,
            build_tool=build_tool,
            defines=(
                "CUB_DISABLE_ARCH_BY_DEFAULT=ON",
                "CUB_ENABLE_COMPUTE_80=ON",
                "CUB_IGNORE_DEPRECATED_CPP_DIALECT=ON",
                "CMAKE_EXPORT_COMPILE_COMMANDS=ON",
            ),
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Profile":
        return cls.cub(
            configure_tool=settings.CONFIGURE_TOOL,
            build_tool=settings.BUILD_TOOL,
        )


def configure_command(
    cell: BuildCell,
    build_dir: Path,
    config: AppConfig,
    profile: Profile,
) -> List[str]:
    """CMake invocation that generates *cell*'s build plan in *build_dir*."""
    cub_path = config.source_root("cub")
    thrust_path = config.source_root("thrust")

    args = [
        profile.configure_tool,
        f"-G{profile.generator}",
        f"-B{build_dir}",
        f"-DCMAKE_BUILD_TYPE={cell.build_type}",
    ]
    args.extend(f"-D{d}" for d in profile.defines)

    if profile.nvhpc_marker in cell.compiler:
        # nvc++ is both host and device compiler
        args.append("-DCMAKE_CUDA_COMPILER_FORCED=ON")
        args.append(f"-DCMAKE_CUDA_COMPILER={cell.compiler_path}")
        args.append("-DCMAKE_CUDA_COMPILER_ID=NVCXX")
    else:
        nvcc = Path(cell.ctk_path) / "bin" / "nvcc"
        args.append(f"-DCMAKE_CUDA_COMPILER={nvcc}")
        args.append(f"-DCMAKE_CXX_COMPILER={cell.compiler_path}")

    for d in profile.dialects:
        state = "ON" if d == cell.dialect else "OFF"
        args.append(f"-DCUB_ENABLE_DIALECT_CPP{d}={state}")

    args.append(f"-DThrust_DIR={thrust_path}/thrust/cmake")
    args.append("-DCUB_ENABLE_TESTS_WITH_RDC=OFF")
    args.append(cub_path)
    return args


def build_command(cell: BuildCell, build_dir: Path, profile: Profile) -> List[str]:
    """Ninja invocation: ``-C<dir> -j<threads> [target]``."""
    args = [profile.build_tool, f"-C{build_dir}", f"-j{cell.threads}"]
    if cell.target:
        args.append(cell.target)
    return args
