"""
Application configuration

Two layers:
  - ``Settings``  — process-level knobs, read from ``CCCL_COMPOSER_*``
    environment variables (or a ``.env`` file).
  - ``AppConfig`` — the user's toolchain inventory, read from
    ``config.json`` in the user config directory.
"""
import os
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from cccl_composer.core.errors import ConfigurationMissing


def default_config_path() -> Path:
    """``$XDG_CONFIG_HOME/cccl-composer/config.json`` (``~/.config`` fallback)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "cccl-composer" / "config.json"


class Settings(BaseSettings):
    """Process settings"""

    model_config = SettingsConfigDict(
        env_prefix="CCCL_COMPOSER_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Inventory file
    CONFIG_PATH: Path = Field(default_factory=default_config_path)

    # Out-of-tree build directories land under BUILD_ROOT/<ctk>/<type>/...
    BUILD_ROOT: Path = Path("build")

    # External tools
    CONFIGURE_TOOL: str = "cmake"
    BUILD_TOOL: str = "ninja"

    # Sleep between exit-status polls once build output is drained
    POLL_INTERVAL: float = 0.05

    # Force the non-interactive progress fallback
    PLAIN_PROGRESS: bool = False


class AppConfig(BaseModel):
    """Toolchain inventory: labels mapped to paths. Paths are opaque strings."""

    src: Dict[str, str] = Field(default_factory=dict)
    compilers: Dict[str, str] = Field(default_factory=dict)
    ctks: Dict[str, str] = Field(default_factory=dict)

    def compiler_labels(self) -> List[str]:
        return list(self.compilers)

    def ctk_labels(self) -> List[str]:
        return list(self.ctks)

    def source_root(self, name: str) -> str:
        """Path of a named source tree (``cub``, ``thrust``)."""
        try:
            return self.src[name]
        except KeyError:
            raise ConfigurationMissing(
                f"no source root named {name!r} in configuration"
            ) from None


def load_app_config(path: Optional[Path] = None) -> AppConfig:
    """
    Read and validate the inventory file.

    Raises ConfigurationMissing when the file is absent, unreadable or does
    not match the schema.
    """
    if path is None:
        path = default_config_path()

    try:
        raw = Path(path).read_text()
    except OSError as e:
        raise ConfigurationMissing(f"cannot read configuration {path}: {e}") from e

    try:
        return AppConfig.model_validate_json(raw)
    except ValidationError as e:
        raise ConfigurationMissing(f"invalid configuration {path}: {e}") from e
