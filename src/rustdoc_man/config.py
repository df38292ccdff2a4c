"""Simple configuration for rustdoc-man.

Defaults come from ``RUSTDOC_MAN_*`` environment variables. The optional TOML
file at ``$XDG_CONFIG_HOME/rustdoc-man/config.toml`` supplies per-user
defaults for the command line options.
"""

from __future__ import annotations

import os
import sys
import warnings
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import RustdocManError
from .models.base import strict_config

if sys.version_info >= (3, 11):
    import tomllib
else:
    import toml

# Rendering configuration
LINE_WIDTH = int(os.getenv("RUSTDOC_MAN_LINE_WIDTH", "100"))
if not 20 <= LINE_WIDTH <= 1000:
    warnings.warn(
        f"Line width {LINE_WIDTH} out of range (20-1000), using 100", stacklevel=2
    )
    LINE_WIDTH = 100
DEFAULT_THEME = os.getenv("RUSTDOC_MAN_THEME", "monokai")
DEFAULT_VIEWER = os.getenv("RUSTDOC_MAN_VIEWER")

# Source discovery
SYSROOT_TIMEOUT = float(os.getenv("RUSTDOC_MAN_SYSROOT_TIMEOUT", "5.0"))
FALLBACK_SYSROOT = Path(os.getenv("RUSTDOC_MAN_FALLBACK_SYSROOT", "/usr"))
SYSROOT_DOC_DIRS = ("share/doc/rust/html", "share/doc/rust-doc/html")
LOCAL_DOC_DIR = Path("./target/doc")

# Fuzzy matching configuration
FUZZY_WEIGHTS = {
    "token_set_ratio": float(os.getenv("RUSTDOC_MAN_FUZZY_TOKEN_SET_WEIGHT", "0.4")),
    "token_sort_ratio": float(os.getenv("RUSTDOC_MAN_FUZZY_TOKEN_SORT_WEIGHT", "0.3")),
    "partial_ratio": float(os.getenv("RUSTDOC_MAN_FUZZY_PARTIAL_WEIGHT", "0.3")),
    "path_component_bonus": float(os.getenv("RUSTDOC_MAN_FUZZY_PATH_BONUS", "0.15")),
    "partial_component_bonus": float(
        os.getenv("RUSTDOC_MAN_FUZZY_PARTIAL_BONUS", "0.08")
    ),
}
SUGGESTION_LIMIT = int(os.getenv("RUSTDOC_MAN_SUGGESTION_LIMIT", "3"))

# Config file
CONFIG_FILE_NAME = "config.toml"


def default_config_path() -> Path:
    if explicit := os.getenv("RUSTDOC_MAN_CONFIG"):
        return Path(explicit)
    base = os.getenv("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "rustdoc-man" / CONFIG_FILE_NAME


class ConfigError(RustdocManError):
    """The config file exists but cannot be used."""

    def __init__(self, path: Path, detail: str):
        self.path = path
        super().__init__(f"Invalid config file '{path}': {detail}")


class ConfigFile(BaseModel):
    """Settings read from the TOML config file; unknown keys are rejected."""

    source: list[str] = Field(default_factory=list)
    viewer: str | None = None
    no_default_sources: bool = False
    no_search: bool = False
    no_syntax_highlight: bool = False
    theme: str | None = None
    width: int | None = Field(default=None, ge=20, le=1000)

    model_config = strict_config

    @field_validator("viewer")
    @classmethod
    def validate_viewer(cls, v):
        if v is not None and v not in ("plain", "rich"):
            raise ValueError(f"unknown viewer '{v}' (expected plain or rich)")
        return v


def _read_toml(path: Path) -> dict:
    if sys.version_info >= (3, 11):
        with path.open("rb") as f:
            return tomllib.load(f)
    with path.open("r", encoding="utf-8") as f:
        return toml.load(f)


def load_config_file(path: Path | None = None) -> ConfigFile:
    """Load the config file, or the defaults if it does not exist.

    Raises:
        ConfigError: If the file is not valid TOML or has invalid settings
    """
    path = path or default_config_path()
    if not path.is_file():
        return ConfigFile()
    try:
        data = _read_toml(path)
    except (ValueError, OSError) as e:
        # tomllib.TOMLDecodeError and toml.TomlDecodeError are ValueErrors
        raise ConfigError(path, str(e)) from e
    try:
        return ConfigFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path, str(e)) from e
