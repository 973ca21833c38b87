"""Configuration for the SRPM builder, read from an optional TOML file."""

from pathlib import Path
import tomllib
from typing import Any

from attrs import define, fields

from .exceptions import ConfigError

DEFAULT_RUNTIME = "docker"
DEFAULT_IMAGE = "stream8-kernel-builder"
CONTAINER_INPUT_PATH = "/input.src.rpm"
CONTAINER_OUTPUT_PATH = "/out"
PACKAGE_SUFFIX = ".rpm"
SOURCE_SUFFIX = ".src.rpm"
FALLBACK_FILENAME = "kernel.src.rpm"

CONFIG_TABLE = "srpmbuilder"


@define(frozen=True, slots=True)
class BuilderConfig:
    runtime: str = DEFAULT_RUNTIME
    image: str = DEFAULT_IMAGE
    container_input_path: str = CONTAINER_INPUT_PATH
    container_output_path: str = CONTAINER_OUTPUT_PATH
    package_suffix: str = PACKAGE_SUFFIX
    source_suffix: str = SOURCE_SUFFIX
    fallback_filename: str = FALLBACK_FILENAME


def _known_keys() -> set[str]:
    return {f.name for f in fields(BuilderConfig)}


def load_config(path: Path | None) -> dict[str, Any]:
    """
    Reads the `[tool.srpmbuilder]` table from a TOML file.

    A file without that table yields an empty mapping.
    """
    if path is None:
        return {}

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in config file '{path}': {e}") from e

    tool = data.get("tool", {})
    if not isinstance(tool, dict):
        raise ConfigError(f"[tool] in '{path}' must be a table.")
    table = tool.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[tool.{CONFIG_TABLE}] in '{path}' must be a table.")

    unknown = sorted(set(table) - _known_keys())
    if unknown:
        raise ConfigError(
            f"Unknown keys in [tool.{CONFIG_TABLE}] of '{path}': {', '.join(unknown)}"
        )
    for key, value in table.items():
        if not isinstance(value, str) or not value:
            raise ConfigError(
                f"'{key}' in [tool.{CONFIG_TABLE}] must be a non-empty string."
            )
    return table


def build_config(
    file_values: dict[str, Any],
    runtime: str | None = None,
    image: str | None = None,
) -> BuilderConfig:
    """Merges explicit options over file values over the defaults."""
    values = dict(file_values)
    if runtime:
        values["runtime"] = runtime
    if image:
        values["image"] = image
    return BuilderConfig(**values)
