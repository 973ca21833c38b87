"""
Checks that the container runtime and the pre-built build image are usable.
"""

from pathlib import Path
import subprocess

import click
from pyvider.telemetry import logger

from .config import BuilderConfig
from .exceptions import (
    EnvironmentCheckError,
    ImageNotFoundError,
    RuntimeUnavailableError,
)


def _display_name(runtime: str) -> str:
    return Path(runtime).name.capitalize()


def _query(command: list[str]) -> subprocess.CompletedProcess[str]:
    logger.debug(f"Running command: {' '.join(command)}")
    return subprocess.run(command, capture_output=True, text=True, check=False)


def check_runtime(runtime: str) -> str:
    """Returns the server version reported by the container runtime."""
    name = _display_name(runtime)
    click.echo(f"[*] Checking {name}...")
    unavailable = (
        f"{name} is not available or not running. Please install/start {name}"
    )
    try:
        result = _query([runtime, "version", "--format", "{{.Server.Version}}"])
    except OSError as e:
        raise RuntimeUnavailableError(unavailable) from e

    if result.returncode != 0:
        logger.debug("Runtime version query failed", stderr=result.stderr.strip())
        raise RuntimeUnavailableError(unavailable)

    version = result.stdout.strip()
    click.secho(f"[+] {name} version: {version}", fg="green")
    return version


def check_image(runtime: str, image: str) -> str:
    """Returns the local id of `image`, failing if it has not been built."""
    name = _display_name(runtime)
    click.echo(f"[*] Checking for {name} image: {image}")
    try:
        result = _query([runtime, "images", "-q", image])
    except OSError as e:
        raise EnvironmentCheckError(f"failed to check {name} images: {e}") from e

    if result.returncode != 0:
        raise EnvironmentCheckError(
            f"failed to check {name} images: exit status {result.returncode}"
            + (f"\n  Stderr: {result.stderr.strip()}" if result.stderr else "")
        )

    image_id = result.stdout.strip()
    if not image_id:
        raise ImageNotFoundError(
            f"{name} image '{image}' not found.\n\n"
            f"Build it first:\n  cd docker && {runtime} build -t {image} ."
        )

    click.secho(f"[+] {name} image found: {image}", fg="green")
    logger.debug("Build image present", image=image, image_id=image_id)
    return image_id


def validate_environment(config: BuilderConfig) -> None:
    check_runtime(config.runtime)
    check_image(config.runtime, config.image)
