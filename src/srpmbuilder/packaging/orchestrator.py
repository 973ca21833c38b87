"""Runs the containerized SRPM build through the container runtime CLI."""

from pathlib import Path
import shlex
import subprocess
import time

import click
from pyvider.telemetry import logger

from ..config import CONTAINER_INPUT_PATH, CONTAINER_OUTPUT_PATH
from ..exceptions import BuildFailedError
from ..models import BuildOutcome


class BuildOrchestrator:
    """Builds one SRPM inside an ephemeral container of the build image."""

    ROOT_USER = "0"

    def __init__(
        self,
        runtime: str,
        image: str,
        input_path: Path,
        output_dir: Path,
        container_input_path: str = CONTAINER_INPUT_PATH,
        container_output_path: str = CONTAINER_OUTPUT_PATH,
    ) -> None:
        self.runtime = runtime
        self.image = image
        self.input_path = input_path
        self.output_dir = output_dir
        self.container_input_path = container_input_path
        self.container_output_path = container_output_path

    def build_command(self) -> list[str]:
        return [
            self.runtime,
            "run",
            "--rm",
            "--user", self.ROOT_USER,
            "-v", f"{self.input_path}:{self.container_input_path}:ro",
            "-v", f"{self.output_dir}:{self.container_output_path}",
            self.image,
            self.container_input_path,
            self.container_output_path,
        ]

    def run(self) -> BuildOutcome:
        """
        Runs the build with the container's output connected to ours.

        Raises BuildFailedError if the container cannot be started or exits
        with a non-zero status.
        """
        command = self.build_command()
        click.echo(f"[*] Starting {Path(self.runtime).name} container for build...")
        click.echo(f"[*] Running: {shlex.join(command)}")
        logger.info(
            "Launching build container",
            image=self.image,
            input=str(self.input_path),
            output=str(self.output_dir),
        )

        start = time.monotonic()
        try:
            result = subprocess.run(command, check=False)
        except OSError as e:
            raise BuildFailedError(f"could not launch {self.runtime}: {e}") from e
        outcome = BuildOutcome(
            exit_code=result.returncode, elapsed_seconds=time.monotonic() - start
        )

        logger.info(
            "Build container exited",
            exit_code=outcome.exit_code,
            elapsed_seconds=round(outcome.elapsed_seconds, 1),
        )
        if not outcome.succeeded:
            raise BuildFailedError(
                f"{Path(self.runtime).name} run exited with status {outcome.exit_code}"
            )
        return outcome
