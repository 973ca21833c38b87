"""Drives one build: validate, resolve, build, report."""

import contextlib
from datetime import datetime
import os
from pathlib import Path

import click
import httpx
from pyvider.telemetry import logger

from .config import BuilderConfig
from .exceptions import OutputDirectoryError, SrpmBuilderError
from .models import BuildStage, OutputPackage
from .packaging.orchestrator import BuildOrchestrator
from .packaging.reader import OutputReader
from .runtime import validate_environment
from .sources import resolve_source

OUTPUT_DIR_MODE = 0o755


def format_elapsed(seconds: float) -> str:
    """Formats a duration rounded to whole seconds, e.g. `1h2m3s` or `45s`."""
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def prepare_output_dir(output_dir: str | Path) -> Path:
    abs_output = Path(os.path.abspath(output_dir))
    try:
        abs_output.mkdir(mode=OUTPUT_DIR_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise OutputDirectoryError(f"Cannot create output directory: {e}") from e
    return abs_output


class BuildPipeline:
    def __init__(
        self,
        config: BuilderConfig,
        source: str,
        output_dir: str | Path,
        *,
        client: httpx.Client | None = None,
        expected_sha256: str | None = None,
    ) -> None:
        self.config = config
        self.source = source
        self.output_dir = output_dir
        self.client = client
        self.expected_sha256 = expected_sha256
        self.stage: BuildStage | None = None

    def _enter(self, stage: BuildStage) -> None:
        logger.debug("Entering build stage", stage=stage.value)
        self.stage = stage

    def run(self) -> list[OutputPackage]:
        """
        Runs every stage in order and returns the packages found afterwards.

        Any SrpmBuilderError from validation, resolution or the build moves
        the pipeline to FAILED and propagates. A downloaded SRPM is removed on
        every exit path.
        """
        with contextlib.ExitStack() as stack:
            try:
                self._enter(BuildStage.VALIDATING)
                validate_environment(self.config)

                self._enter(BuildStage.RESOLVING)
                output_dir = prepare_output_dir(self.output_dir)
                resolved = resolve_source(
                    self.source,
                    client=self.client,
                    expected_sha256=self.expected_sha256,
                    suffix=self.config.source_suffix,
                    fallback=self.config.fallback_filename,
                )
                stack.callback(resolved.release)
                logger.info(
                    "Source resolved",
                    path=str(resolved.path),
                    downloaded=resolved.downloaded,
                    size_bytes=resolved.size_bytes,
                )

                self._enter(BuildStage.BUILDING)
                started = datetime.now().astimezone()
                click.echo(
                    f"[*] Starting kernel build at {started.strftime('%a, %d %b %Y %H:%M:%S %Z')}"
                )
                outcome = BuildOrchestrator(
                    runtime=self.config.runtime,
                    image=self.config.image,
                    input_path=resolved.path,
                    output_dir=output_dir,
                    container_input_path=self.config.container_input_path,
                    container_output_path=self.config.container_output_path,
                ).run()
            except SrpmBuilderError as e:
                logger.debug("Build stage failed", stage=self.stage.value, error=str(e))
                self.stage = BuildStage.FAILED
                raise

            click.secho(
                f"\n[+] Build completed successfully in {format_elapsed(outcome.elapsed_seconds)}",
                fg="green",
            )
            click.echo(f"[*] Output directory: {output_dir}")

            self._enter(BuildStage.REPORTING)
            reader = OutputReader(output_dir, self.config.package_suffix)
            packages = reader.packages()
            click.echo("\n" + reader.get_info(packages))

        self._enter(BuildStage.DONE)
        return packages
