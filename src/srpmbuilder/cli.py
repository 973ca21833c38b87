"""The `build-stream8-kernel` command-line interface."""

from pathlib import Path
import re

import click

from ._version import __version__
from .config import DEFAULT_IMAGE, DEFAULT_RUNTIME, build_config, load_config
from .exceptions import BuildFailedError, ConfigError, SrpmBuilderError
from .pipeline import BuildPipeline

PROG_NAME = "build-stream8-kernel"
SHA256_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


def usage_text(runtime: str = DEFAULT_RUNTIME, image: str = DEFAULT_IMAGE) -> str:
    name = Path(runtime).name.capitalize()
    return "\n".join(
        [
            "CentOS Stream 8 Kernel Build Tool",
            "",
            "Usage:",
            f"  {PROG_NAME} <srpm_or_url> <output_directory>",
            "",
            "Examples:",
            f"  {PROG_NAME} kernel-4.18.0-448.el8.src.rpm ./output",
            f"  {PROG_NAME} https://vault.centos.org/.../kernel-4.18.0-448.el8.src.rpm ./output",
            "",
            "Requirements:",
            f"  - {name} must be installed and running",
            f"  - {name} image '{image}' must be built first",
            "",
            f"Build the {name} image:",
            f"  cd docker && {runtime} build -t {image} .",
        ]
    )


@click.command(
    PROG_NAME,
    context_settings=dict(help_option_names=["-h", "--help"]),
)
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name=PROG_NAME,
    message="%(prog)s version %(version)s",
)
@click.argument("args", nargs=-1, metavar="<srpm_or_url> <output_directory>")
@click.option(
    "--runtime",
    envvar="SRPMBUILDER_RUNTIME",
    help=f"Container runtime executable. [default: {DEFAULT_RUNTIME}]",
)
@click.option(
    "--image",
    envvar="SRPMBUILDER_IMAGE",
    help=f"Pre-built build image name. [default: {DEFAULT_IMAGE}]",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, resolve_path=True),
    help="TOML file with a [tool.srpmbuilder] table.",
)
@click.option(
    "--sha256",
    help="Expected SHA-256 digest of the SRPM; the build is refused on mismatch.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    args: tuple[str, ...],
    runtime: str | None,
    image: str | None,
    config_path: str | None,
    sha256: str | None,
) -> None:
    """Builds a kernel SRPM into binary RPMs inside a container."""
    if len(args) != 2:
        click.echo(usage_text(runtime or DEFAULT_RUNTIME, image or DEFAULT_IMAGE))
        ctx.exit(1)

    source, output_dir = args
    try:
        if sha256 and not SHA256_PATTERN.fullmatch(sha256):
            raise ConfigError(f"--sha256 must be 64 hex characters, got '{sha256}'")
        file_values = load_config(Path(config_path) if config_path else None)
        config = build_config(file_values, runtime=runtime, image=image)
        BuildPipeline(config, source, output_dir, expected_sha256=sha256).run()
    except BuildFailedError as e:
        click.secho(f"[ERROR] Build failed: {e}", fg="red", err=True)
        raise click.Abort() from e
    except SrpmBuilderError as e:
        click.secho(f"[ERROR] {e}", fg="red", err=True)
        raise click.Abort() from e


main = cli
