"""Resolves a source reference (path or URL) into a local SRPM file."""

import contextlib
import os
from pathlib import Path
import shutil
import tempfile

import click
import httpx
from pyvider.telemetry import logger

from ._version import __version__
from .config import FALLBACK_FILENAME, SOURCE_SUFFIX
from .crypto import verify_sha256
from .exceptions import (
    DownloadError,
    SourceError,
    SourceIsDirectoryError,
    SourceNotFoundError,
)
from .models import ResolvedInput, format_mib

URL_SCHEMES = ("http://", "https://")
TEMP_DIR_PREFIX = "kernel-build-"


def _user_agent() -> str:
    return f"srpm-builder/{__version__}"


def build_client() -> httpx.Client:
    """
    Creates the HTTP client used for downloads.

    Redirects are followed and no timeout applies; a download blocks until it
    completes or the transport fails.
    """
    return httpx.Client(
        timeout=None,
        follow_redirects=True,
        headers={"User-Agent": _user_agent()},
    )


def is_url(reference: str) -> bool:
    return reference.startswith(URL_SCHEMES)


def derive_filename(
    url: str,
    suffix: str = SOURCE_SUFFIX,
    fallback: str = FALLBACK_FILENAME,
) -> str:
    """Uses the last URL segment when it looks like an SRPM, else `fallback`."""
    filename = url.split("/")[-1]
    if not filename.endswith(suffix):
        return fallback
    return filename


def _remove_tree(path: Path) -> None:
    if path.exists():
        logger.debug("Removing temporary download directory", path=str(path))
    shutil.rmtree(path, ignore_errors=True)


def _stream_to_file(client: httpx.Client, url: str, dest: Path) -> int:
    size = 0
    try:
        with client.stream("GET", url) as response:
            logger.info(
                "Download response received",
                url=url,
                status_code=response.status_code,
            )
            if response.status_code != httpx.codes.OK:
                raise DownloadError(f"download failed: HTTP {response.status_code}")
            try:
                with dest.open("wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
                        size += len(chunk)
            except OSError as e:
                raise DownloadError(f"download error: {e}") from e
    except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
        raise DownloadError(f"download failed: {e}") from e
    return size


def _download(
    client: httpx.Client,
    url: str,
    expected_sha256: str | None,
    suffix: str,
    fallback: str,
) -> ResolvedInput:
    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
    except OSError as e:
        raise DownloadError(f"cannot create temp directory: {e}") from e

    def cleanup() -> None:
        _remove_tree(tmp_dir)

    with contextlib.ExitStack() as stack:
        stack.callback(cleanup)

        filename = derive_filename(url, suffix, fallback)
        dest_path = tmp_dir / filename
        size = _stream_to_file(client, url, dest_path)
        if expected_sha256:
            verify_sha256(dest_path, expected_sha256)
            click.secho(f"[+] SHA-256 verified for {filename}", fg="green")

        # The caller owns the directory from here.
        stack.pop_all()

    click.secho(f"[+] Downloaded: {filename} ({format_mib(size)})", fg="green")
    return ResolvedInput(
        path=dest_path, cleanup=cleanup, downloaded=True, size_bytes=size
    )


def download_source(
    url: str,
    *,
    client: httpx.Client | None = None,
    expected_sha256: str | None = None,
    suffix: str = SOURCE_SUFFIX,
    fallback: str = FALLBACK_FILENAME,
) -> ResolvedInput:
    """
    Downloads `url` into a fresh temporary directory.

    The directory is removed before any error leaves this function. On
    success the returned input carries a cleanup action that removes it.
    """
    click.echo(f"[*] Downloading SRPM from: {url}")
    if client is not None:
        return _download(client, url, expected_sha256, suffix, fallback)
    with build_client() as owned_client:
        return _download(owned_client, url, expected_sha256, suffix, fallback)


def resolve_local(path_str: str, *, expected_sha256: str | None = None) -> ResolvedInput:
    abs_path = Path(os.path.abspath(path_str))

    if not abs_path.exists():
        raise SourceNotFoundError(f"SRPM not found: {abs_path}")
    if abs_path.is_dir():
        raise SourceIsDirectoryError(f"path is a directory, not a file: {abs_path}")
    if not os.access(abs_path, os.R_OK):
        raise SourceError(f"SRPM is not readable: {abs_path}")

    if expected_sha256:
        verify_sha256(abs_path, expected_sha256)
        click.secho(f"[+] SHA-256 verified for {abs_path.name}", fg="green")

    click.echo(f"[*] Using local SRPM: {abs_path}")
    return ResolvedInput(path=abs_path, size_bytes=abs_path.stat().st_size)


def resolve_source(
    reference: str,
    *,
    client: httpx.Client | None = None,
    expected_sha256: str | None = None,
    suffix: str = SOURCE_SUFFIX,
    fallback: str = FALLBACK_FILENAME,
) -> ResolvedInput:
    """Returns a local SRPM for `reference`, downloading it when it is a URL."""
    if is_url(reference):
        return download_source(
            reference,
            client=client,
            expected_sha256=expected_sha256,
            suffix=suffix,
            fallback=fallback,
        )
    return resolve_local(reference, expected_sha256=expected_sha256)
