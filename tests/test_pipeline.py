"""Tests for the BuildPipeline stage sequence."""

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from srpmbuilder.config import BuilderConfig
from srpmbuilder.exceptions import (
    BuildFailedError,
    DownloadError,
    ImageNotFoundError,
    OutputDirectoryError,
    SourceNotFoundError,
)
from srpmbuilder.models import BuildStage
from srpmbuilder.pipeline import BuildPipeline, format_elapsed, prepare_output_dir


@pytest.mark.parametrize(
    "seconds, expected",
    [(0.2, "0s"), (45.4, "45s"), (125, "2m5s"), (3723.6, "1h2m4s")],
)
def test_format_elapsed(seconds: float, expected: str) -> None:
    assert format_elapsed(seconds) == expected


def test_prepare_output_dir_creates(tmp_path: Path) -> None:
    out = prepare_output_dir(tmp_path / "a" / "b")
    assert out.is_dir()
    assert out.is_absolute()


def test_prepare_output_dir_rejects_file(tmp_path: Path) -> None:
    blocker = tmp_path / "out"
    blocker.write_text("not a directory")
    with pytest.raises(OutputDirectoryError, match="Cannot create output directory"):
        prepare_output_dir(blocker)


def test_pipeline_local_success(fake_runtime, srpm_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"
    pipeline = BuildPipeline(BuilderConfig(), str(srpm_file), str(out_dir))

    packages = pipeline.run()

    assert pipeline.stage is BuildStage.DONE
    assert out_dir.is_dir()
    assert fake_runtime.actions() == ["version", "images", "run"]
    command = fake_runtime.run_command()
    assert f"{srpm_file}:/input.src.rpm:ro" in command
    assert f"{out_dir}:/out" in command
    assert sorted(p.name for p in packages) == sorted(fake_runtime.produced)
    sizes = {p.name: p.size_mib for p in packages}
    assert sizes["kernel-4.18.0-448.el8.x86_64.rpm"] == 3.0
    assert sizes["kernel-devel-4.18.0-448.el8.x86_64.rpm"] == 0.5


def test_pipeline_validation_failure_skips_everything(
    fake_runtime, srpm_file: Path, tmp_path: Path
) -> None:
    fake_runtime.image_id = ""
    out_dir = tmp_path / "out"
    pipeline = BuildPipeline(BuilderConfig(), str(srpm_file), str(out_dir))

    with pytest.raises(ImageNotFoundError):
        pipeline.run()

    assert pipeline.stage is BuildStage.FAILED
    assert "run" not in fake_runtime.actions()
    assert not out_dir.exists()


def test_pipeline_missing_source_never_builds(fake_runtime, tmp_path: Path) -> None:
    pipeline = BuildPipeline(
        BuilderConfig(), str(tmp_path / "missing.src.rpm"), str(tmp_path / "out")
    )
    with pytest.raises(SourceNotFoundError):
        pipeline.run()
    assert pipeline.stage is BuildStage.FAILED
    assert "run" not in fake_runtime.actions()


def test_pipeline_build_failure_skips_report(
    fake_runtime, srpm_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    fake_runtime.run_returncode = 1
    out_dir = tmp_path / "out"
    pipeline = BuildPipeline(BuilderConfig(), str(srpm_file), str(out_dir))

    with pytest.raises(BuildFailedError):
        pipeline.run()

    assert pipeline.stage is BuildStage.FAILED
    assert "Built packages" not in capsys.readouterr().out


def test_pipeline_download_cleaned_up_after_success(
    fake_runtime,
    temp_root: Path,
    tmp_path: Path,
    make_client: Callable[..., httpx.Client],
    srpm_bytes: bytes,
) -> None:
    client = make_client(lambda request: httpx.Response(200, content=srpm_bytes))
    pipeline = BuildPipeline(
        BuilderConfig(),
        "https://example.test/kernel-4.18.0-448.el8.src.rpm",
        str(tmp_path / "out"),
        client=client,
    )

    pipeline.run()

    mount = next(arg for arg in fake_runtime.run_command() if arg.endswith(":ro"))
    assert Path(mount.split(":")[0]).name == "kernel-4.18.0-448.el8.src.rpm"
    assert list(temp_root.iterdir()) == []


def test_pipeline_download_cleaned_up_after_build_failure(
    fake_runtime,
    temp_root: Path,
    tmp_path: Path,
    make_client: Callable[..., httpx.Client],
    srpm_bytes: bytes,
) -> None:
    fake_runtime.run_returncode = 3
    client = make_client(lambda request: httpx.Response(200, content=srpm_bytes))
    pipeline = BuildPipeline(
        BuilderConfig(), "https://example.test/kernel.src.rpm", str(tmp_path / "out"), client=client
    )

    with pytest.raises(BuildFailedError):
        pipeline.run()
    assert list(temp_root.iterdir()) == []


def test_pipeline_download_404(
    fake_runtime, temp_root: Path, tmp_path: Path, make_client: Callable[..., httpx.Client]
) -> None:
    client = make_client(lambda request: httpx.Response(404))
    pipeline = BuildPipeline(
        BuilderConfig(), "https://example.test/missing.src.rpm", str(tmp_path / "out"), client=client
    )

    with pytest.raises(DownloadError, match="404"):
        pipeline.run()
    assert pipeline.stage is BuildStage.FAILED
    assert "run" not in fake_runtime.actions()
    assert list(temp_root.iterdir()) == []
