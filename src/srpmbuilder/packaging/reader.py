"""Reads back the packages a build wrote into the output directory."""

from pathlib import Path

from pyvider.telemetry import logger

from ..config import PACKAGE_SUFFIX
from ..models import OutputPackage


class OutputReader:
    """Lists built packages. Unreadable entries are skipped, never fatal."""

    def __init__(self, output_dir: Path, suffix: str = PACKAGE_SUFFIX) -> None:
        self.output_dir = output_dir
        self.suffix = suffix

    def packages(self) -> list[OutputPackage]:
        try:
            entries = sorted(self.output_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            logger.debug(
                "Output directory could not be listed",
                path=str(self.output_dir),
                error=str(e),
            )
            return []

        found = []
        for entry in entries:
            if not entry.name.endswith(self.suffix):
                continue
            try:
                if not entry.is_file():
                    continue
                size = entry.stat().st_size
            except OSError as e:
                logger.debug("Skipping unreadable entry", path=str(entry), error=str(e))
                continue
            found.append(OutputPackage(name=entry.name, size_bytes=size))
        return found

    def get_info(self, packages: list[OutputPackage] | None = None) -> str:
        """Returns a human-readable listing of the built packages."""
        if packages is None:
            packages = self.packages()
        lines = ["[*] Built packages:"]
        for package in packages:
            lines.append(f"  {package.name} ({package.size_mib:.2f} MB)")
        return "\n".join(lines)
