from collections.abc import Callable
import enum
from pathlib import Path

from attrs import define, field

MEBIBYTE: int = 1024 * 1024


class BuildStage(enum.Enum):
    VALIDATING = "validating"
    RESOLVING = "resolving"
    BUILDING = "building"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@define(frozen=True, slots=True)
class ResolvedInput:
    """A local SRPM ready to be mounted into the build container."""

    path: Path
    cleanup: Callable[[], None] | None = field(default=None, eq=False)
    downloaded: bool = False
    size_bytes: int = 0

    def release(self) -> None:
        if self.cleanup is not None:
            self.cleanup()


@define(frozen=True, slots=True)
class BuildOutcome:
    exit_code: int
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@define(frozen=True, slots=True)
class OutputPackage:
    name: str
    size_bytes: int

    @property
    def size_mib(self) -> float:
        return self.size_bytes / MEBIBYTE


def format_mib(size_bytes: int) -> str:
    return f"{size_bytes / MEBIBYTE:.2f} MB"
