"""
This package builds kernel source RPMs into binary RPMs by running a
pre-built build image through a container runtime such as Docker.
"""

from ._version import __version__
from .config import BuilderConfig
from .exceptions import SrpmBuilderError
from .models import BuildOutcome, BuildStage, OutputPackage, ResolvedInput
from .packaging.orchestrator import BuildOrchestrator
from .pipeline import BuildPipeline

__all__ = [
    "BuildOrchestrator",
    "BuildOutcome",
    "BuildPipeline",
    "BuildStage",
    "BuilderConfig",
    "OutputPackage",
    "ResolvedInput",
    "SrpmBuilderError",
    "__version__",
]
