"""Release packaging and publication workflow."""

from .errors import DeployError
from .semver import BumpChoice, SemVer, next_versions, parse_choice, parse_version
from .tools import PackagingTool, installed_version
from .workflow import DeployContext, DeployOutcome, DeployStep, DeployWorkflow, run_deploy

__all__ = [
    "BumpChoice",
    "DeployContext",
    "DeployError",
    "DeployOutcome",
    "DeployStep",
    "DeployWorkflow",
    "PackagingTool",
    "SemVer",
    "installed_version",
    "next_versions",
    "parse_choice",
    "parse_version",
    "run_deploy",
]
