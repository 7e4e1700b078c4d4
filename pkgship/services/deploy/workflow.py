"""The interactive deploy workflow.

Linear steps, no loop-back:

    PRECONDITIONS -> DISCOVER -> SELECT_BUMP -> BUILD -> CONFIRM_PUBLISH
        -> PUBLISH -> TAG -> SUMMARY

Declining a confirmation finishes the run as ``cancelled``. Any Err stops the
run before the next step executes.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from pathlib import Path
from typing import Literal, Protocol

from pkgship.core.config import DeployConfig
from pkgship.core.result import Err, Ok, Result
from pkgship.git.repository import GitError, GitStatus
from pkgship.output.console import ConsoleProtocol, Style
from pkgship.output.prompt import PrompterProtocol, is_yes
from pkgship.services.deploy.artifacts import (
    Artifact,
    clean_artifacts,
    format_size,
    verify_artifacts,
)
from pkgship.services.deploy.errors import DeployError
from pkgship.services.deploy.fsm import StepHandler, StepOutcome, advance, finish, run_steps
from pkgship.services.deploy.manifest import read_manifest_version
from pkgship.services.deploy.semver import (
    BumpChoice,
    SemVer,
    next_versions,
    parse_choice,
    parse_version,
)
from pkgship.services.deploy.tools import NOT_INSTALLED

_MAX_LISTED_CHANGES = 10


class DeployStep(Enum):
    PRECONDITIONS = auto()
    DISCOVER = auto()
    SELECT_BUMP = auto()
    BUILD = auto()
    CONFIRM_PUBLISH = auto()
    PUBLISH = auto()
    TAG = auto()
    SUMMARY = auto()


@dataclass(frozen=True, slots=True)
class DeployOutcome:
    status: Literal["completed", "cancelled"]
    version: str | None = None
    tag: str | None = None

    @property
    def cancelled(self) -> bool:
        return self.status == "cancelled"


@dataclass(frozen=True, slots=True)
class DeployContext:
    """Run state for one deploy. Discarded when the run ends."""

    step: DeployStep
    current_version: SemVer | None = None
    installed_version: str = NOT_INSTALLED
    new_version: str | None = None
    artifacts: tuple[Artifact, ...] = ()
    tag: str | None = None


type StepResult = Result[StepOutcome[DeployContext, DeployOutcome], DeployError]


class PackagingToolProtocol(Protocol):
    def is_available(self) -> bool: ...

    def bump(self, kind: BumpChoice) -> Result[None, DeployError]: ...

    def build(self) -> Result[None, DeployError]: ...

    def publish(self) -> Result[None, DeployError]: ...


class RepositoryProtocol(Protocol):
    def status(self) -> Result[GitStatus, GitError]: ...

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]: ...


class InstalledVersionLookup(Protocol):
    def __call__(self, import_name: str, *, cwd: Path) -> str: ...


def _cancelled(console: ConsoleProtocol, ctx: DeployContext) -> DeployOutcome:
    console.info("Deployment cancelled.")
    version = ctx.new_version
    if version is None and ctx.current_version is not None:
        version = str(ctx.current_version)
    return DeployOutcome(status="cancelled", version=version)


def _git_failed(error: GitError) -> DeployError:
    if error.returncode == -1:
        return DeployError(kind="tool_missing", message=f"could not start git: {error.message}")
    return DeployError(
        kind="tool_failed",
        message=f"git {error.command} failed (exit {error.returncode}): {error.message}",
        returncode=error.returncode,
    )


@dataclass(frozen=True, slots=True)
class DeployWorkflow:
    """Collaborators for one run, bound once and shared by every step."""

    root: Path
    config: DeployConfig
    console: ConsoleProtocol
    prompter: PrompterProtocol
    tool: PackagingToolProtocol
    repo: RepositoryProtocol
    lookup_installed: InstalledVersionLookup

    @property
    def manifest_path(self) -> Path:
        return self.root / self.config.manifest

    def handlers(self) -> dict[DeployStep, StepHandler[DeployContext, DeployOutcome]]:
        return {
            DeployStep.PRECONDITIONS: self.check_preconditions,
            DeployStep.DISCOVER: self.discover_versions,
            DeployStep.SELECT_BUMP: self.select_bump,
            DeployStep.BUILD: self.build,
            DeployStep.CONFIRM_PUBLISH: self.confirm_publish,
            DeployStep.PUBLISH: self.publish,
            DeployStep.TAG: self.offer_tag,
            DeployStep.SUMMARY: self.summarize,
        }

    def run(self) -> Result[DeployOutcome, DeployError]:
        return run_steps(
            initial_state=DeployContext(step=DeployStep.PRECONDITIONS),
            get_step=lambda ctx: ctx.step,
            handlers=self.handlers(),
        )

    def check_preconditions(self, ctx: DeployContext) -> StepResult:
        console = self.console
        if not self.manifest_path.is_file():
            return Err(
                DeployError(
                    kind="manifest_missing",
                    message=(
                        f"{self.config.manifest} not found. "
                        "Please run this from the project directory."
                    ),
                )
            )

        if not self.tool.is_available():
            tool = self.config.build_tool
            return Err(
                DeployError(
                    kind="tool_missing",
                    message=f"{tool} is not installed. Please install {tool} first.",
                )
            )

        status = self.repo.status()
        if isinstance(status, Err):
            console.warning(f"Could not read git status ({status.error.message}); skipping check.")
        elif not status.value.is_clean:
            console.warning(
                "You have uncommitted changes. Consider committing them before deployment."
            )
            entries = status.value.entries
            for entry in entries[:_MAX_LISTED_CHANGES]:
                console.print(f"  {entry.pretty_xy()} {entry.path}", Style.DIM)
            if len(entries) > _MAX_LISTED_CHANGES:
                console.print(f"  ... and {len(entries) - _MAX_LISTED_CHANGES} more", Style.DIM)
            if not is_yes(self.prompter.key("Continue anyway? (y/N): ")):
                return Ok(finish(_cancelled(console, ctx)))

        return Ok(advance(replace(ctx, step=DeployStep.DISCOVER)))

    def discover_versions(self, ctx: DeployContext) -> StepResult:
        current = read_manifest_version(self.manifest_path)
        if isinstance(current, Err):
            return current
        installed = self.lookup_installed(self.config.import_name, cwd=self.root)

        self.console.info(f"Current version in {self.config.manifest}: {current.value}")
        self.console.info(f"Currently installed version: {installed}")

        parsed = parse_version(current.value)
        if isinstance(parsed, Err):
            return parsed

        return Ok(
            advance(
                replace(
                    ctx,
                    step=DeployStep.SELECT_BUMP,
                    current_version=parsed.value,
                    installed_version=installed,
                )
            )
        )

    def select_bump(self, ctx: DeployContext) -> StepResult:
        console = self.console
        current = ctx.current_version
        if current is None:
            raise AssertionError("version bump selected before version discovery")
        candidates = next_versions(current)

        labels = {
            BumpChoice.PATCH: f"patch ({current} -> {candidates.patch})",
            BumpChoice.MINOR: f"minor ({current} -> {candidates.minor})",
            BumpChoice.MAJOR: f"major ({current} -> {candidates.major})",
            BumpChoice.SKIP: "Skip version bump",
        }
        console.header("Select version bump type:")
        for option in BumpChoice:
            console.print(f"{option.menu_key}) {labels[option]}")
        choice = parse_choice(self.prompter.key("Enter choice (1-4): "))

        if choice is None:
            return Err(DeployError(kind="invalid_choice", message="Invalid choice. Exiting."))

        if choice is BumpChoice.SKIP:
            console.info("Skipping version bump...")
        else:
            console.info(f"Bumping {choice.value} version...")
            bumped = self.tool.bump(choice)
            if isinstance(bumped, Err):
                return bumped

        new_version = read_manifest_version(self.manifest_path)
        if isinstance(new_version, Err):
            return new_version
        console.info(f"New version: {new_version.value}")

        return Ok(advance(replace(ctx, step=DeployStep.BUILD, new_version=new_version.value)))

    def build(self, ctx: DeployContext) -> StepResult:
        console = self.console
        console.info("Cleaning previous builds...")
        cleaned = clean_artifacts(self.root, self.config)
        if isinstance(cleaned, Err):
            return cleaned

        console.info("Building package...")
        built = self.tool.build()
        if isinstance(built, Err):
            return built

        artifacts = verify_artifacts(self.root / self.config.dist_dir)
        if isinstance(artifacts, Err):
            return artifacts
        console.success("Package built successfully!")

        console.newline()
        console.info("Files to be uploaded:")
        for artifact in artifacts.value:
            console.print(f"  {artifact.name}  ({format_size(artifact.size)})", Style.DIM)

        return Ok(
            advance(
                replace(ctx, step=DeployStep.CONFIRM_PUBLISH, artifacts=tuple(artifacts.value))
            )
        )

    def confirm_publish(self, ctx: DeployContext) -> StepResult:
        self.console.newline()
        answer = self.prompter.key(f"Deploy to {self.config.index_name}? (y/N): ")
        if not is_yes(answer):
            return Ok(finish(_cancelled(self.console, ctx)))
        return Ok(advance(replace(ctx, step=DeployStep.PUBLISH)))

    def publish(self, ctx: DeployContext) -> StepResult:
        index = self.config.index_name
        self.console.info(f"Deploying to {index}...")
        published = self.tool.publish()
        if isinstance(published, Err):
            return published

        self.console.success(f"Package deployed successfully to {index}!")
        self.console.info(f"Version {ctx.new_version} is now available on {index}.")
        return Ok(advance(replace(ctx, step=DeployStep.TAG)))

    def offer_tag(self, ctx: DeployContext) -> StepResult:
        console = self.console
        version = ctx.new_version or ""
        answer = self.prompter.key(f"Create git tag for version {version}? (y/N): ")
        if not is_yes(answer):
            return Ok(advance(replace(ctx, step=DeployStep.SUMMARY)))

        tag = self.config.tag_name(version)
        console.info("Creating git tag...")
        created = self.repo.create_annotated_tag(tag, f"Release version {version}")
        if isinstance(created, Err):
            return Err(_git_failed(created.error))

        console.success(f"Git tag {tag} created!")
        console.warning(f"Don't forget to push the tag: git push origin {tag}")
        return Ok(advance(replace(ctx, step=DeployStep.SUMMARY, tag=tag)))

    def summarize(self, ctx: DeployContext) -> StepResult:
        console = self.console
        console.newline()
        console.success("Deployment completed successfully!")
        console.info(f"Package: {self.config.package}")
        console.info(f"Version: {ctx.new_version}")
        console.info(f"{self.config.index_name} URL: {self.config.project_url}")
        return Ok(finish(DeployOutcome(status="completed", version=ctx.new_version, tag=ctx.tag)))


def run_deploy(
    *,
    root: Path,
    config: DeployConfig,
    console: ConsoleProtocol,
    prompter: PrompterProtocol,
    tool: PackagingToolProtocol,
    repo: RepositoryProtocol,
    lookup_installed: InstalledVersionLookup,
) -> Result[DeployOutcome, DeployError]:
    return DeployWorkflow(
        root=root,
        config=config,
        console=console,
        prompter=prompter,
        tool=tool,
        repo=repo,
        lookup_installed=lookup_installed,
    ).run()
