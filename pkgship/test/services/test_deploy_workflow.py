from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from pkgship.core.config import DeployConfig
from pkgship.core.result import Err, Ok, Result
from pkgship.git.repository import GitError, GitStatus, StatusEntry
from pkgship.output.console import MockConsole, Style
from pkgship.output.prompt import ScriptedPrompter
from pkgship.services.deploy.errors import DeployError
from pkgship.services.deploy.semver import BumpChoice, SemVer
from pkgship.services.deploy.workflow import DeployOutcome, run_deploy

MANIFEST = '[tool.poetry]\nname = "echo_sdk"\nversion = "{version}"\n'


def _manifest_version(root: Path) -> str:
    m = re.search(r'^version = "(.*)"', (root / "pyproject.toml").read_text(), re.MULTILINE)
    assert m is not None
    return m.group(1)


@dataclass
class FakeTool:
    """Stands in for poetry: rewrites the manifest and produces dist files."""

    root: Path
    available: bool = True
    produce_artifacts: bool = True
    fail_on: str | None = None
    calls: list[str] = field(default_factory=list)

    def is_available(self) -> bool:
        return self.available

    def bump(self, kind: BumpChoice) -> Result[None, DeployError]:
        self.calls.append(f"version {kind.value}")
        if self.fail_on == "version":
            return Err(
                DeployError(kind="tool_failed", message="poetry version failed", returncode=1)
            )
        parts = [int(p) for p in _manifest_version(self.root).split(".")]
        bumped = SemVer(*parts).bump(kind)
        (self.root / "pyproject.toml").write_text(MANIFEST.format(version=bumped))
        return Ok(None)

    def build(self) -> Result[None, DeployError]:
        self.calls.append("build")
        if self.fail_on == "build":
            return Err(
                DeployError(kind="tool_failed", message="poetry build failed", returncode=2)
            )
        if self.produce_artifacts:
            dist = self.root / "dist"
            dist.mkdir()
            version = _manifest_version(self.root)
            (dist / f"echo_sdk-{version}.tar.gz").write_bytes(b"sdist")
            (dist / f"echo_sdk-{version}-py3-none-any.whl").write_bytes(b"wheel")
        return Ok(None)

    def publish(self) -> Result[None, DeployError]:
        self.calls.append("publish")
        if self.fail_on == "publish":
            return Err(
                DeployError(kind="tool_failed", message="poetry publish failed", returncode=1)
            )
        return Ok(None)


@dataclass
class FakeRepo:
    status_result: Result[GitStatus, GitError] = field(default_factory=lambda: Ok(GitStatus()))
    tag_result: Result[None, GitError] = field(default_factory=lambda: Ok(None))
    tags: list[tuple[str, str]] = field(default_factory=list)

    def status(self) -> Result[GitStatus, GitError]:
        return self.status_result

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        self.tags.append((name, message))
        return self.tag_result


def _installed(import_name: str, *, cwd: Path) -> str:
    return "1.0.0"


@dataclass
class Harness:
    root: Path
    tool: FakeTool
    repo: FakeRepo
    console: MockConsole = field(default_factory=MockConsole)
    prompter: ScriptedPrompter = field(default_factory=ScriptedPrompter)

    def run(self, *answers: str) -> Result[DeployOutcome, DeployError]:
        self.prompter = ScriptedPrompter(answers=list(answers))
        return run_deploy(
            root=self.root,
            config=DeployConfig(package="echo_sdk", import_name="echo_sdk"),
            console=self.console,
            prompter=self.prompter,
            tool=self.tool,
            repo=self.repo,
            lookup_installed=_installed,
        )


@pytest.fixture
def harness(tmp_path: Path) -> Harness:
    (tmp_path / "pyproject.toml").write_text(MANIFEST.format(version="1.0.0"))
    return Harness(root=tmp_path, tool=FakeTool(root=tmp_path), repo=FakeRepo())


def _dirty() -> Ok[GitStatus]:
    return Ok(GitStatus(entries=(StatusEntry(xy=" M", path="README.md"),)))


class TestHappyPath:
    def test_minor_bump_publish_without_tag(self, harness: Harness) -> None:
        result = harness.run("2", "y", "n")

        assert result == Ok(DeployOutcome(status="completed", version="1.1.0"))
        assert _manifest_version(harness.root) == "1.1.0"
        assert harness.tool.calls == ["version minor", "build", "publish"]
        assert harness.tool.calls.count("publish") == 1
        assert harness.repo.tags == []

    def test_summary_lines(self, harness: Harness) -> None:
        harness.run("1", "y", "n")

        text = harness.console.text
        assert "[INFO] Current version in pyproject.toml: 1.0.0" in text
        assert "[INFO] Currently installed version: 1.0.0" in text
        assert "[INFO] New version: 1.0.1" in text
        assert "[SUCCESS] Deployment completed successfully!" in text
        assert "[INFO] Package: echo_sdk" in text
        assert "[INFO] Version: 1.0.1" in text
        assert "[INFO] PyPI URL: https://pypi.org/project/echo_sdk/" in text

    def test_menu_lists_candidates(self, harness: Harness) -> None:
        (harness.root / "pyproject.toml").write_text(MANIFEST.format(version="2.3.7"))

        harness.run("4", "n")

        messages = harness.console.messages
        assert "1) patch (2.3.7 -> 2.3.8)" in messages
        assert "2) minor (2.3.7 -> 2.4.0)" in messages
        assert "3) major (2.3.7 -> 3.0.0)" in messages
        assert "4) Skip version bump" in messages
        title = harness.console.find("Select version bump type:")
        assert [r.style for r in title] == [Style.HEADER]

    def test_artifacts_listed_before_publish_prompt(self, harness: Harness) -> None:
        harness.run("3", "n")

        text = harness.console.text
        assert "echo_sdk-2.0.0.tar.gz" in text
        assert "echo_sdk-2.0.0-py3-none-any.whl" in text
        assert harness.prompter.asked[-1] == "Deploy to PyPI? (y/N): "

    def test_skip_bump_keeps_version(self, harness: Harness) -> None:
        result = harness.run("4", "y", "n")

        assert isinstance(result, Ok)
        assert result.value.version == "1.0.0"
        assert harness.tool.calls == ["build", "publish"]
        assert "[INFO] Skipping version bump..." in harness.console.text

    def test_previous_artifacts_are_cleared(self, harness: Harness) -> None:
        stale = harness.root / "dist" / "echo_sdk-0.9.0.tar.gz"
        stale.parent.mkdir()
        stale.write_bytes(b"old")
        (harness.root / "build").mkdir()
        (harness.root / "echo_sdk.egg-info").mkdir()

        harness.run("1", "y", "n")

        assert not stale.exists()
        assert not (harness.root / "build").exists()
        assert not (harness.root / "echo_sdk.egg-info").exists()


class TestTag:
    def test_tag_created_when_confirmed(self, harness: Harness) -> None:
        result = harness.run("2", "y", "Y")

        assert result == Ok(DeployOutcome(status="completed", version="1.1.0", tag="v1.1.0"))
        assert harness.repo.tags == [("v1.1.0", "Release version 1.1.0")]
        assert "[SUCCESS] Git tag v1.1.0 created!" in harness.console.text
        assert "git push origin v1.1.0" in harness.console.text

    def test_tag_failure_propagates(self, harness: Harness) -> None:
        harness.repo.tag_result = Err(
            GitError(command="tag -a v1.1.0", message="already exists", returncode=128)
        )

        result = harness.run("2", "y", "y")

        assert isinstance(result, Err)
        assert result.error.kind == "tool_failed"
        assert result.error.returncode == 128
        assert not harness.console.find("Deployment completed")


class TestCancellation:
    def test_dirty_tree_declined(self, harness: Harness) -> None:
        harness.repo.status_result = _dirty()

        result = harness.run("n")

        assert isinstance(result, Ok)
        assert result.value.cancelled
        assert harness.tool.calls == []
        assert "[INFO] Deployment cancelled." in harness.console.text
        assert ".M README.md" in harness.console.text

    def test_dirty_tree_listing_is_capped(self, harness: Harness) -> None:
        entries = tuple(StatusEntry(xy="??", path=f"scratch_{i}.txt") for i in range(12))
        harness.repo.status_result = Ok(GitStatus(entries=entries))

        harness.run("n")

        assert harness.console.find("scratch_9.txt")
        assert not harness.console.find("scratch_10.txt")
        assert "  ... and 2 more" in harness.console.messages

    @pytest.mark.parametrize("answer", ["", "n", "x", "1"])
    def test_dirty_tree_anything_but_y_cancels(self, harness: Harness, answer: str) -> None:
        harness.repo.status_result = _dirty()

        result = harness.run(answer)

        assert isinstance(result, Ok)
        assert result.value.cancelled
        assert _manifest_version(harness.root) == "1.0.0"

    def test_dirty_tree_accepted(self, harness: Harness) -> None:
        harness.repo.status_result = _dirty()

        result = harness.run("y", "1", "y", "n")

        assert result == Ok(DeployOutcome(status="completed", version="1.0.1"))
        assert harness.console.has_warning()

    @pytest.mark.parametrize("answer", ["", "n", "N", "q"])
    def test_publish_declined(self, harness: Harness, answer: str) -> None:
        result = harness.run("1", answer)

        assert isinstance(result, Ok)
        assert result.value.cancelled
        assert "publish" not in harness.tool.calls
        assert harness.repo.tags == []
        assert len(harness.prompter.asked) == 2

    def test_git_status_unavailable_is_skipped(self, harness: Harness) -> None:
        harness.repo.status_result = Err(
            GitError(command="status", message="not a git repository", returncode=128)
        )

        result = harness.run("1", "n")

        assert isinstance(result, Ok)
        assert harness.console.find("skipping check")


class TestFailures:
    def test_missing_manifest(self, harness: Harness) -> None:
        (harness.root / "pyproject.toml").unlink()

        result = harness.run()

        assert isinstance(result, Err)
        assert result.error.kind == "manifest_missing"
        assert harness.tool.calls == []

    def test_missing_tool(self, harness: Harness) -> None:
        harness.tool.available = False

        result = harness.run()

        assert isinstance(result, Err)
        assert result.error.kind == "tool_missing"
        assert "poetry is not installed" in result.error.message

    @pytest.mark.parametrize("key", ["5", "a", "", "0"])
    def test_invalid_choice(self, harness: Harness, key: str) -> None:
        result = harness.run(key)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_choice"
        assert result.error.message == "Invalid choice. Exiting."
        assert _manifest_version(harness.root) == "1.0.0"
        assert harness.tool.calls == []

    def test_malformed_version_stops_before_menu(self, harness: Harness) -> None:
        (harness.root / "pyproject.toml").write_text(MANIFEST.format(version="1.0"))

        result = harness.run("1")

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_version"
        assert harness.prompter.asked == []
        assert harness.tool.calls == []

    def test_no_artifacts(self, harness: Harness) -> None:
        harness.tool.produce_artifacts = False

        result = harness.run("1", "y", "y")

        assert isinstance(result, Err)
        assert result.error.kind == "build_failed"
        assert "publish" not in harness.tool.calls
        assert len(harness.prompter.asked) == 1

    @pytest.mark.parametrize(
        ("fail_on", "expected_calls"),
        [
            ("version", ["version patch"]),
            ("build", ["version patch", "build"]),
            ("publish", ["version patch", "build", "publish"]),
        ],
    )
    def test_tool_failure_stops_run(
        self, harness: Harness, fail_on: str, expected_calls: list[str]
    ) -> None:
        harness.tool.fail_on = fail_on

        result = harness.run("1", "y", "y")

        assert isinstance(result, Err)
        assert result.error.kind == "tool_failed"
        assert harness.tool.calls == expected_calls
        assert harness.repo.tags == []
