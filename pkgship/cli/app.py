from __future__ import annotations

from pathlib import Path

import typer

from pkgship import __version__
from pkgship.core.config import load_config
from pkgship.core.errors import INTERRUPTED_EXIT_CODE, ErrorCode
from pkgship.core.result import Err
from pkgship.git.repository import Repository
from pkgship.output.console import ConsoleProtocol, RichConsole
from pkgship.output.errors import deploy_error_exit_code, print_deploy_error
from pkgship.output.prompt import PrompterProtocol, TerminalPrompter
from pkgship.services.deploy.tools import PackagingTool, installed_version
from pkgship.services.deploy.workflow import run_deploy


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def deploy_project(
    root: Path,
    *,
    console: ConsoleProtocol,
    prompter: PrompterProtocol,
) -> int:
    """Run the interactive deploy in root and return the process exit code."""
    config_result = load_config(root)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        return int(ErrorCode.USER_ERROR)
    config = config_result.value

    result = run_deploy(
        root=root,
        config=config,
        console=console,
        prompter=prompter,
        tool=PackagingTool(root, executable=config.build_tool),
        repo=Repository(root, git=config.vcs_tool),
        lookup_installed=installed_version,
    )
    if isinstance(result, Err):
        print_deploy_error(result.error, console)
        return deploy_error_exit_code(result.error)
    return int(ErrorCode.OK)


@app.command()
def deploy(
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    """Bump, build and publish the package in the current directory."""
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    console = RichConsole()
    try:
        code = deploy_project(Path.cwd(), console=console, prompter=TerminalPrompter())
    except KeyboardInterrupt:
        console.newline()
        console.warning("Interrupted.")
        raise typer.Exit(code=INTERRUPTED_EXIT_CODE)
    raise typer.Exit(code=code)


def main() -> None:
    app()
