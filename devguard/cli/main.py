"""Main CLI Module - Command-line interface for devguard."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from .. import __version__
from ..config import CONFIG_FILENAME, load_config, write_default_config
from ..core.runner import (
    ENV_ONLY,
    FULL,
    GIT_ONLY,
    SECRETS_ONLY,
    SUPABASE_VERIFY,
    RunProfile,
    run_checks,
)
from ..errors import DevguardError
from ..reporters import JSONReporter, TextReporter
from ..utils.logger import configure_logging

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_OK = 0
EXIT_POLICY_FAILED = 1
EXIT_ERROR = 2


def run_options(func):
    """Attach the options shared by every run command."""
    func = click.option("--json", "json_output", is_flag=True, help="Emit a JSON report")(func)
    func = click.option("--config", "config_path", type=click.Path(dir_okay=False),
                        help="Path to devguard.toml (default: ./devguard.toml)")(func)
    func = click.option("--path", "path", default=".", show_default=True,
                        help="Repository to audit")(func)
    return func


def _fail(message: str) -> None:
    err_console.print(f"error: {message}", markup=False, highlight=False, soft_wrap=True)
    sys.exit(EXIT_ERROR)


def _execute(
    path: str,
    config_path: Optional[str],
    json_output: bool,
    profile: RunProfile,
    force: bool = False,
) -> None:
    """Load config, run a profile, emit the report and exit with the verdict."""
    cwd = Path.cwd()
    try:
        config = load_config(config_path, cwd)
        repo_root = Path(path)
        if not repo_root.is_absolute():
            repo_root = cwd / repo_root
        report = asyncio.run(run_checks(repo_root, config, profile, force=force))
    except DevguardError as e:
        _fail(str(e))
        return

    if json_output or config.general.json_output:
        reporter = JSONReporter(console)
    else:
        reporter = TextReporter(console)
    reporter.emit(report)

    sys.exit(EXIT_OK if report.passed else EXIT_POLICY_FAILED)


@click.group()
@click.version_option(version=__version__, prog_name="devguard")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs on stderr")
def cli(verbose: bool):
    """devguard - Catch repo footguns before they reach production."""
    configure_logging(verbose)


@cli.command("check")
@run_options
def check(path: str, config_path: Optional[str], json_output: bool):
    """Run every check and provider."""
    _execute(path, config_path, json_output, FULL)


@cli.command("init")
@click.option("--config", "config_path", type=click.Path(), help="Ignored; init always writes ./devguard.toml")
def init(config_path: Optional[str]):
    """Write a default devguard.toml to the current directory."""
    if config_path is not None:
        err_console.print(
            f"warning: --config is ignored by `devguard init`; writing ./{CONFIG_FILENAME}",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    try:
        created = write_default_config(Path.cwd() / CONFIG_FILENAME)
    except DevguardError as e:
        _fail(str(e))
        return
    console.print(f"created {created}", markup=False, highlight=False)


@cli.group("scan")
def scan_group():
    """Scan the repository content."""


@scan_group.command("secrets")
@run_options
def scan_secrets(path: str, config_path: Optional[str], json_output: bool):
    """Scan files for committed secrets."""
    _execute(path, config_path, json_output, SECRETS_ONLY)


@cli.group("env")
def env_group():
    """Environment variable checks."""


@env_group.command("validate")
@run_options
def env_validate(path: str, config_path: Optional[str], json_output: bool):
    """Validate required keys, example drift and forbidden env files."""
    _execute(path, config_path, json_output, ENV_ONLY)


@cli.group("git")
def git_group():
    """Git repository checks."""


@git_group.command("health")
@run_options
def git_health(path: str, config_path: Optional[str], json_output: bool):
    """Report working tree state, HEAD and large files."""
    _execute(path, config_path, json_output, GIT_ONLY)


@cli.group("supabase")
def supabase_group():
    """Supabase checks."""


@supabase_group.command("verify")
@run_options
@click.option("--force", is_flag=True, help="Run Supabase checks even if Supabase is not detected")
def supabase_verify(path: str, config_path: Optional[str], json_output: bool, force: bool):
    """Run secrets, env and Supabase checks."""
    _execute(path, config_path, json_output, SUPABASE_VERIFY, force=force)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
