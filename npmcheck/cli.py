"""CLI entry point: npmcheck.

Subcommands:
    npmcheck locate [--dir DIR]                      # print nearest package.json
    npmcheck check eslint@^8 prettier --dev          # check declared dependencies
    npmcheck install-dev eslint@^8 prettier          # npm install --save-dev
"""

from __future__ import annotations

import json
import sys

import click

from npmcheck.core.logging import setup_logging
from npmcheck.engines.dependency_checker import (
    DependencyChecker,
    DependencyScope,
    install_dev_dependency,
    locate_manifest,
)
from npmcheck.exceptions import NpmCheckError

EXIT_UNSATISFIED = 1
EXIT_ERROR = 2


def _parse_package_spec(spec: str) -> tuple[str, str]:
    """Split ``name@range`` into (name, range); a bare name means any version.

    Scoped names keep their leading ``@``: ``@babel/core@^7`` -> (``@babel/core``, ``^7``).
    """
    at = spec.rfind("@")
    if at <= 0:
        return spec, "*"
    return spec[:at], spec[at + 1 :] or "*"


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """npmcheck: find package.json and check declared npm dependencies."""
    setup_logging("DEBUG" if verbose else None)


@main.command("locate")
@click.option("--dir", "start_dir", default=None, help="Directory to start searching from")
def locate(start_dir: str | None) -> None:
    """Print the path of the nearest package.json."""
    path = locate_manifest(start_dir)
    if path is None:
        click.echo("No package.json found.", err=True)
        sys.exit(EXIT_UNSATISFIED)
    click.echo(str(path))


@main.command("check")
@click.argument("packages", nargs=-1, required=True)
@click.option("--prod", "direct", is_flag=True, help="Check dependencies (default)")
@click.option("--dev", is_flag=True, help="Check devDependencies")
@click.option("--dir", "start_dir", default=None, help="Directory to start searching from")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check(
    packages: tuple[str, ...],
    direct: bool,
    dev: bool,
    start_dir: str | None,
    as_json: bool,
) -> None:
    """Check that PACKAGES (name or name@range) are declared in package.json."""
    requested = dict(_parse_package_spec(p) for p in packages)
    scope = DependencyScope(
        dependencies=direct or not dev,
        dev_dependencies=dev,
        start_dir=start_dir,
    )

    try:
        report = DependencyChecker().check(requested, scope)
    except NpmCheckError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_ERROR)

    if as_json:
        click.echo(json.dumps(report, indent=2))
    else:
        for name, ok in report.items():
            mark = "+" if ok else "!"
            click.echo(f"  [{mark}] {name} {requested[name]}")

    if not all(report.values()):
        sys.exit(EXIT_UNSATISFIED)


@main.command("install-dev")
@click.argument("packages", nargs=-1, required=True)
def install_dev(packages: tuple[str, ...]) -> None:
    """Install PACKAGES with npm and save them as devDependencies."""
    install_dev_dependency(list(packages))


if __name__ == "__main__":
    main()
