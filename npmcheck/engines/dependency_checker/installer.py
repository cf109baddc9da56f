"""Install packages as devDependencies through npm."""

from __future__ import annotations

import os
import shlex
import subprocess
from typing import Callable, Sequence

import structlog

log = structlog.get_logger("npmcheck.engine")

# command -> exit code
ProcessRunner = Callable[[Sequence[str]], int]


def run_inherited(cmd: Sequence[str]) -> int:
    """Run *cmd* attached to the caller's terminal and wait for it.

    stdin, stdout and stderr are inherited so the user sees live output.
    """
    return subprocess.run(list(cmd)).returncode


def install_dev_dependency(
    packages: str | Sequence[str],
    runner: ProcessRunner = run_inherited,
    npm: str | None = None,
) -> None:
    """Run ``npm install --save-dev`` for one or more packages.

    *packages* is a single string (whitespace-separated names are split,
    ``"eslint prettier@^3"`` installs two packages) or a sequence of names,
    each optionally qualified with ``@<version>``.

    The exit status is not interpreted; errors raised while spawning the
    process (npm missing from PATH, for instance) propagate.
    """
    names = shlex.split(packages) if isinstance(packages, str) else list(packages)
    if not names:
        raise ValueError("no packages given to install")

    npm = npm or os.environ.get("NPMCHECK_NPM_COMMAND", "npm")
    cmd = [npm, "install", "--save-dev", *names]

    log.info("installer.run", cmd=" ".join(cmd))
    returncode = runner(cmd)
    log.debug("installer.exit", returncode=returncode)
