"""Report the versions of the locally installed runtime and dashboard."""

from __future__ import annotations

import os
import subprocess

# Filled in at build time.
GIT_COMMIT = ""
GIT_VERSION = ""

_NOT_AVAILABLE = "n/a\n"


def _run(executable: str | os.PathLike[str], flag: str) -> str:
    completed = subprocess.run(
        [os.fspath(executable), flag],
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        check=True,
    )
    return completed.stdout.decode("utf-8", errors="replace")


def _version_of(executable: str | os.PathLike[str]) -> str:
    try:
        return _run(executable, "--version")
    except (OSError, subprocess.CalledProcessError):
        return _NOT_AVAILABLE


def get_runtime_version(daprd_path: str | os.PathLike[str]) -> str:
    """Return the runtime's '--version' output, or 'n/a' when it cannot be run."""
    return _version_of(daprd_path)


def get_dashboard_version(dashboard_path: str | os.PathLike[str]) -> str:
    """Return the dashboard's '--version' output, or 'n/a' when it cannot be run."""
    return _version_of(dashboard_path)


def _scan_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


def get_build_info(version: str, daprd_path: str | os.PathLike[str]) -> str:
    """Return build details of the CLI and of the local runtime."""
    lines = [
        "CLI:",
        "\tVersion: " + version,
        "\tGit Commit: " + GIT_COMMIT,
        "\tGit Version: " + GIT_VERSION,
        "Runtime:",
    ]
    output: str | None
    try:
        output = _run(daprd_path, "--build-info")
    except (OSError, subprocess.CalledProcessError):
        # Older runtimes only understand '--version'.
        try:
            output = _run(daprd_path, "--version")
        except (OSError, subprocess.CalledProcessError):
            output = None

    if output is None:
        lines.append("\tN/A")
    else:
        lines.extend("\t" + line for line in _scan_lines(output))
    return "\n".join(lines)