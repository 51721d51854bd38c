"""Download, unpack and place the runtime, placement and dashboard binaries."""

from __future__ import annotations

import os
import platform
import shutil
import sys
import tarfile
import zipfile
from pathlib import Path

import requests

from daprcli.releases import DAPR_GITHUB_ORG
from daprcli.utils import create_directory, run_cmd_and_wait

DAPR_RUNTIME_FILE_PREFIX = "daprd"
DASHBOARD_FILE_PREFIX = "dashboard"
PLACEMENT_SERVICE_FILE_PREFIX = "placement"

DAPR_WINDOWS_OS = "windows"
ERR_INSTALL_TEMPLATE = "please run `dapr uninstall` first before running `dapr init`"

_RELEASE_URL = "https://github.com/{org}/{repo}/releases/download/v{version}/{name}"
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


class InstallError(Exception):
    """A binary could not be downloaded, unpacked or installed."""


def _target_os() -> str:
    if sys.platform == "win32":
        return DAPR_WINDOWS_OS
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform.startswith("linux"):
        return "linux"
    return platform.system().lower()


def _target_arch() -> str:
    machine = platform.machine().lower()
    if machine in _ARCH_ALIASES:
        return _ARCH_ALIASES[machine]
    if machine.startswith("armv8"):
        return "arm64"
    if machine.startswith("armv"):
        return "arm"
    return machine


def _is_windows() -> bool:
    return _target_os() == DAPR_WINDOWS_OS


def sanitize_extract_path(destination: str | os.PathLike[str], file_path: str) -> str:
    """Join an archive member name onto destination, refusing paths that escape it."""
    destination = os.fspath(destination)
    joined = os.path.normpath(destination + os.sep + file_path)
    if not joined.startswith(os.path.normpath(destination) + os.sep):
        raise InstallError(f"{file_path}: illegal file path")
    return joined


def archive_ext() -> str:
    """Return the release archive extension for this platform."""
    return "zip" if _is_windows() else "tar.gz"


def binary_name(binary_file_prefix: str) -> str:
    """Return the release archive file name for a binary on this platform."""
    return f"{binary_file_prefix}_{_target_os()}_{_target_arch()}.{archive_ext()}"


def download_file(directory: str | os.PathLike[str], url: str) -> str:
    """Download url into directory, naming the file after the URL's last segment."""
    file_name = url.split("/")[-1]
    file_path = os.path.join(os.fspath(directory), file_name)

    with requests.get(url, stream=True) as response:
        if response.status_code == 404:
            raise InstallError(f"version not found from url: {url}")
        if response.status_code != 200:
            raise InstallError(f"download failed with {response.status_code}")
        with open(file_path, "wb") as out:
            for chunk in response.iter_content(chunk_size=64 * 1024):
                out.write(chunk)
    return file_path


def download_binary(
    directory: str | os.PathLike[str], version: str, binary_file_prefix: str, github_repo: str
) -> str:
    """Download the release archive of a binary into directory and return its path."""
    url = _RELEASE_URL.format(
        org=DAPR_GITHUB_ORG,
        repo=github_repo,
        version=version,
        name=binary_name(binary_file_prefix),
    )
    return download_file(directory, url)


def _write_file(path: str, source, mode: int) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
    with os.fdopen(fd, "wb") as out:
        if source is not None:
            shutil.copyfileobj(source, out)


def unzip(
    archive_path: str | os.PathLike[str], target_dir: str | os.PathLike[str], binary_file_prefix: str
) -> str:
    """Extract a zip archive into target_dir and return the path of the '.exe' binary found."""
    try:
        archive = zipfile.ZipFile(archive_path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise InstallError(f"error open zip file {os.fspath(archive_path)}: {exc}") from exc

    found = ""
    with archive:
        for member in archive.infolist():
            path = sanitize_extract_path(target_dir, member.filename)
            if path.endswith(f"{binary_file_prefix}.exe"):
                found = path
            if member.is_dir():
                os.makedirs(path, exist_ok=True)
                continue
            os.makedirs(os.path.dirname(path), exist_ok=True)
            mode = (member.external_attr >> 16) & 0o777 or 0o666
            with archive.open(member) as source:
                _write_file(path, source, mode)
    return found


def untar(
    archive_path: str | os.PathLike[str], target_dir: str | os.PathLike[str], binary_file_prefix: str
) -> str:
    """Extract a gzipped tar archive into target_dir and return the path of the binary found."""
    try:
        archive = tarfile.open(archive_path, "r:gz")
    except FileNotFoundError as exc:
        raise InstallError(f"error open tar gz file {os.fspath(archive_path)}: {exc}") from exc
    except tarfile.TarError as exc:
        raise InstallError(str(exc)) from exc

    found = ""
    with archive:
        for member in archive:
            path = sanitize_extract_path(target_dir, member.name)
            if member.isdir():
                os.makedirs(path, mode=member.mode or 0o777, exist_ok=True)
                continue
            source = archive.extractfile(member) if member.isfile() else None
            _write_file(path, source, member.mode)
            if member.name.endswith(binary_file_prefix):
                found = path
    return found


def extract_file(
    archive_path: str | os.PathLike[str], directory: str | os.PathLike[str], binary_file_prefix: str
) -> str:
    """Extract a release archive in the platform's format and return the binary's path."""
    extract = unzip if archive_ext() == "zip" else untar
    try:
        return extract(archive_path, directory, binary_file_prefix)
    except (InstallError, OSError, tarfile.TarError, zipfile.BadZipFile, EOFError) as exc:
        raise InstallError(f"error extracting {binary_file_prefix} binary: {exc}") from exc


def move_dashboard_files(extracted_file_path: str, directory: str | os.PathLike[str]) -> str:
    """Move the dashboard's web assets and binary into directory and drop the release tree."""
    directory = os.fspath(directory)
    old_web = os.path.join(os.path.dirname(extracted_file_path), "web")
    new_web = os.path.join(directory, "web")
    try:
        os.rename(old_web, new_web)
    except OSError as exc:
        raise InstallError(f"failed to move dashboard files: {exc}") from exc

    base = os.path.basename(extracted_file_path)
    moved = os.path.join(directory, base)
    try:
        os.rename(extracted_file_path, moved)
    except OSError as exc:
        raise InstallError(f"error moving {base} binary to path: {exc}") from exc

    release_dir = os.path.join(directory, "release")
    try:
        if os.path.lexists(release_dir):
            shutil.rmtree(release_dir)
    except OSError as exc:
        raise InstallError(f"error moving dashboard files: {exc}") from exc
    return moved


def _announce_install(dest_dir: str) -> None:
    colour = sys.stdout.isatty()
    if colour:
        sys.stdout.write("\033[33m")
    print(
        f"\nDapr runtime installed to {dest_dir}, you may run the following to add it "
        "to your path if you want to run daprd directly:"
    )
    print(f"    export PATH=$PATH:{dest_dir}")
    if colour:
        sys.stdout.write("\033[0m")


def move_file_to_path(file_path: str, install_location: str) -> str:
    """Copy a binary into install_location and return its installed path."""
    file_name = os.path.basename(file_path)
    dest_dir = install_location
    dest_path = os.path.join(dest_dir, file_name)

    data = Path(file_path).read_bytes()
    create_directory(dest_dir)

    try:
        fd = os.open(dest_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
        with os.fdopen(fd, "wb") as out:
            out.write(data)
    except PermissionError as exc:
        if not _is_windows():
            raise InstallError(f"{exc} - please run with sudo") from exc
        raise

    if _is_windows():
        current_path = os.environ.get("PATH", "")
        if dest_dir.lower() not in current_path.lower():
            path_cmd = (
                "[System.Environment]::SetEnvironmentVariable('Path',"
                "[System.Environment]::GetEnvironmentVariable('Path','user') + '"
                f";{dest_dir}"
                "', 'user')"
            )
            run_cmd_and_wait("powershell", path_cmd)
        return f"{dest_dir}\\daprd.exe"

    if file_name.startswith(DAPR_RUNTIME_FILE_PREFIX) and install_location:
        _announce_install(dest_dir)
    return dest_path


def make_executable(path: str | os.PathLike[str]) -> None:
    """Give a binary full permissions, except on Windows where this is not needed."""
    if not _is_windows():
        os.chmod(path, 0o777)


def binary_installation_required(binary_path: str | os.PathLike[str]) -> bool:
    """Return True when no binary is installed at binary_path; raise if one already is."""
    if os.path.lexists(binary_path):
        raise InstallError(
            f"{os.fspath(binary_path)} file already exists, {ERR_INSTALL_TEMPLATE}"
        )
    return True