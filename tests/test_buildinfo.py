import os
import stat

from daprcli import buildinfo


def _script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def test_runtime_version_from_binary(tmp_path):
    daprd = _script(tmp_path / "daprd", 'echo "1.7.0"\n')
    assert buildinfo.get_runtime_version(daprd) == "1.7.0\n"


def test_runtime_version_missing_binary(tmp_path):
    assert buildinfo.get_runtime_version(tmp_path / "daprd") == "n/a\n"


def test_dashboard_version_failing_binary(tmp_path):
    dashboard = _script(tmp_path / "dashboard", "exit 3\n")
    assert buildinfo.get_dashboard_version(dashboard) == "n/a\n"


def test_dashboard_version_from_binary(tmp_path):
    dashboard = _script(tmp_path / "dashboard", 'echo "0.10.0"\n')
    assert buildinfo.get_dashboard_version(dashboard) == "0.10.0\n"


def test_build_info_uses_build_info_flag(tmp_path):
    daprd = _script(
        tmp_path / "daprd",
        'if [ "$1" = "--build-info" ]; then echo "Version: 1.7.0"; echo "Git Commit: abc"; '
        "else exit 1; fi\n",
    )
    info = buildinfo.get_build_info("1.0.0", daprd)
    lines = info.split("\n")
    assert lines[0] == "CLI:"
    assert lines[1] == "\tVersion: 1.0.0"
    assert lines[4] == "Runtime:"
    assert lines[5:] == ["\tVersion: 1.7.0", "\tGit Commit: abc"]


def test_build_info_falls_back_to_version(tmp_path):
    daprd = _script(
        tmp_path / "daprd",
        'if [ "$1" = "--version" ]; then echo "1.6.0"; else exit 1; fi\n',
    )
    info = buildinfo.get_build_info("1.0.0", daprd)
    assert info.endswith("Runtime:\n\t1.6.0")


def test_build_info_without_runtime(tmp_path):
    info = buildinfo.get_build_info("edge", tmp_path / "daprd")
    lines = info.split("\n")
    assert lines[1] == "\tVersion: edge"
    assert lines[-2:] == ["Runtime:", "\tN/A"]