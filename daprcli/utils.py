"""Shared helpers: table rendering, process execution, sockets and output formatting."""

from __future__ import annotations

import csv
import dataclasses
import io
import ipaddress
import json
import os
import socket
import subprocess
import sys
import time
from collections.abc import Iterable, Mapping
from typing import Any, TextIO

import yaml

_SOCKET_FORMAT = "{path}/dapr-{app_id}-{protocol}.socket"
_REGISTRY_ENV = "DAPR_DEFAULT_IMAGE_REGISTRY"


def _info(message: str) -> None:
    print(f"ℹ️  {message}", file=sys.stdout)


def _is_num_or_space(ch: str) -> bool:
    return ch.isdigit() or ch == " "


def _title(name: str) -> str:
    """Format a header cell: underscores and separating dots become spaces, upper case."""
    chars = list(name)
    last = len(chars) - 1
    for i, ch in enumerate(chars):
        if ch == "_":
            chars[i] = " "
        elif ch == ".":
            before = i > 0 and not _is_num_or_space(chars[i - 1])
            after = i < last and not _is_num_or_space(chars[i + 1])
            if before or after:
                chars[i] = " "
    result = "".join(chars).strip()
    if not result and name:
        result = " "
    return result.upper()


def _render_line(cells: list[str], widths: list[int]) -> str:
    body = "".join(f" {cell.ljust(width)} " for cell, width in zip(cells, widths))
    return f" {body} \n"


def write_table(writer: TextIO, csv_content: str) -> None:
    """Write comma separated content as a borderless, left-aligned table."""
    lines = csv_content.splitlines()
    if not lines:
        return
    header = [_title(cell) for cell in lines[0].split(",")]
    rows = [line.split(",") for line in lines[1:]]
    all_rows = [header, *rows]
    columns = max(len(row) for row in all_rows)
    table = [row + [""] * (columns - len(row)) for row in all_rows]
    widths = [max(len(cell) for cell in column) for column in zip(*table)]
    for row in table:
        writer.write(_render_line(row, widths))


def print_table(csv_content: str) -> None:
    """Print comma separated content as a table on standard output."""
    write_table(sys.stdout, csv_content)


def truncate_string(text: str, max_length: int) -> str:
    """Shorten text to max_length characters, ending it with '...' when cut."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def run_cmd_and_wait(name: str, *args: str) -> str:
    """Run a command, wait for it and return its standard output.

    Raises RuntimeError carrying the command's standard error when it fails.
    """
    completed = subprocess.run(
        [name, *args],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        check=False,
    )
    if completed.returncode != 0:
        if completed.stderr:
            raise RuntimeError(completed.stderr)
        raise RuntimeError(f"{name} exited with status {completed.returncode}")
    return completed.stdout


def create_container_name(service_container_name: str, docker_network: str) -> str:
    """Scope a container name to a docker network when one is given."""
    if docker_network:
        return f"{service_container_name}_{docker_network}"
    return service_container_name


def create_directory(path: str | os.PathLike[str]) -> None:
    """Create a directory unless something already exists at that path."""
    if os.path.exists(path):
        return
    os.mkdir(path, 0o777)


def _wait_for_connection(connect, timeout: float) -> bool:
    start = time.monotonic()
    while True:
        try:
            connect()
            return True
        except OSError:
            if time.monotonic() - start >= timeout:
                raise
        time.sleep(1)


def is_listening_on_port(port: int, timeout: float) -> bool:
    """Return True once 127.0.0.1:port accepts a TCP connection.

    Retries every second; raises the last connection error after timeout seconds.
    """
    connect_timeout = timeout if timeout > 0 else None

    def connect() -> None:
        with socket.create_connection(("127.0.0.1", port), timeout=connect_timeout):
            pass

    return _wait_for_connection(connect, timeout)


def is_listening_on_socket(socket_path: str, timeout: float) -> bool:
    """Return True once the unix socket accepts a connection.

    Retries every second; raises the last connection error after timeout seconds.
    """
    connect_timeout = timeout if timeout > 0 else None

    def connect() -> None:
        with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as sock:
            sock.settimeout(connect_timeout)
            sock.connect(socket_path)

    return _wait_for_connection(connect, timeout)


def _as_record(row: Any) -> dict[str, Any]:
    if dataclasses.is_dataclass(row) and not isinstance(row, type):
        return {
            field.metadata.get("csv", field.name): getattr(row, field.name)
            for field in dataclasses.fields(row)
        }
    if isinstance(row, Mapping):
        return dict(row)
    raise TypeError(f"cannot tabulate value of type {type(row).__name__}")


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def marshal_and_write_table(writer: TextIO, rows: Iterable[Any]) -> None:
    """Write dataclass instances or mappings as a table, one row each."""
    records = [_as_record(row) for row in rows]
    if not records:
        return
    buffer = io.StringIO()
    out = csv.writer(buffer, lineterminator="\n")
    headers = list(records[0])
    out.writerow(headers)
    for record in records:
        out.writerow(_csv_value(record.get(key)) for key in headers)
    write_table(writer, buffer.getvalue())


def _plain(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, Mapping):
        return {key: _plain(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_plain(item) for item in obj]
    return obj


def print_detail(writer: TextIO, output_format: str, obj: Any) -> None:
    """Write obj as 'yaml' or 'json'; a one-element list is written as its element."""
    if isinstance(obj, (list, tuple)) and len(obj) == 1:
        obj = obj[0]
    data = _plain(obj)
    if output_format == "yaml":
        text = yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    elif output_format == "json":
        text = json.dumps(data, indent=2)
    else:
        text = ""
    writer.write(text)


def is_address_legal(address: str) -> bool:
    """Return True for 'localhost' or a literal IPv4/IPv6 address."""
    if address == "localhost":
        return True
    if "%" in address:
        return False
    try:
        ipaddress.ip_address(address)
    except ValueError:
        return False
    return True


def get_socket(path: str, app_id: str, protocol: str) -> str:
    """Return the unix socket path for an app and protocol."""
    return _SOCKET_FORMAT.format(path=path, app_id=app_id, protocol=protocol)


def get_default_registry(github_registry_name: str, docker_registry_name: str) -> str:
    """Pick the default image registry from DAPR_DEFAULT_IMAGE_REGISTRY."""
    value = os.environ.get(_REGISTRY_ENV, "").lower()
    if value == "":
        _info("Container images will be pulled from Docker Hub")
        return docker_registry_name
    if value == github_registry_name:
        _info("Container images will be pulled from Dapr GitHub container registry")
        return github_registry_name
    raise ValueError(f'environment variable "{_REGISTRY_ENV}" can only be set to GHCR')