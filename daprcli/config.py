"""Write the default runtime configuration and component files."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml

PUBSUB_YAML_FILE_NAME = "pubsub.yaml"
STATE_STORE_YAML_FILE_NAME = "statestore.yaml"

_API_VERSION = "dapr.io/v1alpha1"
_STR_TAG = "tag:yaml.org,2002:str"


class _Dumper(yaml.SafeDumper):
    """Dumper that double-quotes strings which would otherwise read back as another type."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    tag = dumper.resolve(yaml.ScalarNode, value, (True, False))
    style = '"' if value == "" or tag != _STR_TAG else None
    return dumper.represent_scalar(_STR_TAG, value, style=style)


_Dumper.add_representer(str, _represent_str)


def _to_yaml(document: dict[str, Any]) -> bytes:
    text = yaml.dump(
        document,
        Dumper=_Dumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        width=1 << 16,
    )
    return text.encode("utf-8")


def check_and_overwrite_file(file_path: str | os.PathLike[str], data: bytes | str) -> None:
    """Write data to file_path unless a file already exists there."""
    path = Path(file_path)
    if path.exists():
        return
    if isinstance(data, str):
        data = data.encode("utf-8")
    path.write_bytes(data)


def create_default_configuration(zipkin_host: str, file_path: str | os.PathLike[str]) -> None:
    """Write the default configuration; tracing is enabled only when zipkin_host is given."""
    spec: dict[str, Any] = {}
    if zipkin_host:
        spec["tracing"] = {
            "samplingRate": "1",
            "zipkin": {"endpointAddress": f"http://{zipkin_host}:9411/api/v2/spans"},
        }
    document = {
        "apiVersion": _API_VERSION,
        "kind": "Configuration",
        "metadata": {"name": "daprConfig"},
        "spec": spec,
    }
    check_and_overwrite_file(file_path, _to_yaml(document))


def _component(name: str, component_type: str, metadata: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "apiVersion": _API_VERSION,
        "kind": "Component",
        "metadata": {"name": name},
        "spec": {
            "type": component_type,
            "version": "v1",
            "metadata": [{"name": key, "value": value} for key, value in metadata],
        },
    }


def create_redis_state_store(redis_host: str, components_path: str | os.PathLike[str]) -> None:
    """Write the redis state store component into components_path."""
    document = _component(
        "statestore",
        "state.redis",
        [
            ("redisHost", f"{redis_host}:6379"),
            ("redisPassword", ""),
            ("actorStateStore", "true"),
        ],
    )
    check_and_overwrite_file(Path(components_path) / STATE_STORE_YAML_FILE_NAME, _to_yaml(document))


def create_redis_pubsub(redis_host: str, components_path: str | os.PathLike[str]) -> None:
    """Write the redis pub/sub component into components_path."""
    document = _component(
        "pubsub",
        "pubsub.redis",
        [
            ("redisHost", f"{redis_host}:6379"),
            ("redisPassword", ""),
        ],
    )
    check_and_overwrite_file(Path(components_path) / PUBSUB_YAML_FILE_NAME, _to_yaml(document))