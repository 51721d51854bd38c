# daprcli

Building blocks for setting up a self-hosted Dapr runtime from Python.

## Modules

- **`daprcli.releases`**: find the newest stable runtime or dashboard version.
  `get_dapr_version()` asks the GitHub releases API and falls back to the Helm
  chart index; `get_dashboard_version()` asks the GitHub releases API.
  `get_latest_release_github(url)` and `get_latest_release_helm_chart(url)`
  work against any URL, and `parse_github_releases` / `parse_helm_chart` parse
  a response body directly. Release candidates (tags containing `-rc`) are
  skipped. When `GITHUB_TOKEN` is set it is sent as an `Authorization: token ...`
  header. Failures raise `ReleaseError`.
- **`daprcli.images`**: `resolve_image_uri(ImageInfo(...))` turns an image
  description into a reference on Docker Hub (`dockerhub`), the GitHub container
  registry (`ghcr`) or a private registry URL. `use_ghcr`,
  `placement_image_with_tag` and `is_air_gap_init` cover the related decisions.
  A misconfigured registry raises `ImageRegistryError`.
- **`daprcli.config`**: `create_default_configuration(zipkin_host, path)` writes
  the default configuration (with Zipkin tracing when a host is given);
  `create_redis_state_store` and `create_redis_pubsub` write `statestore.yaml`
  and `pubsub.yaml` into a components directory. A file that already exists is
  left untouched.
- **`daprcli.install`**: `download_binary` / `download_file` fetch release
  archives; `extract_file`, `unzip` and `untar` unpack them, refusing member
  paths that escape the target directory; `move_dashboard_files`,
  `move_file_to_path` and `make_executable` put binaries in place.
  `binary_installation_required(path)` raises when a binary is already
  installed. Failures raise `InstallError`.
- **`daprcli.buildinfo`**: `get_runtime_version(path)` and
  `get_dashboard_version(path)` run a binary with `--version` and return its
  output, or `"n/a\n"` when it cannot be run; `get_build_info(version, path)`
  formats CLI and runtime build details.
- **`daprcli.utils`**: borderless table output from CSV text (`write_table`,
  `print_table`, `marshal_and_write_table`), JSON or YAML detail output
  (`print_detail`), command execution (`run_cmd_and_wait`, which raises
  `RuntimeError` with the command's error output), port and unix-socket
  readiness checks, and small helpers such as `truncate_string`,
  `create_container_name`, `is_address_legal`, `get_socket` and
  `get_default_registry` (driven by `DAPR_DEFAULT_IMAGE_REGISTRY`).

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## Examples

Find the latest stable runtime version:

```python
from daprcli.releases import get_dapr_version

print(get_dapr_version())
```

Resolve an image reference:

```python
from daprcli.images import ImageInfo, resolve_image_uri

info = ImageInfo(
    ghcr_image_name="3rdparty/redis",
    docker_hub_image_name="redis",
    image_registry_url="",
    image_registry_name="ghcr",
)
print(resolve_image_uri(info))  # ghcr.io/dapr/3rdparty/redis
```

Write the default configuration with Zipkin tracing:

```python
from daprcli.config import create_default_configuration

create_default_configuration("localhost", "config.yaml")
```

Print a table:

```python
from daprcli.utils import print_table

print_table("APP ID,PORT\norders,3500\n")
```

## What this package does not do

It is a library of pieces, not a finished tool. There is no command-line
program, and nothing here runs a complete init or uninstall: it does not start,
stop or remove the placement, Redis or Zipkin containers, does not read
installer bundles for offline setup, and does not list or stop running
applications. Callers combine the functions above to build those flows.