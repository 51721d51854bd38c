"""Resolve container image references for the placement, redis and zipkin services."""

from __future__ import annotations

from dataclasses import dataclass

LATEST_VERSION = "latest"

# Used when DAPR_DEFAULT_IMAGE_REGISTRY is not set.
DOCKER_CONTAINER_REGISTRY_NAME = "dockerhub"
DAPR_DOCKER_IMAGE_NAME = "daprio/dapr"
REDIS_DOCKER_IMAGE_NAME = "redis"
ZIPKIN_DOCKER_IMAGE_NAME = "openzipkin/zipkin"

# Used when DAPR_DEFAULT_IMAGE_REGISTRY is set to GHCR.
GITHUB_CONTAINER_REGISTRY_NAME = "ghcr"
GHCR_URI = "ghcr.io/dapr"
DAPR_GHCR_IMAGE_NAME = "dapr"
REDIS_GHCR_IMAGE_NAME = "3rdparty/redis"
ZIPKIN_GHCR_IMAGE_NAME = "3rdparty/zipkin"

_PRIVATE_REGISTRY_TEMPLATE = "{registry}/dapr/{image}"


class ImageRegistryError(ValueError):
    """The image registry settings do not name a usable registry."""


@dataclass(frozen=True)
class ImageInfo:
    """Names of one image in each registry, plus the registry settings in force."""

    ghcr_image_name: str
    docker_hub_image_name: str
    image_registry_url: str = ""
    image_registry_name: str = ""


def resolve_image_uri(image_info: ImageInfo) -> str:
    """Return the full image reference for the configured registry.

    A private registry URL takes precedence; otherwise the registry name picks
    Docker Hub or the GitHub container registry.
    """
    if image_info.image_registry_url.strip():
        if image_info.image_registry_url in (GHCR_URI, "docker.io"):
            raise ImageRegistryError(
                f'flag --image-registry not set correctly. It cannot be "{GHCR_URI}" or "docker.io"'
            )
        return _PRIVATE_REGISTRY_TEMPLATE.format(
            registry=image_info.image_registry_url, image=image_info.ghcr_image_name
        )
    if image_info.image_registry_name == DOCKER_CONTAINER_REGISTRY_NAME:
        return image_info.docker_hub_image_name
    if image_info.image_registry_name == GITHUB_CONTAINER_REGISTRY_NAME:
        return f"{GHCR_URI}/{image_info.ghcr_image_name}"
    raise ImageRegistryError(
        f"imageRegistryName not set correctly {image_info.image_registry_name}"
    )


def use_ghcr(image_info: ImageInfo, from_dir: str) -> bool:
    """True only when GHCR is the default registry and no private registry or bundle is used."""
    if image_info.image_registry_url or from_dir:
        return False
    return image_info.image_registry_name == GITHUB_CONTAINER_REGISTRY_NAME


def placement_image_with_tag(name: str, version: str) -> str:
    """Tag an image with a version, leaving it untagged for 'latest'."""
    if version == LATEST_VERSION:
        return name
    return f"{name}:{version}"


def is_air_gap_init(from_dir: str) -> bool:
    """True when installing from a local bundle directory."""
    return bool(from_dir.strip())