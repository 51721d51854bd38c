"""Look up the latest released runtime and dashboard versions."""

from __future__ import annotations

import http
import json
import os
import sys
from collections.abc import Callable
from typing import Any

import requests
import yaml
from packaging.version import InvalidVersion, Version

DAPR_GITHUB_ORG = "dapr"
DAPR_GITHUB_REPO = "dapr"
DASHBOARD_GITHUB_REPO = "dashboard"

_GITHUB_RELEASES_URL = "https://api.github.com/repos/{org}/{repo}/releases"
_HELM_CHART_INDEX_URL = "https://dapr.github.io/helm-charts/index.yaml"
_NO_RELEASES = "no releases"


class ReleaseError(Exception):
    """A release listing could not be fetched or held no usable release."""


def get_version_from_url(release_url: str, parse_version: Callable[[bytes], str]) -> str:
    """Fetch release_url and hand the body to parse_version.

    Sends GITHUB_TOKEN as an authorization token when it is set.
    """
    headers = {}
    github_token = os.environ.get("GITHUB_TOKEN", "")
    if github_token:
        headers["Authorization"] = "token " + github_token

    response = requests.get(release_url, headers=headers)
    if response.status_code != http.HTTPStatus.OK:
        reason = response.reason
        if not reason:
            try:
                reason = http.HTTPStatus(response.status_code).phrase
            except ValueError:
                reason = ""
        status = f"{response.status_code} {reason}".strip()
        raise ReleaseError(f"{release_url} - {status}")
    return parse_version(response.content)


def parse_github_releases(body: bytes | str) -> str:
    """Return the highest non-release-candidate version from a GitHub release list."""
    try:
        releases = json.loads(body)
    except ValueError as exc:
        raise ReleaseError(f"malformed release list: {exc}") from exc
    if not isinstance(releases, list):
        raise ReleaseError("malformed release list: expected an array")
    if not releases:
        raise ReleaseError(_NO_RELEASES)

    default = Version("0.0.0")
    latest, latest_text = default, ""
    for release in releases:
        tag = release.get("tag_name", "") if isinstance(release, dict) else ""
        if not isinstance(tag, str) or "-rc" in tag:
            continue
        text = tag.removeprefix("v")
        try:
            current = Version(text)
        except InvalidVersion:
            continue
        if current > latest:
            latest, latest_text = current, text

    if latest == default:
        raise ReleaseError(_NO_RELEASES)
    return latest_text


def _helm_entries(data: Any) -> list[Any]:
    if not isinstance(data, dict):
        return []
    entries = data.get("entries")
    if not isinstance(entries, dict):
        return []
    dapr = entries.get("dapr")
    return dapr if isinstance(dapr, list) else []


def parse_helm_chart(body: bytes | str) -> str:
    """Return the first non-release-candidate app version from a helm chart index."""
    try:
        data = yaml.safe_load(body)
    except yaml.YAMLError as exc:
        raise ReleaseError(f"malformed chart index: {exc}") from exc

    entries = _helm_entries(data)
    if not entries:
        raise ReleaseError(_NO_RELEASES)
    for entry in entries:
        app_version = entry.get("appVersion") if isinstance(entry, dict) else None
        version = "" if app_version is None else str(app_version)
        if "-rc" not in version:
            return version
    raise ReleaseError(_NO_RELEASES)


def get_latest_release_github(github_url: str) -> str:
    """Return the latest stable release version listed by the GitHub API."""
    return get_version_from_url(github_url, parse_github_releases)


def get_latest_release_helm_chart(helm_chart_url: str) -> str:
    """Return the latest stable release version from a helm chart index."""
    return get_version_from_url(helm_chart_url, parse_helm_chart)


def get_dashboard_version() -> str:
    """Return the latest released dashboard version."""
    return get_latest_release_github(
        _GITHUB_RELEASES_URL.format(org=DAPR_GITHUB_ORG, repo=DASHBOARD_GITHUB_REPO)
    )


def get_dapr_version() -> str:
    """Return the latest released runtime version, falling back to the helm chart index."""
    try:
        return get_latest_release_github(
            _GITHUB_RELEASES_URL.format(org=DAPR_GITHUB_ORG, repo=DAPR_GITHUB_REPO)
        )
    except (ReleaseError, requests.RequestException) as exc:
        print(
            f"⚠  Failed to get runtime version: '{exc}'. Trying secondary source",
            file=sys.stdout,
        )
    return get_latest_release_helm_chart(_HELM_CHART_INDEX_URL)