import json

import pytest
import requests
import responses

from daprcli import releases

BASE = "http://localhost:12345"
HELM_BASE = "http://localhost:12346"
GITHUB_DAPR_URL = "https://api.github.com/repos/dapr/dapr/releases"
GITHUB_DASHBOARD_URL = "https://api.github.com/repos/dapr/dashboard/releases"
HELM_INDEX_URL = "https://dapr.github.io/helm-charts/index.yaml"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def _release(tag, prerelease=False):
    return {
        "url": "https://api.github.com/repos/dapr/dapr/releases/44766923",
        "html_url": f"https://github.com/dapr/dapr/releases/tag/{tag}",
        "id": 44766923,
        "tag_name": tag,
        "target_commitish": "master",
        "name": f"Dapr Runtime {tag}",
        "draft": False,
        "prerelease": prerelease,
    }


GITHUB_OK_CASES = [
    ("/no_rc", [_release("v1.2.3-rc.1"), _release("v1.2.2")], "1.2.2"),
    ("/latest", [_release("v1.4.4"), _release("v1.5.1")], "1.5.1"),
    (
        "/latest_stable",
        [_release("v1.5.2-rc.1", True), _release("v1.4.4"), _release("v1.5.1")],
        "1.5.1",
    ),
]


@pytest.mark.parametrize("path,body,expected", GITHUB_OK_CASES)
def test_get_latest_release_github(mocked, path, body, expected):
    mocked.add(responses.GET, BASE + path, body=json.dumps(body))
    assert releases.get_latest_release_github(BASE + path) == expected


def test_github_malformed_json(mocked):
    mocked.add(responses.GET, BASE + "/malformed", body="[")
    with pytest.raises(releases.ReleaseError):
        releases.get_latest_release_github(BASE + "/malformed")


@pytest.mark.parametrize(
    "path,body",
    [
        ("/only_rcs", json.dumps([_release("v1.2.3-rc.1")]) + "\t\t\t"),
        ("/empty", "[]"),
    ],
)
def test_github_no_releases(mocked, path, body):
    mocked.add(responses.GET, BASE + path, body=body)
    with pytest.raises(releases.ReleaseError, match="^no releases$"):
        releases.get_latest_release_github(BASE + path)


def test_github_error_on_404(mocked):
    url = BASE + "/non-existant/path"
    mocked.add(responses.GET, url, status=404)
    with pytest.raises(releases.ReleaseError) as info:
        releases.get_latest_release_github(url)
    assert str(info.value) == "http://localhost:12345/non-existant/path - 404 Not Found"


def test_github_error_on_bad_addr(mocked):
    with pytest.raises(requests.ConnectionError):
        releases.get_latest_release_github("http://a.super.non.existant.domain/")


def test_github_token_is_sent(mocked, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "token")
    mocked.add(responses.GET, BASE + "/latest", body=json.dumps([_release("v1.5.1")]))
    assert releases.get_latest_release_github(BASE + "/latest") == "1.5.1"
    assert mocked.calls[0].request.headers["Authorization"] == "token token"


HELM_RC_SKIPPED = """apiVersion: v1
entries:
  dapr:
  - apiVersion: v1
    appVersion: 1.2.3-rc.1
    created: "2021-06-17T03:13:24.179849371Z"
    description: A Helm chart for Dapr on Kubernetes
    digest: 60d8d17b58ca316cdcbdb8529cf9ba2c9e2e0834383c677cafbf99add86ee7a0
    name: dapr
    urls:
    - https://dapr.github.io/helm-charts/dapr-1.2.3-rc.1.tgz
    version: 1.2.3-rc.1
  - apiVersion: v1
    appVersion: 1.2.2
    created: "2021-06-17T03:13:24.179849371Z"
    description: A Helm chart for Dapr on Kubernetes
    digest: 60d8d17b58ca316cdcbdb8529cf9ba2c9e2e0834383c677cafbf99add86ee7a0
    name: dapr
    urls:
    - https://dapr.github.io/helm-charts/dapr-1.2.2.tgz
    version: 1.2.2      """

HELM_ONLY_RCS = """apiVersion: v1
entries:
  dapr:
  - apiVersion: v1
    appVersion: 1.2.3-rc.1
    created: "2021-06-17T03:13:24.179849371Z"
    description: A Helm chart for Dapr on Kubernetes
    digest: 60d8d17b58ca316cdcbdb8529cf9ba2c9e2e0834383c677cafbf99add86ee7a0
    name: dapr
    urls:
    - https://dapr.github.io/helm-charts/dapr-1.2.3-rc.1.tgz
    version: 1.2.3-rc.1 """


def test_helm_rc_releases_are_skipped(mocked):
    url = HELM_BASE + "/rcs_are_skiipped"
    mocked.add(responses.GET, url, body=HELM_RC_SKIPPED)
    assert releases.get_latest_release_helm_chart(url) == "1.2.2"


def test_helm_malformed_yaml(mocked):
    url = HELM_BASE + "/malformed"
    mocked.add(responses.GET, url, body="[")
    with pytest.raises(releases.ReleaseError):
        releases.get_latest_release_helm_chart(url)


@pytest.mark.parametrize("path,body", [("/empty", ""), ("/only_rcs", HELM_ONLY_RCS)])
def test_helm_no_releases(mocked, path, body):
    mocked.add(responses.GET, HELM_BASE + path, body=body)
    with pytest.raises(releases.ReleaseError, match="^no releases$"):
        releases.get_latest_release_helm_chart(HELM_BASE + path)


def test_parse_github_releases_direct():
    body = json.dumps([_release("v1.4.4"), _release("v1.5.1")]).encode()
    assert releases.parse_github_releases(body) == "1.5.1"


def test_parse_helm_chart_direct():
    assert releases.parse_helm_chart(HELM_RC_SKIPPED) == "1.2.2"


def test_get_dapr_version_from_github(mocked):
    mocked.add(responses.GET, GITHUB_DAPR_URL, body=json.dumps([_release("v1.5.1")]))
    assert releases.get_dapr_version() == "1.5.1"


def test_get_dapr_version_falls_back_to_helm(mocked):
    mocked.add(responses.GET, GITHUB_DAPR_URL, status=500)
    mocked.add(responses.GET, HELM_INDEX_URL, body=HELM_RC_SKIPPED)
    assert releases.get_dapr_version() == "1.2.2"


def test_get_dapr_version_both_sources_fail(mocked):
    mocked.add(responses.GET, GITHUB_DAPR_URL, status=500)
    mocked.add(responses.GET, HELM_INDEX_URL, body=HELM_ONLY_RCS)
    with pytest.raises(releases.ReleaseError, match="no releases"):
        releases.get_dapr_version()


def test_get_dashboard_version(mocked):
    mocked.add(
        responses.GET,
        GITHUB_DASHBOARD_URL,
        body=json.dumps([_release("v1.4.4"), _release("v1.5.1")]),
    )
    assert releases.get_dashboard_version() == "1.5.1"