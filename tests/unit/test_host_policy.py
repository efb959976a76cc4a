# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from orchestrator.endpoints import EndpointPair, EndpointSet
from orchestrator.enums.environment import Environment
from session.host_policy import certificate_trusted, permission_granted


def test_certificate_trusted_only_for_configured_endpoints(make_config):
    endpoints = EndpointSet.from_config(make_config())

    assert certificate_trusted("https://a.example/app/index.html", endpoints, False)
    assert certificate_trusted("https://b.example/app/", endpoints, False)
    assert not certificate_trusted("https://evil.example/", endpoints, False)


@pytest.mark.parametrize(
    "url",
    [
        "https://10.0.0.10.attacker.net/x",
        "https://10.0.0.10:8443/",
        "http://10.0.0.10/",
        "https://10.0.0.10@attacker.net/",
    ],
)
def test_host_extension_and_origin_mismatch_are_not_trusted(url: str):
    endpoints = EndpointSet(
        pairs={Environment.PROD: EndpointPair(primary="https://10.0.0.10")},
    )

    assert not certificate_trusted(url, endpoints, False)


def test_bare_host_endpoint_trusts_every_path():
    endpoints = EndpointSet(
        pairs={Environment.PROD: EndpointPair(primary="https://10.0.0.10")},
    )

    assert certificate_trusted("https://10.0.0.10/app/vocs/", endpoints, False)
    assert certificate_trusted("https://10.0.0.10", endpoints, False)


def test_path_prefix_respects_segment_boundaries(make_config):
    endpoints = EndpointSet.from_config(make_config())

    assert certificate_trusted("https://a.example/app", endpoints, False)
    assert not certificate_trusted("https://a.example/application/", endpoints, False)


def test_dev_mode_bypasses_every_certificate(make_config):
    endpoints = EndpointSet.from_config(make_config())

    assert certificate_trusted("https://evil.example/", endpoints, True)


def test_only_media_permission_is_granted():
    assert permission_granted("media")

    for permission in ("geolocation", "notifications", "clipboard-read", ""):
        assert not permission_granted(permission)
