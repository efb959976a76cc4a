# pylint: disable=missing-module-docstring,missing-function-docstring

import pytest

from orchestrator.endpoints import ConfigurationError, EndpointPair, EndpointSet
from orchestrator.enums.environment import Environment
from orchestrator.enums.role import Role


PRIMARY = "https://a.example/app/"
BACKUP = "https://b.example/app/"
TEST_PRIMARY = "https://test.example/app/"


def _endpoints(host_identity: str = "") -> EndpointSet:
    return EndpointSet(
        pairs={
            Environment.PROD: EndpointPair(primary=PRIMARY, backup=BACKUP),
            Environment.TEST: EndpointPair(primary=TEST_PRIMARY),
        },
        host_identity=host_identity,
    )


# ---------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------

def test_resolve_primary_and_backup():
    endpoints = _endpoints()

    primary = endpoints.resolve(Environment.PROD, False)
    backup = endpoints.resolve(Environment.PROD, True)

    assert primary.url == PRIMARY
    assert primary.role is Role.PRIMARY
    assert primary.environment is Environment.PROD

    assert backup.url == BACKUP
    assert backup.role is Role.BACKUP


def test_missing_backup_resolves_to_primary_url():
    endpoint = _endpoints().resolve(Environment.TEST, True)

    assert endpoint.url == TEST_PRIMARY
    assert endpoint.role is Role.BACKUP
    assert endpoint.environment is Environment.TEST


def test_unconfigured_environment_falls_back_to_default_primary():
    endpoints = EndpointSet(
        pairs={Environment.PROD: EndpointPair(primary=PRIMARY, backup=BACKUP)},
    )

    for using_backup in (False, True):
        endpoint = endpoints.resolve(Environment.TEST, using_backup)
        assert endpoint.url == PRIMARY
        assert endpoint.role is Role.PRIMARY
        assert endpoint.environment is Environment.PROD


# ---------------------------------------------------------------------
# Rotation
# ---------------------------------------------------------------------

def test_next_environment_rotates_cyclically():
    endpoints = _endpoints()

    assert endpoints.environments == (Environment.PROD, Environment.TEST)
    assert endpoints.next_environment(Environment.PROD) is Environment.TEST
    assert endpoints.next_environment(Environment.TEST) is Environment.PROD


def test_single_environment_rotates_to_itself():
    endpoints = EndpointSet(pairs={Environment.PROD: EndpointPair(primary=PRIMARY)})

    assert endpoints.next_environment(Environment.PROD) is Environment.PROD
    assert endpoints.next_environment(Environment.TEST) is Environment.PROD


def test_environment_with_empty_primary_is_not_configured():
    endpoints = EndpointSet(
        pairs={
            Environment.PROD: EndpointPair(primary=PRIMARY),
            Environment.TEST: EndpointPair(primary=""),
        },
    )

    assert endpoints.environments == (Environment.PROD,)


# ---------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------

def test_default_environment_without_primary_is_rejected():
    with pytest.raises(ConfigurationError):
        EndpointSet(pairs={Environment.TEST: EndpointPair(primary=TEST_PRIMARY)})

    with pytest.raises(ConfigurationError):
        EndpointSet(pairs={Environment.PROD: EndpointPair(primary="")})


def test_from_config_rejects_unknown_default_environment(make_config):
    with pytest.raises(ConfigurationError):
        EndpointSet.from_config(make_config(default_environment="staging"))


def test_from_config_skips_unset_test_environment(make_config):
    endpoints = EndpointSet.from_config(make_config(test_url=None))

    assert endpoints.environments == (Environment.PROD,)
    assert endpoints.default_environment is Environment.PROD


def test_from_config_honors_default_environment(make_config):
    endpoints = EndpointSet.from_config(make_config(default_environment="test"))

    assert endpoints.default_environment is Environment.TEST


def test_configuration_error_is_a_value_error():
    assert issubclass(ConfigurationError, ValueError)


# ---------------------------------------------------------------------
# decorate
# ---------------------------------------------------------------------

def test_decorate_uses_question_mark_without_query():
    assert _endpoints("kiosk-01").decorate(PRIMARY) == PRIMARY + "?host=kiosk-01"


def test_decorate_uses_ampersand_with_query():
    url = PRIMARY + "?lang=en"

    assert _endpoints("kiosk-01").decorate(url) == url + "&host=kiosk-01"


def test_decorate_keeps_fragment_last():
    decorated = _endpoints("kiosk-01").decorate(PRIMARY + "#main")

    assert decorated == PRIMARY + "?host=kiosk-01#main"


def test_decorate_is_idempotent():
    endpoints = _endpoints("kiosk-01")

    once = endpoints.decorate(PRIMARY)

    assert endpoints.decorate(once) == once


def test_decorate_quotes_identity_and_stays_idempotent():
    endpoints = _endpoints("front desk/1")

    once = endpoints.decorate(PRIMARY)

    assert once == PRIMARY + "?host=front%20desk%2F1"
    assert endpoints.decorate(once) == once


def test_decorate_without_identity_is_noop():
    assert _endpoints("").decorate(PRIMARY) == PRIMARY


# ---------------------------------------------------------------------
# matches_prefix
# ---------------------------------------------------------------------

def test_matches_prefix_covers_primary_and_backup():
    endpoints = _endpoints()

    assert endpoints.matches_prefix(PRIMARY + "static/app.js")
    assert endpoints.matches_prefix(BACKUP)
    assert endpoints.matches_prefix(TEST_PRIMARY + "?host=x")


def test_matches_prefix_rejects_other_origins():
    endpoints = _endpoints()

    assert not endpoints.matches_prefix("https://evil.example/app/")
    assert not endpoints.matches_prefix("https://a.example/other/")
