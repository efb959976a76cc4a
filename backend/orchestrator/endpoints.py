"""
Configured content endpoints.

Rules:
- Endpoints are immutable values; they are looked up, never mutated.
- Resolution is total over Environment: an unconfigured environment
  resolves to the primary of the default environment.
- URL decoration is pure and idempotent.
"""

from __future__ import annotations

from dataclasses import dataclass
from collections.abc import Mapping
from typing import TYPE_CHECKING
from urllib.parse import parse_qsl, quote, urlsplit, urlunsplit

from orchestrator.enums.environment import Environment
from orchestrator.enums.role import Role

from constants import HOST_IDENTITY_PARAM

if TYPE_CHECKING:
    from config import AppConfig


def _is_under(url: str, base: str) -> bool:
    """Same scheme/host/port as base and a path at or below base's path."""
    try:
        target = urlsplit(url)
        root = urlsplit(base)
        same_origin = (
            root.hostname is not None
            and target.scheme.lower() == root.scheme.lower()
            and target.hostname == root.hostname
            and target.port == root.port
        )
    except ValueError:
        # Unparseable port
        return False

    if not same_origin:
        return False

    base_path = root.path.rstrip("/")
    return target.path == base_path or target.path.startswith(base_path + "/")


class ConfigurationError(ValueError):
    """
    Endpoint configuration cannot be used.

    Raised at startup only. A supported environment that fails to
    resolve is a defect, never a runtime-recoverable condition.
    """


@dataclass(frozen=True)
class Endpoint:
    """Single content endpoint."""
    url: str
    role: Role
    environment: Environment


@dataclass(frozen=True)
class EndpointPair:
    """Primary/backup URLs configured for one environment."""
    primary: str
    backup: str | None = None


class EndpointSet:
    """
    Static description of candidate content endpoints.

    Environments rotate in declaration order (see next_environment).
    """

    def __init__(
        self,
        *,
        pairs: Mapping[Environment, EndpointPair],
        default_environment: Environment = Environment.PROD,
        host_identity: str = "",
    ) -> None:
        default_pair = pairs.get(default_environment)
        if default_pair is None or not default_pair.primary:
            raise ConfigurationError(
                f"default environment {default_environment.value!r} "
                f"has no primary endpoint"
            )

        self._pairs: dict[Environment, EndpointPair] = {
            env: pair for env, pair in pairs.items() if pair.primary
        }
        self._default = default_environment
        self._host_identity = host_identity

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @staticmethod
    def from_config(config: AppConfig) -> EndpointSet:
        pairs: dict[Environment, EndpointPair] = {
            Environment.PROD: EndpointPair(
                primary=config.prod_url,
                backup=config.prod_backup_url,
            ),
        }
        if config.test_url:
            pairs[Environment.TEST] = EndpointPair(
                primary=config.test_url,
                backup=config.test_backup_url,
            )

        try:
            default_environment = Environment(config.default_environment)
        except ValueError as exc:
            raise ConfigurationError(
                f"unknown default environment {config.default_environment!r}"
            ) from exc

        return EndpointSet(
            pairs=pairs,
            default_environment=default_environment,
            host_identity=config.host_identity,
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def default_environment(self) -> Environment:
        return self._default

    @property
    def environments(self) -> tuple[Environment, ...]:
        """Configured environments in declaration order."""
        return tuple(self._pairs)

    def resolve(self, environment: Environment, using_backup: bool) -> Endpoint:
        """
        Return the endpoint to render for (environment, using_backup).

        A configured environment without a backup URL resolves its
        backup role to the primary URL.
        """
        pair = self._pairs.get(environment)
        if pair is None:
            return Endpoint(
                url=self._pairs[self._default].primary,
                role=Role.PRIMARY,
                environment=self._default,
            )

        if using_backup:
            return Endpoint(
                url=pair.backup or pair.primary,
                role=Role.BACKUP,
                environment=environment,
            )

        return Endpoint(url=pair.primary, role=Role.PRIMARY, environment=environment)

    def next_environment(self, current: Environment) -> Environment:
        """Cyclic rotation over configured environments."""
        order = self.environments
        if current not in order:
            return self._default
        return order[(order.index(current) + 1) % len(order)]

    def matches_prefix(self, url: str) -> bool:
        """
        True if url falls under any configured endpoint.

        Scheme, host and port must match exactly; only then is the
        configured path compared, on segment boundaries.
        """
        for pair in self._pairs.values():
            for base in (pair.primary, pair.backup):
                if base and _is_under(url, base):
                    return True
        return False

    # ------------------------------------------------------------------
    # Decoration
    # ------------------------------------------------------------------

    def decorate(self, url: str) -> str:
        """
        Append the host identity parameter to url.

        Uses '?' when url has no query string and '&' otherwise.
        Calling decorate on an already decorated URL returns it unchanged.
        """
        if not self._host_identity:
            return url

        parts = urlsplit(url)
        existing = parse_qsl(parts.query, keep_blank_values=True)
        if (HOST_IDENTITY_PARAM, self._host_identity) in existing:
            return url

        param = f"{HOST_IDENTITY_PARAM}={quote(self._host_identity, safe='')}"
        query = f"{parts.query}&{param}" if parts.query else param
        return urlunsplit(
            (parts.scheme, parts.netloc, parts.path, query, parts.fragment)
        )
