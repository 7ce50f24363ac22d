"""Triple store endpoint configuration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from triplesync.domain.uris import UriScheme

from .env import (
    optional_env_var,
    optional_non_negative_float,
    optional_positive_int,
    require_env_vars,
)
from .errors import ConfigurationError
from .pool import PoolConfig

ENDPOINT_ENV = "TRIPLESYNC_SPARQL_ENDPOINT"
WIKIBASE_HOST_ENV = "TRIPLESYNC_WIKIBASE_HOST"
MAX_CONNECTIONS_ENV = "TRIPLESYNC_MAX_CONNECTIONS"
READ_TIMEOUT_ENV = "TRIPLESYNC_READ_TIMEOUT"


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Holds everything needed to talk to one SPARQL endpoint."""

    endpoint: str
    uris: UriScheme = field(default_factory=UriScheme)
    pool: PoolConfig = field(default_factory=PoolConfig)


def get_repository_config() -> RepositoryConfig:
    values = require_env_vars((ENDPOINT_ENV,))
    endpoint = values[ENDPOINT_ENV]
    if not endpoint.startswith(("http://", "https://")):
        raise ConfigurationError(f"{ENDPOINT_ENV} must be an http(s) URL, got {endpoint!r}")

    host = optional_env_var(WIKIBASE_HOST_ENV)
    try:
        uris = UriScheme.for_host(host) if host else UriScheme()
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    pool = PoolConfig()
    max_connections = optional_positive_int(MAX_CONNECTIONS_ENV)
    if max_connections is not None:
        pool = replace(
            pool, max_connections=max_connections, max_connections_per_host=max_connections
        )
    read_timeout = optional_non_negative_float(READ_TIMEOUT_ENV)
    if read_timeout is not None:
        pool = replace(pool, read_timeout=read_timeout)

    return RepositoryConfig(endpoint=endpoint, uris=uris, pool=pool)
