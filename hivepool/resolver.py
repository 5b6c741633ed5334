"""Resolve connection options to a concrete Hive endpoint."""

from __future__ import annotations

import logging
import random
from urllib.parse import urlsplit

from .config import ResolverConfig
from .credentials import CredentialProvider, bearer_token
from .fleet import ClusterNotFound, FleetClient
from .locator import MalformedLocator
from .models import ClusterRecord, ConnectionOptions, ResolvedTarget
from .selection import pick_cluster

LOG = logging.getLogger(__name__)

STATUS_FILTER_KEY = "status.state"
ACTIVE_STATE = "ACTIVE"
CLUSTER_NAME_KEY = "clusterName"
LABEL_PREFIX = "labels."
PROXY_AUTH_SESSION_KEY = "http.header.Proxy-Authorization"
INTERCEPTOR_SESSION_KEY = "http.interceptor"


class ResolutionError(RuntimeError):
    """Raised when no matching or reachable cluster could be found."""


def format_pool_filter(pool_label: str | None) -> str:
    """Translate a ``key=value:key=value`` constraint into a fleet filter.

    ``status.state = ACTIVE`` always comes first; ``ACTIVE`` covers the
    creating, updating and running states.
    """

    assertions: dict[str, str] = {STATUS_FILTER_KEY: ACTIVE_STATE}
    if pool_label is not None:
        for label in pool_label.split(":"):
            field, sep, value = label.partition("=")
            if not sep or not field or not value:
                raise MalformedLocator(
                    f"'{label}' Invalid clusterPoolLabel.\n"
                    "Example format: clusterPoolLabel=field1=value1:field2=value2"
                )
            if field == STATUS_FILTER_KEY:
                raise MalformedLocator(
                    "Please do not provide cluster status as label, "
                    "since clusters are always filtered with status.state = ACTIVE."
                )
            key = field if field == CLUSTER_NAME_KEY else LABEL_PREFIX + field
            if key in assertions:
                raise MalformedLocator(f"{key}. The key portion of a label must be unique.")
            assertions[key] = value
    return " AND ".join(f"{key} = {value}" for key, value in assertions.items())


def endpoint_host(cluster: ClusterRecord) -> str:
    """Host of the first HTTP port the cluster exposes."""

    missing = f"Unable to find a reachable endpoint for cluster '{cluster.name}'."
    uri = next(iter(cluster.http_ports.values()), None)
    if not uri:
        raise ResolutionError(missing)
    try:
        netloc = urlsplit(uri).netloc
    except ValueError as exc:
        raise ResolutionError(missing) from exc
    # Keep case and IPv6 brackets; drop userinfo and port.
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        host = host[: host.find("]") + 1]
    else:
        host = host.partition(":")[0]
    if not host:
        raise ResolutionError(missing)
    return host


class PoolResolver:
    """Looks up a cluster for connection options and renders the Hive URL."""

    def __init__(
        self,
        fleet: FleetClient,
        *,
        config: ResolverConfig | None = None,
        credentials: CredentialProvider | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._fleet = fleet
        self._config = config or ResolverConfig()
        if self._config.auth_mode == "token" and credentials is None:
            raise ValueError("Token authentication requires a credential provider.")
        self._credentials = credentials
        self._rng = rng

    def resolve(self, options: ConnectionOptions) -> str:
        """Return the connection string for the selected cluster."""

        return self.resolve_target(options).url

    def resolve_target(self, options: ConnectionOptions) -> ResolvedTarget:
        cluster = self.find_cluster(options)
        host = endpoint_host(cluster)
        url = self.render(options, host)
        LOG.info(
            "Resolved Hive endpoint",
            extra={"cluster": cluster.name, "host": host, "project": options.project_id, "region": options.region},
        )
        return ResolvedTarget(cluster=cluster, host=host, url=url)

    def find_cluster(self, options: ConnectionOptions) -> ClusterRecord:
        if options.cluster_name is not None:
            return self._cluster_by_name(options)
        return self._cluster_from_pool(options)

    def render(self, options: ConnectionOptions, host: str) -> str:
        """Compose ``<protocol>://<host>:<port>/<db>;...`` for the downstream client."""

        url = (
            f"{self._config.wire_protocol}://{host}:{options.port}/{options.database}"
            f";transportMode={options.transport_mode};httpPath={options.http_path}"
        )
        for key, value in self._auth_params():
            url = f"{url};{key}={value}"
        if options.session_extras is not None:
            url = f"{url};{options.session_extras}"
        if options.query_extras is not None:
            url = f"{url}?{options.query_extras}"
        if options.fragment_extras is not None:
            url = f"{url}#{options.fragment_extras}"
        return url

    def _cluster_by_name(self, options: ConnectionOptions) -> ClusterRecord:
        LOG.debug("Looking up cluster by name", extra={"cluster": options.cluster_name})
        try:
            return self._fleet.get_cluster(options.project_id, options.region, options.cluster_name)
        except ClusterNotFound as exc:
            raise ResolutionError(
                "Unable to retrieve cluster information for "
                f"{options.project_id}/{options.region}/{options.cluster_name}."
            ) from exc

    def _cluster_from_pool(self, options: ConnectionOptions) -> ClusterRecord:
        filter_expr = format_pool_filter(options.cluster_pool_label)
        LOG.debug("Listing cluster pool", extra={"filter": filter_expr})
        missing = (
            f"Unable to find active clusters matching label {filter_expr} "
            f"in {options.project_id}/{options.region}."
        )
        try:
            clusters = list(self._fleet.list_clusters(options.project_id, options.region, filter_expr))
        except ClusterNotFound as exc:
            raise ResolutionError(missing) from exc
        cluster = pick_cluster(clusters, metric=self._config.load_metric, rng=self._rng)
        if cluster is None:
            raise ResolutionError(missing)
        return cluster

    def _auth_params(self) -> list[tuple[str, str]]:
        mode = self._config.auth_mode
        if mode == "token":
            assert self._credentials is not None  # __init__ guards this
            return [("ssl", "true"), (PROXY_AUTH_SESSION_KEY, "Bearer%20" + bearer_token(self._credentials))]
        if mode == "interceptor":
            return [("ssl", "true"), (INTERCEPTOR_SESSION_KEY, self._config.interceptor)]
        return []


def resolve(
    options: ConnectionOptions,
    fleet: FleetClient,
    *,
    config: ResolverConfig | None = None,
    credentials: CredentialProvider | None = None,
    rng: random.Random | None = None,
) -> str:
    """Resolve options against the fleet and return the rendered connection string."""

    return PoolResolver(fleet, config=config, credentials=credentials, rng=rng).resolve(options)


__all__ = [
    "PoolResolver",
    "ResolutionError",
    "endpoint_host",
    "format_pool_filter",
    "resolve",
]
