"""Fleet API clients used to look up candidate clusters."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from google.api_core import exceptions as gcp_exceptions
from google.cloud import dataproc_v1

from .models import ClusterRecord, ClusterState

LOG = logging.getLogger(__name__)

DEFAULT_API_ENDPOINT = "{region}-dataproc.googleapis.com:443"


class ClusterNotFound(LookupError):
    """Raised when the fleet API reports that a cluster or pool does not exist."""


@runtime_checkable
class FleetClient(Protocol):
    """Read-only view of the cluster fleet."""

    def get_cluster(self, project_id: str, region: str, cluster_name: str) -> ClusterRecord:
        """Fetch one cluster by name."""

    def list_clusters(self, project_id: str, region: str, filter: str) -> Iterable[ClusterRecord]:
        """List clusters matching the filter expression."""

    def close(self) -> None:
        """Release transport resources."""


class DataprocFleetClient:
    """Fleet client backed by the Dataproc cluster controller API."""

    def __init__(self, controller: Any) -> None:
        self._controller = controller

    @classmethod
    def for_region(
        cls,
        region: str,
        *,
        credentials: Any | None = None,
        api_endpoint: str = DEFAULT_API_ENDPOINT,
    ) -> DataprocFleetClient:
        """Build a client talking to the regional controller endpoint."""

        endpoint = api_endpoint.format(region=region)
        controller = dataproc_v1.ClusterControllerClient(
            credentials=credentials,
            client_options={"api_endpoint": endpoint},
        )
        LOG.debug("Created cluster controller client", extra={"endpoint": endpoint})
        return cls(controller)

    def get_cluster(self, project_id: str, region: str, cluster_name: str) -> ClusterRecord:
        try:
            cluster = self._controller.get_cluster(
                project_id=project_id,
                region=region,
                cluster_name=cluster_name,
            )
        except gcp_exceptions.NotFound as exc:
            raise ClusterNotFound(f"{project_id}/{region}/{cluster_name}") from exc
        return to_record(cluster)

    def list_clusters(self, project_id: str, region: str, filter: str) -> list[ClusterRecord]:
        try:
            return [
                to_record(cluster)
                for cluster in self._controller.list_clusters(
                    project_id=project_id,
                    region=region,
                    filter=filter,
                )
            ]
        except gcp_exceptions.NotFound as exc:
            raise ClusterNotFound(f"{project_id}/{region} [{filter}]") from exc

    def close(self) -> None:
        self._controller.transport.close()


class StaticFleetClient:
    """Fleet client that serves a fixed set of cluster records.

    Filters are matched on ``labels.<key>`` and ``clusterName`` assertions; the
    ``status.state = ACTIVE`` assertion keeps creating, running and updating
    clusters, mirroring the controller API.
    """

    _ACTIVE_STATES = frozenset({ClusterState.CREATING, ClusterState.RUNNING, ClusterState.UPDATING})

    def __init__(self, clusters: Sequence[ClusterRecord]) -> None:
        self._clusters = tuple(clusters)

    def get_cluster(self, project_id: str, region: str, cluster_name: str) -> ClusterRecord:
        for cluster in self._clusters:
            if cluster.name == cluster_name:
                return cluster
        raise ClusterNotFound(f"{project_id}/{region}/{cluster_name}")

    def list_clusters(self, project_id: str, region: str, filter: str) -> list[ClusterRecord]:
        assertions = _parse_filter(filter)
        return [cluster for cluster in self._clusters if self._matches(cluster, assertions)]

    def close(self) -> None:
        return None

    def _matches(self, cluster: ClusterRecord, assertions: Mapping[str, str]) -> bool:
        for key, value in assertions.items():
            if key == "status.state":
                if value == "ACTIVE":
                    if cluster.state not in self._ACTIVE_STATES:
                        return False
                elif cluster.state.value != value:
                    return False
            elif key == "clusterName":
                if cluster.name != value:
                    return False
            elif key.startswith("labels."):
                if cluster.labels.get(key[len("labels."):]) != value:
                    return False
            else:
                return False
        return True


def to_record(cluster: Any) -> ClusterRecord:
    """Normalise a Dataproc ``Cluster`` message into a ``ClusterRecord``."""

    endpoint_config = cluster.config.endpoint_config
    return ClusterRecord(
        name=cluster.cluster_name,
        state=ClusterState.parse(cluster.status.state),
        labels=dict(cluster.labels),
        http_ports=dict(endpoint_config.http_ports),
        metrics={key: int(value) for key, value in cluster.metrics.yarn_metrics.items()},
    )


def _parse_filter(expression: str) -> dict[str, str]:
    assertions: dict[str, str] = {}
    for clause in expression.split(" AND "):
        key, _, value = clause.partition(" = ")
        if key:
            assertions[key.strip()] = value.strip()
    return assertions


__all__ = [
    "ClusterNotFound",
    "DEFAULT_API_ENDPOINT",
    "DataprocFleetClient",
    "FleetClient",
    "StaticFleetClient",
    "to_record",
]
