"""Shared dataclasses used across locator/resolver modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping

DEFAULT_DATABASE = ""
DEFAULT_PORT = 443
DEFAULT_HTTP_PATH = "cliservice"
DEFAULT_TRANSPORT_MODE = "http"


class ClusterState(str, Enum):
    """Lifecycle states reported by the cluster controller API."""

    UNKNOWN = "UNKNOWN"
    CREATING = "CREATING"
    RUNNING = "RUNNING"
    ERROR = "ERROR"
    ERROR_DUE_TO_UPDATE = "ERROR_DUE_TO_UPDATE"
    DELETING = "DELETING"
    UPDATING = "UPDATING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    STARTING = "STARTING"
    REPAIRING = "REPAIRING"

    @classmethod
    def parse(cls, value: object) -> ClusterState:
        """Map a raw state (enum member, proto enum or string) to a known state."""

        name = getattr(value, "name", value)
        try:
            return cls(str(name))
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class ConnectionOptions:
    """Validated connection target extracted from a locator."""

    project_id: str
    region: str
    cluster_name: str | None = None
    cluster_pool_label: str | None = None
    database: str = DEFAULT_DATABASE
    port: int = DEFAULT_PORT
    http_path: str = DEFAULT_HTTP_PATH
    transport_mode: str = DEFAULT_TRANSPORT_MODE
    session_extras: str | None = None
    query_extras: str | None = None
    fragment_extras: str | None = None


@dataclass(frozen=True, slots=True)
class ClusterRecord:
    """Read-only snapshot of a cluster as returned by the fleet API."""

    name: str
    state: ClusterState = ClusterState.UNKNOWN
    labels: Mapping[str, str] = field(default_factory=dict)
    http_ports: Mapping[str, str] = field(default_factory=dict)
    metrics: Mapping[str, int] = field(default_factory=dict)

    def load(self, metric: str) -> int:
        """Return the named YARN metric, or 0 when the cluster reports none."""

        return int(self.metrics.get(metric, 0) or 0)


@dataclass(frozen=True, slots=True)
class ResolvedTarget:
    """Outcome of a successful resolution."""

    cluster: ClusterRecord
    host: str
    url: str


__all__ = [
    "ClusterRecord",
    "ClusterState",
    "ConnectionOptions",
    "DEFAULT_DATABASE",
    "DEFAULT_HTTP_PATH",
    "DEFAULT_PORT",
    "DEFAULT_TRANSPORT_MODE",
    "ResolvedTarget",
]
