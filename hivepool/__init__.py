"""Resolve Dataproc cluster locators into Hive connection strings."""

from .config import ResolverConfig, load_config
from .driver import DataprocDriver, DriverRegistry
from .fleet import ClusterNotFound, DataprocFleetClient, FleetClient, StaticFleetClient
from .locator import MalformedLocator, accepts_locator, parse_locator
from .models import ClusterRecord, ClusterState, ConnectionOptions, ResolvedTarget
from .resolver import PoolResolver, ResolutionError, format_pool_filter, resolve
from .selection import pick_cluster

__version__ = "0.1.0"

__all__ = [
    "ClusterNotFound",
    "ClusterRecord",
    "ClusterState",
    "ConnectionOptions",
    "DataprocDriver",
    "DataprocFleetClient",
    "DriverRegistry",
    "FleetClient",
    "MalformedLocator",
    "PoolResolver",
    "ResolutionError",
    "ResolvedTarget",
    "ResolverConfig",
    "StaticFleetClient",
    "__version__",
    "accepts_locator",
    "format_pool_filter",
    "load_config",
    "parse_locator",
    "pick_cluster",
    "resolve",
]
