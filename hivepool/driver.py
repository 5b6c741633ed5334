"""Driver entry point translating Dataproc locators into Hive connections."""

from __future__ import annotations

import logging
import random
from typing import Any, Callable, Iterable, Mapping, Protocol, runtime_checkable

from .config import ResolverConfig, load_config
from .credentials import CredentialProvider, GoogleCredentialProvider
from .fleet import DataprocFleetClient, FleetClient
from .locator import accepts_locator, parse_locator
from .resolver import PoolResolver

LOG = logging.getLogger(__name__)

Connector = Callable[[str, Mapping[str, str]], Any]
FleetFactory = Callable[[str], FleetClient]


@runtime_checkable
class Driver(Protocol):
    """Interface implemented by registered drivers."""

    def accepts_url(self, url: str | None) -> bool: ...

    def connect(self, url: str, properties: Mapping[str, str] | None = None) -> Any: ...


class DataprocDriver:
    """Resolves ``jdbc:dataproc://`` locators and hands the Hive URL to a connector."""

    def __init__(
        self,
        connector: Connector,
        *,
        config: ResolverConfig | None = None,
        fleet_factory: FleetFactory | None = None,
        credentials: CredentialProvider | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._connector = connector
        self._config = config or load_config()
        if credentials is None and self._config.auth_mode == "token":
            credentials = GoogleCredentialProvider.from_default()
        self._credentials = credentials
        self._fleet_factory = fleet_factory or self._default_fleet
        self._rng = rng

    def accepts_url(self, url: str | None) -> bool:
        return accepts_locator(url)

    def connect(self, url: str, properties: Mapping[str, str] | None = None) -> Any:
        """Open a downstream connection, or return None for foreign URLs."""

        if not self.accepts_url(url):
            return None
        return self._connector(self.translate(url), dict(properties or {}))

    def translate(self, url: str) -> str:
        """Resolve the locator to a Hive connection string.

        The fleet client is created for this call only and closed on every exit path.
        """

        options = parse_locator(url)
        fleet = self._fleet_factory(options.region)
        try:
            resolver = PoolResolver(fleet, config=self._config, credentials=self._credentials, rng=self._rng)
            return resolver.resolve(options)
        finally:
            fleet.close()

    def _default_fleet(self, region: str) -> FleetClient:
        credentials = self._credentials.credentials if self._credentials is not None else None
        return DataprocFleetClient.for_region(
            region,
            credentials=credentials,
            api_endpoint=self._config.api_endpoint,
        )


class DriverRegistry:
    """Drivers registered explicitly by the hosting application."""

    def __init__(self) -> None:
        self._drivers: list[Driver] = []

    def register(self, driver: Driver) -> None:
        """Register a driver; registering the same driver twice is a no-op."""

        if not isinstance(driver, Driver):
            raise ValueError(f"'{type(driver).__name__}' does not implement accepts_url/connect")
        if driver in self._drivers:
            return
        self._drivers.append(driver)
        LOG.debug("Registered driver", extra={"driver": type(driver).__name__})

    def register_many(self, drivers: Iterable[Driver]) -> None:
        for driver in drivers:
            self.register(driver)

    def deregister(self, driver: Driver) -> None:
        self._drivers = [known for known in self._drivers if known is not driver]

    def list_drivers(self) -> list[Driver]:
        """Return the registered drivers in registration order."""

        return list(self._drivers)

    def driver_for(self, url: str) -> Driver:
        for driver in self._drivers:
            if driver.accepts_url(url):
                return driver
        raise LookupError(f"No suitable driver found for '{url}'")

    def connect(self, url: str, properties: Mapping[str, str] | None = None) -> Any:
        """Connect through the first driver accepting the URL."""

        return self.driver_for(url).connect(url, properties)


__all__ = [
    "Connector",
    "DataprocDriver",
    "Driver",
    "DriverRegistry",
    "FleetFactory",
]
