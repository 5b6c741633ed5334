"""Parser for ``jdbc:dataproc://`` locators."""

from __future__ import annotations

from typing import Iterable

from .models import DEFAULT_DATABASE, DEFAULT_PORT, ConnectionOptions

URL_PREFIX = "jdbc:dataproc://"

RESERVED_KEYS = frozenset(
    {
        "projectId",
        "region",
        "clusterName",
        "clusterPoolLabel",
        "port",
        "httpPath",
        "transportMode",
    }
)
DRIVER_MANAGED_KEYS = ("httpPath", "transportMode")
REQUIRED_KEYS = ("projectId", "region")
MAX_PORT = 65535


class MalformedLocator(ValueError):
    """Raised when a locator or pool constraint violates the grammar."""


def accepts_locator(url: str | None) -> bool:
    """Return True when the URL is addressed to this driver."""

    return url is not None and url.startswith(URL_PREFIX)


def parse_locator(url: str) -> ConnectionOptions:
    """Parse a locator into validated connection options.

    Accepted shape::

        jdbc:dataproc://hive/<db>;projectId=<p>;region=<r>[;clusterName=<c>]
            [;clusterPoolLabel=<k=v:k=v>][;port=<n>][;<key>=<value>...]
            [?<query>][#<fragment>]
    """

    if not accepts_locator(url):
        raise MalformedLocator(f"'{url}' Locator must start with '{URL_PREFIX}'.")

    # Extras are kept byte-for-byte, control characters included.
    rest, _, fragment = url[len(URL_PREFIX):].partition("#")
    rest, _, query = rest.partition("?")
    _authority, _, path = rest.partition("/")

    database, *pairs = path.split(";")
    if "=" in database:
        raise MalformedLocator(
            f"'{database}' Database name must not contain '='. "
            "If no database is specified, format should be: "
            f"{URL_PREFIX}hive/;projectId=<projectId>;region=<region>"
        )
    while pairs and not pairs[-1]:
        pairs.pop()
    params = _pairs_to_dict(pairs)

    for key in DRIVER_MANAGED_KEYS:
        if key in params:
            raise MalformedLocator(f"Invalid variable.\nPlease do not include {key}.")
    for key in REQUIRED_KEYS:
        if not params.get(key):
            raise MalformedLocator(f"Please provide {key}.")

    return ConnectionOptions(
        project_id=params["projectId"],
        region=params["region"],
        cluster_name=params.get("clusterName") or None,
        cluster_pool_label=params.get("clusterPoolLabel"),
        database=database or DEFAULT_DATABASE,
        port=_parse_port(params["port"]) if "port" in params else DEFAULT_PORT,
        session_extras=_session_extras(params),
        query_extras=query or None,
        fragment_extras=fragment or None,
    )


def _pairs_to_dict(pairs: Iterable[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise MalformedLocator(
                f"'{pair}' Please provide correct format of session configs:\nkey=value"
            )
        # A repeated key keeps its first position and takes the later value.
        params[key] = value
    return params


def _session_extras(params: dict[str, str]) -> str | None:
    extras = ";".join(f"{key}={value}" for key, value in params.items() if key not in RESERVED_KEYS)
    return extras or None


def _parse_port(value: str) -> int:
    if not (value.isascii() and value.isdigit()) or not 0 < int(value) <= MAX_PORT:
        raise MalformedLocator(f"'port={value}'\nPlease indicate correct port number or remove the field.")
    return int(value)


__all__ = [
    "MalformedLocator",
    "RESERVED_KEYS",
    "URL_PREFIX",
    "accepts_locator",
    "parse_locator",
]
