"""Credential helpers producing component gateway authorization values."""

from __future__ import annotations

from typing import Any, MutableMapping, Protocol

import google.auth
from google.auth import exceptions as auth_exceptions
from google.auth.transport.requests import Request

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
PROXY_AUTH_HEADER = "Proxy-Authorization"
BEARER_PREFIX = "Bearer "


class CredentialError(RuntimeError):
    """Raised when credentials cannot be loaded or refreshed."""


class CredentialProvider(Protocol):
    """Source of bearer tokens for outbound calls."""

    @property
    def credentials(self) -> Any:
        """Underlying credentials object handed to API clients."""

    @property
    def token(self) -> str | None:
        """Current access token, if one has been fetched."""

    def refresh(self) -> None:
        """Fetch a fresh access token."""

    def refresh_if_expired(self) -> None:
        """Fetch a fresh access token only when the current one is unusable."""


class GoogleCredentialProvider:
    """Wraps ``google.auth`` credentials."""

    def __init__(self, credentials: Any, *, request_factory: Any = Request) -> None:
        self._credentials = credentials
        self._request_factory = request_factory

    @classmethod
    def from_default(cls, *, scopes: tuple[str, ...] = (CLOUD_PLATFORM_SCOPE,)) -> GoogleCredentialProvider:
        """Load application default credentials scoped for cloud-platform access."""

        try:
            credentials, _project = google.auth.default(scopes=list(scopes))
        except auth_exceptions.DefaultCredentialsError as exc:
            raise CredentialError(f"Unable to load default credentials: {exc}") from exc
        return cls(credentials)

    @property
    def credentials(self) -> Any:
        return self._credentials

    @property
    def token(self) -> str | None:
        return self._credentials.token

    def refresh(self) -> None:
        try:
            self._credentials.refresh(self._request_factory())
        except (auth_exceptions.RefreshError, auth_exceptions.TransportError) as exc:
            raise CredentialError("Unable to refresh access token.") from exc

    def refresh_if_expired(self) -> None:
        if not self._credentials.valid:
            self.refresh()


def bearer_token(provider: CredentialProvider) -> str:
    """Refresh the provider and return its access token."""

    provider.refresh()
    token = provider.token
    if not token:
        raise CredentialError("Credential provider returned an empty access token.")
    return token


class ProxyAuthInterceptor:
    """Request hook that stamps the component gateway ``Proxy-Authorization`` header.

    The downstream client instantiates it by dotted name and calls
    :meth:`process` with each outgoing request's headers.
    """

    def __init__(self, provider: CredentialProvider | None = None) -> None:
        self._provider = provider or GoogleCredentialProvider.from_default()
        self._provider.refresh()

    def process(self, headers: MutableMapping[str, str]) -> None:
        headers.pop(PROXY_AUTH_HEADER, None)
        headers[PROXY_AUTH_HEADER] = self.authorization()

    def authorization(self) -> str:
        self._provider.refresh_if_expired()
        return BEARER_PREFIX + (self._provider.token or "")


__all__ = [
    "BEARER_PREFIX",
    "CLOUD_PLATFORM_SCOPE",
    "CredentialError",
    "CredentialProvider",
    "GoogleCredentialProvider",
    "PROXY_AUTH_HEADER",
    "ProxyAuthInterceptor",
    "bearer_token",
]
