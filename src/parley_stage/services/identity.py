"""Strategies for deriving the caller's identity from a request."""

from __future__ import annotations

from typing import Protocol

from fastapi import Request

from parley_stage.core.settings import settings

_LOOPBACK_HOSTS = frozenset({"127.0.0.1", "::1", "localhost"})


class IdentityResolver(Protocol):
    """Maps an incoming request to an opaque identity key."""

    def resolve(self, request: Request) -> str | None:
        """Return the identity key, or None if the request carries none."""
        ...


class NetworkAddressResolver:
    """Identity is the caller's network address.

    When ``header`` is set (for deployments behind a trusted proxy) the address
    is read from that header; otherwise the socket peer is used. Loopback peers
    are mapped to ``loopback_identity`` so local development gets a stable,
    public-looking address.
    """

    def __init__(self, *, header: str | None = None, loopback_identity: str | None = None) -> None:
        self.header = header
        self.loopback_identity = loopback_identity

    def resolve(self, request: Request) -> str | None:
        if self.header:
            address = request.headers.get(self.header, "").strip()
        else:
            address = request.client.host if request.client else ""

        if not address:
            return None
        if self.loopback_identity and address in _LOOPBACK_HOSTS:
            return self.loopback_identity
        return address


def get_identity_resolver() -> IdentityResolver:
    """Return the resolver configured for this process."""
    return NetworkAddressResolver(
        header=settings.identity_header,
        loopback_identity=settings.loopback_identity,
    )
