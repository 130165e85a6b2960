"""Infrastructure layer: concrete implementations of application ports."""

from geocontacts.infrastructure.http_gateway import (
    BearerAuth,
    HttpAddressLookup,
    HttpContactStore,
    build_client,
)
from geocontacts.infrastructure.map_surface import InMemoryMapSurface
from geocontacts.infrastructure.memory_store import (
    InMemoryAddressLookup,
    InMemoryContactStore,
)
from geocontacts.infrastructure.session import StaticAuthSession

__all__ = [
    "BearerAuth",
    "HttpAddressLookup",
    "HttpContactStore",
    "InMemoryAddressLookup",
    "InMemoryContactStore",
    "InMemoryMapSurface",
    "StaticAuthSession",
    "build_client",
]
