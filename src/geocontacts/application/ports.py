"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from geocontacts.application.dto import ContactPage, Marker, UniqueKind
from geocontacts.domain import AddressCandidate, AddressFields, Contact


class ContactStore(Protocol):
    """Remote contact service. Owns persistence and business rules."""

    async def list(
        self, search: str | None, page: int, size: int, sort: str
    ) -> ContactPage:
        """Return one page of contacts matching the optional search text."""
        ...

    async def create(self, contact: Contact) -> Contact:
        """Create a contact. Raises Conflict if the service rejects it."""
        ...

    async def update(self, contact_id: str, contact: Contact) -> Contact:
        """Replace the contact with the given id. Raises NotFound or Conflict."""
        ...

    async def delete(self, contact_id: str) -> None:
        """Delete the contact. Raises NotFound if it does not exist."""
        ...

    async def check_unique(self, kind: UniqueKind, value: str) -> bool:
        """Return True if a record with this national ID / email already exists."""
        ...


class AccountStore(Protocol):
    async def register(self, name: str, email: str, password: str) -> None:
        """Create a user account. Raises Conflict on rejection."""
        ...


class AddressLookup(Protocol):
    async def by_postal_code(self, code: str) -> AddressFields:
        """Resolve an 8-digit postal code. Raises NotFound or Unavailable."""
        ...

    async def search(
        self, state: str, city: str, street: str
    ) -> list[AddressCandidate]:
        """Fuzzy street search within a state and city. Empty list on no match."""
        ...


class MapSurface(Protocol):
    """The external map widget. The core only drives it."""

    def set_markers(self, markers: list[Marker]) -> None: ...

    def pan_to(self, latitude: float, longitude: float) -> None: ...

    def zoom_to(self, zoom: int) -> None: ...

    def set_view(self, center: tuple[float, float], zoom: int) -> None: ...

    def fit_bounds(self, points: list[tuple[float, float]], padding: int) -> None: ...


class AuthSession(Protocol):
    def bearer_token(self) -> str | None:
        """Credential attached to every remote call, or None when signed out."""
        ...
