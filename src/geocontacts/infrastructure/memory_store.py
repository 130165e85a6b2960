"""In-memory collaborators (no network). Used by tests and the demo backend."""

import math
import uuid
from dataclasses import replace

from geocontacts.application.dto import ContactPage, UniqueKind
from geocontacts.application.errors import Conflict, NotFound
from geocontacts.domain import AddressCandidate, AddressFields, Contact
from geocontacts.domain.national_id import digits_only, is_valid_cpf


class InMemoryContactStore:
    """Stores contacts in memory. Order preserved by insertion.
    Enforces the same rules as the remote service: valid, unique national ID.
    """

    def __init__(self, contacts: list[Contact] | None = None) -> None:
        self._by_id: dict[str, Contact] = {}
        self._order: list[str] = []
        self._emails: dict[str, str] = {}  # email (lowercased) -> name
        for contact in contacts or []:
            self._insert(contact if contact.id else contact.with_id(str(uuid.uuid4())))

    def _insert(self, contact: Contact) -> None:
        self._by_id[contact.id] = contact
        self._order.append(contact.id)

    def _check(self, contact: Contact, *, exclude_id: str | None = None) -> None:
        cpf = digits_only(contact.national_id)
        if not is_valid_cpf(cpf):
            raise Conflict("Invalid national ID")
        for other in self._by_id.values():
            if other.id != exclude_id and digits_only(other.national_id) == cpf:
                raise Conflict("National ID already registered")

    async def list(
        self, search: str | None, page: int, size: int, sort: str
    ) -> ContactPage:
        items = [self._by_id[cid] for cid in self._order]
        if search:
            needle = search.strip().lower()
            needle_digits = digits_only(needle)
            items = [
                c
                for c in items
                if needle in c.name.lower()
                or (needle_digits and needle_digits in digits_only(c.national_id))
            ]
        field_name, _, direction = (sort or "name,asc").partition(",")
        if field_name == "nome":
            field_name = "name"
        if field_name in Contact.__dataclass_fields__:
            items.sort(
                key=lambda c: str(getattr(c, field_name) or "").lower(),
                reverse=direction.lower() == "desc",
            )
        total_pages = math.ceil(len(items) / size) if size > 0 else 0
        start = page * size
        return ContactPage(items=items[start : start + size], total_pages=total_pages)

    async def create(self, contact: Contact) -> Contact:
        self._check(contact)
        stored = contact.with_id(str(uuid.uuid4()))
        self._insert(stored)
        return stored

    async def update(self, contact_id: str, contact: Contact) -> Contact:
        current = self._by_id.get(contact_id)
        if current is None:
            raise NotFound("Contact not found")
        self._check(contact, exclude_id=contact_id)
        stored = replace(contact, id=contact_id)
        self._by_id[contact_id] = stored
        return stored

    async def delete(self, contact_id: str) -> None:
        if contact_id not in self._by_id:
            raise NotFound("Contact not found")
        del self._by_id[contact_id]
        self._order.remove(contact_id)

    async def check_unique(self, kind: UniqueKind, value: str) -> bool:
        if kind == UniqueKind.EMAIL:
            return (value or "").strip().lower() in self._emails
        cpf = digits_only(value)
        return any(digits_only(c.national_id) == cpf for c in self._by_id.values())

    async def register(self, name: str, email: str, password: str) -> None:
        key = (email or "").strip().lower()
        if key in self._emails:
            raise Conflict("Email already registered")
        self._emails[key] = name


class InMemoryAddressLookup:
    """Postal codes and streets from a fixed list of addresses."""

    def __init__(self, addresses: list[AddressFields] | None = None) -> None:
        self._addresses = list(addresses or [])

    async def by_postal_code(self, code: str) -> AddressFields:
        cep = digits_only(code)
        for address in self._addresses:
            if digits_only(address.postal_code) == cep:
                return address
        raise NotFound(f"Postal code {code} not found")

    async def search(self, state: str, city: str, street: str) -> list[AddressCandidate]:
        needle = (street or "").strip().lower()
        return [
            AddressCandidate(
                street=a.street, neighborhood=a.neighborhood, postal_code=a.postal_code
            )
            for a in self._addresses
            if a.state.upper() == (state or "").upper()
            and a.city.lower() == (city or "").lower()
            and needle in a.street.lower()
        ]
