"""Shared fixtures: sample contacts and instrumented in-memory collaborators."""

import pytest

from geocontacts.application import (
    ContactsPage,
    LookupController,
    LookupGateway,
    SelectionSynchronizer,
)
from geocontacts.domain import AddressFields, Contact
from geocontacts.infrastructure import (
    InMemoryAddressLookup,
    InMemoryContactStore,
    InMemoryMapSurface,
)

# Valid national IDs (check digits verified by hand).
CPF_A = "52998224725"
CPF_B = "11144477735"
CPF_C = "12345678909"

QUIET = 0.02


class CountingContactStore(InMemoryContactStore):
    """Records uniqueness checks and delete calls."""

    def __init__(self, contacts=None) -> None:
        super().__init__(contacts)
        self.unique_checks: list[tuple[str, str]] = []
        self.deleted: list[str] = []

    async def check_unique(self, kind, value):
        self.unique_checks.append((kind.value, value))
        return await super().check_unique(kind, value)

    async def delete(self, contact_id):
        self.deleted.append(contact_id)
        await super().delete(contact_id)


class CountingAddressLookup(InMemoryAddressLookup):
    def __init__(self, addresses=None) -> None:
        super().__init__(addresses)
        self.searches: list[tuple[str, str, str]] = []
        self.postal_codes: list[str] = []

    async def search(self, state, city, street):
        self.searches.append((state, city, street))
        return await super().search(state, city, street)

    async def by_postal_code(self, code):
        self.postal_codes.append(code)
        return await super().by_postal_code(code)


class WatchingSurface(InMemoryMapSurface):
    """Remembers which contact ids were drawn as selected at each render."""

    def __init__(self) -> None:
        super().__init__()
        self.renders: list[set[str]] = []

    def set_markers(self, markers) -> None:
        selected = set()
        for m in markers:
            if m.selected:
                selected.update(m.group.contact_ids)
        self.renders.append(selected)
        super().set_markers(markers)


def make_contact(cid, name, lat, lng, cpf=CPF_A, **extra) -> Contact:
    return Contact(
        id=cid,
        name=name,
        national_id=cpf,
        phone="41999998888",
        postal_code="80010000",
        street="Rua XV de Novembro",
        number="100",
        neighborhood="Centro",
        city="Curitiba",
        state="PR",
        latitude=lat,
        longitude=lng,
        **extra,
    )


@pytest.fixture
def contacts() -> list[Contact]:
    return [
        make_contact("a", "Alice", 10.000000, 20.000000, CPF_A),
        make_contact("b", "Bruno", 10.0000001, 20.0000001, CPF_B),
        make_contact("c", "Carla", -25.4284, -49.2733, CPF_C),
        make_contact("d", "Davi", 0.0, 0.0, "98765432100"),
    ]


@pytest.fixture
def addresses() -> list[AddressFields]:
    return [
        AddressFields(
            postal_code="80010000",
            street="Rua XV de Novembro",
            neighborhood="Centro",
            city="Curitiba",
            state="PR",
        ),
        AddressFields(
            postal_code="80020000",
            street="Rua Abc",
            neighborhood="Batel",
            city="Curitiba",
            state="PR",
        ),
    ]


@pytest.fixture
def surface() -> WatchingSurface:
    return WatchingSurface()


@pytest.fixture
def store(contacts) -> CountingContactStore:
    return CountingContactStore(contacts)


@pytest.fixture
def address_lookup(addresses) -> CountingAddressLookup:
    return CountingAddressLookup(addresses)


@pytest.fixture
def gateway(store, address_lookup) -> LookupGateway:
    return LookupGateway(store, address_lookup)


@pytest.fixture
def lookups() -> LookupController:
    return LookupController(quiet_period=QUIET)


@pytest.fixture
def synchronizer(surface) -> SelectionSynchronizer:
    return SelectionSynchronizer(surface)


@pytest.fixture
def page(store, gateway, synchronizer, lookups) -> ContactsPage:
    return ContactsPage(store, gateway, synchronizer, lookups)
