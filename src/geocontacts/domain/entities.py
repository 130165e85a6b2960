"""Domain entities: Contact, address value objects, and LocationGroup."""

import math
from dataclasses import dataclass, field, replace

# Rounding used to decide that two contacts share a map position (~0.11 m).
COORDINATE_PRECISION = 6

REGION_CODES = (
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO", "MA",
    "MT", "MS", "MG", "PA", "PB", "PR", "PE", "PI", "RJ", "RN",
    "RS", "RO", "RR", "SC", "SP", "SE", "TO",
)


def is_valid_coordinate(value: float | None) -> bool:
    """False for None, NaN and exactly zero (zero means "not geocoded")."""
    if value is None:
        return False
    try:
        number = float(value)
    except (TypeError, ValueError):
        return False
    if math.isnan(number):
        return False
    return number != 0.0


@dataclass(frozen=True)
class Contact:
    """
    A person in the address book, as returned by the remote contact service.
    Treated as an immutable snapshot; edits go through a FormDraft.
    """

    id: str | None = None
    name: str = ""
    national_id: str = ""
    phone: str = ""
    postal_code: str = ""
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    latitude: float | None = None
    longitude: float | None = None

    @property
    def has_location(self) -> bool:
        return is_valid_coordinate(self.latitude) and is_valid_coordinate(
            self.longitude
        )

    @property
    def position(self) -> tuple[float, float] | None:
        if not self.has_location:
            return None
        return float(self.latitude), float(self.longitude)

    @property
    def short_address(self) -> str:
        """Street, number - neighborhood; empty parts are skipped."""
        head = ", ".join(p for p in (self.street, self.number) if p)
        if self.neighborhood:
            return f"{head} - {self.neighborhood}" if head else self.neighborhood
        return head

    def with_id(self, contact_id: str) -> "Contact":
        return replace(self, id=contact_id)


@dataclass(frozen=True)
class AddressFields:
    """Address resolved from a postal code. Empty strings mean "not provided"."""

    postal_code: str = ""
    street: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""


@dataclass(frozen=True)
class AddressCandidate:
    """One street-name autocomplete suggestion."""

    street: str
    neighborhood: str = ""
    postal_code: str = ""


@dataclass(frozen=True)
class LocationGroup:
    """
    Contacts sharing one rounded position. Derived from the contact set,
    never stored; member order is first-seen order in the input.
    """

    latitude: float
    longitude: float
    contact_ids: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.contact_ids:
            raise ValueError("LocationGroup must have at least one member.")

    @property
    def key(self) -> str:
        return f"{self.latitude},{self.longitude}"

    @property
    def size(self) -> int:
        return len(self.contact_ids)

    @property
    def is_cluster(self) -> bool:
        return len(self.contact_ids) > 1
